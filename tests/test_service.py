"""Tests for AttestationService: proves the facade reports outcomes as typed results."""

import pytest

from fakes import CONTRACT, FIXED_NOW, PRIVATE_KEY, WALLET, FakeLedger
from prism_attest.config import AttestationConfig
from prism_attest.errors import ExecutionRejected, LedgerStep, TransientNetworkError
from prism_attest.ledger.client import Web3LedgerClient
from prism_attest.service import AttestationService


@pytest.fixture
def service(config: AttestationConfig, ledger: FakeLedger) -> AttestationService:
    return AttestationService(config, ledger, clock=lambda: FIXED_NOW)


class TestMint:
    def test_success_wire_shape(self, service: AttestationService) -> None:
        result = service.mint(WALLET, confidence_score=0.87, session_id="s-1")
        assert result.success
        assert set(result.data) == {"txHash", "proofHashHex", "expiresAtEpochSec", "tokenId"}
        assert result.data["expiresAtEpochSec"] == FIXED_NOW + 604_800
        assert result.data["tokenId"] == 1

    def test_validation_failure(self, service: AttestationService) -> None:
        result = service.mint("", confidence_score=0.5)
        assert not result.success
        assert result.error_kind == "validation"
        assert not result.retryable
        assert result.failed_step is None

    def test_transient_failure_is_retryable(
        self, service: AttestationService, ledger: FakeLedger,
    ) -> None:
        ledger.fail["mint_attestation"] = TransientNetworkError("unreachable", LedgerStep.MINT)
        result = service.mint(WALLET, confidence_score=0.5)
        assert not result.success
        assert result.error_kind == "transient_network"
        assert result.failed_step == "mint"
        assert result.retryable

    def test_partial_completion_reported(
        self, service: AttestationService, ledger: FakeLedger,
    ) -> None:
        service.mint(WALLET, confidence_score=0.5)
        ledger.fail["mint_attestation"] = ExecutionRejected(
            "reverted", LedgerStep.MINT, tx_hash="0x" + "ee" * 32,
        )
        result = service.mint(WALLET, confidence_score=0.5, force=True)
        assert result.error_kind == "execution_rejected"
        assert result.completed_steps == ["revoke"]
        assert result.data["txHash"] == "0x" + "ee" * 32

    def test_configuration_failure(self, ledger: FakeLedger) -> None:
        service = AttestationService(AttestationConfig(), ledger)
        result = service.mint(WALLET, confidence_score=0.5)
        assert result.error_kind == "configuration"
        assert ledger.calls == []


class TestLegacyAndStatus:
    def test_store_legacy_proof(self, service: AttestationService, ledger: FakeLedger) -> None:
        result = service.store_legacy_proof("x")
        assert result.success
        assert result.data["txHash"].startswith("0x")
        assert len(ledger.stored) == 1

    def test_status(self, service: AttestationService) -> None:
        service.mint(WALLET, confidence_score=0.9)
        result = service.status(WALLET)
        assert result.data == {"wallet": WALLET, "isHuman": True, "tokenId": 1}

    def test_status_without_signing_key(self, ledger: FakeLedger) -> None:
        service = AttestationService(AttestationConfig(contract_address=CONTRACT), ledger)
        result = service.status(WALLET)
        assert result.success
        assert result.data["isHuman"] is False

    def test_status_without_ledger(self) -> None:
        result = AttestationService(AttestationConfig()).status(WALLET)
        assert result.error_kind == "configuration"


class TestFromConfig:
    def test_no_contract_means_no_ledger(self) -> None:
        service = AttestationService.from_config(AttestationConfig(private_key=PRIVATE_KEY))
        result = service.mint(WALLET, confidence_score=0.5)
        assert result.error_kind == "configuration"

    def test_builds_web3_client(self) -> None:
        config = AttestationConfig(
            rpc_url="http://127.0.0.1:8545", contract_address=CONTRACT,
            private_key=PRIVATE_KEY, chain_id=31337,
        )
        service = AttestationService.from_config(config)
        assert isinstance(service._ledger, Web3LedgerClient)
        assert service._ledger.can_write

    def test_read_only_client_without_key(self) -> None:
        config = AttestationConfig(rpc_url="http://127.0.0.1:8545", contract_address=CONTRACT)
        service = AttestationService.from_config(config)
        assert isinstance(service._ledger, Web3LedgerClient)
        assert not service._ledger.can_write
