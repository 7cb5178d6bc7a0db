"""Tests for Web3LedgerClient: proves calls reach the contract and failures are classified."""

from unittest.mock import MagicMock

import pytest
import requests
from eth_account import Account
from hexbytes import HexBytes
from web3 import Web3
from web3.exceptions import ContractLogicError, ProviderConnectionError, TimeExhausted

from fakes import CONTRACT, PRIVATE_KEY, WALLET
from prism_attest.errors import (
    ConfigurationError,
    ExecutionRejected,
    LedgerStep,
    TransientNetworkError,
)
from prism_attest.ledger.client import Web3LedgerClient, classify_chain_error
from prism_attest.ledger.gas import DynamicGasStrategy
from prism_attest.ledger.signer import TransactionSigner


TX_HASH = HexBytes(b"\x12" * 32)
RECEIPT = {"status": 1, "blockNumber": 42, "gasUsed": 51_000}


def _client(signer: object = None) -> tuple[Web3LedgerClient, MagicMock, MagicMock]:
    w3 = MagicMock()
    contract = w3.eth.contract.return_value
    client = Web3LedgerClient(w3, CONTRACT, signer=signer, receipt_timeout_seconds=5)  # type: ignore[arg-type]
    return client, w3, contract


def _signer() -> MagicMock:
    signer = MagicMock()
    signer.send.return_value = TX_HASH
    return signer


class TestReads:
    def test_is_human(self) -> None:
        client, _, contract = _client()
        contract.functions.isHuman.return_value.call.return_value = True
        assert client.is_human(WALLET) is True
        contract.functions.isHuman.assert_called_once_with(Web3.to_checksum_address(WALLET))

    def test_token_id_for(self) -> None:
        client, _, contract = _client()
        contract.functions.tokenIdFor.return_value.call.return_value = 7
        assert client.token_id_for(WALLET.lower()) == 7

    def test_reads_do_not_need_signer(self) -> None:
        client, _, contract = _client()
        contract.functions.isHuman.return_value.call.return_value = False
        assert client.is_human(WALLET) is False
        assert not client.can_write

    def test_unreachable_endpoint_is_transient(self) -> None:
        client, _, contract = _client()
        contract.functions.tokenIdFor.return_value.call.side_effect = (
            requests.exceptions.ConnectionError("connection refused")
        )
        with pytest.raises(TransientNetworkError) as info:
            client.token_id_for(WALLET)
        assert info.value.step == LedgerStep.TOKEN_ID_RESOLVE

    def test_contract_address_checksummed(self) -> None:
        _, w3, _ = _client()
        kwargs = w3.eth.contract.call_args.kwargs
        assert kwargs["address"] == Web3.to_checksum_address(CONTRACT)


class TestWrites:
    def test_write_without_signer(self) -> None:
        client, _, _ = _client()
        with pytest.raises(ConfigurationError):
            client.revoke(WALLET)

    def test_mint_attestation_receipt(self) -> None:
        signer = _signer()
        client, w3, contract = _client(signer)
        w3.eth.wait_for_transaction_receipt.return_value = RECEIPT
        commitment = b"\x01" * 32

        receipt = client.mint_attestation(WALLET, commitment, 8700)

        contract.functions.mintAttestation.assert_called_once_with(
            Web3.to_checksum_address(WALLET), commitment, 8700,
        )
        signer.send.assert_called_once_with(w3, contract.functions.mintAttestation.return_value)
        assert receipt.tx_hash == "0x" + "12" * 32
        assert receipt.block_number == 42
        assert receipt.gas_used == 51_000
        assert receipt.succeeded

    def test_receipt_wait_uses_timeout(self) -> None:
        client, w3, _ = _client(_signer())
        w3.eth.wait_for_transaction_receipt.return_value = RECEIPT
        client.revoke(WALLET)
        assert w3.eth.wait_for_transaction_receipt.call_args.kwargs["timeout"] == 5

    def test_store_verification(self) -> None:
        client, w3, contract = _client(_signer())
        w3.eth.wait_for_transaction_receipt.return_value = RECEIPT
        client.store_verification(b"\x02" * 32)
        contract.functions.storeVerification.assert_called_once_with(b"\x02" * 32)

    def test_reverted_receipt(self) -> None:
        client, w3, _ = _client(_signer())
        w3.eth.wait_for_transaction_receipt.return_value = {"status": 0, "blockNumber": 42}
        with pytest.raises(ExecutionRejected) as info:
            client.revoke(WALLET)
        assert info.value.step == LedgerStep.REVOKE
        assert info.value.tx_hash == "0x" + "12" * 32

    def test_receipt_timeout_keeps_tx_hash(self) -> None:
        client, w3, _ = _client(_signer())
        w3.eth.wait_for_transaction_receipt.side_effect = TimeExhausted("no receipt")
        with pytest.raises(TransientNetworkError, match="may still be included") as info:
            client.mint_attestation(WALLET, b"\x01" * 32, 5000)
        assert info.value.tx_hash == "0x" + "12" * 32
        assert info.value.retryable

    def test_broadcast_rejection(self) -> None:
        signer = _signer()
        signer.send.side_effect = ValueError({"code": -32000, "message": "nonce too low"})
        client, w3, _ = _client(signer)
        with pytest.raises(ExecutionRejected, match="nonce conflict") as info:
            client.mint_attestation(WALLET, b"\x01" * 32, 5000)
        assert info.value.tx_hash is None
        w3.eth.wait_for_transaction_receipt.assert_not_called()

    def test_broadcast_unreachable(self) -> None:
        signer = _signer()
        signer.send.side_effect = requests.exceptions.ConnectTimeout("timed out")
        client, _, _ = _client(signer)
        with pytest.raises(TransientNetworkError):
            client.store_verification(b"\x02" * 32)

    def test_unexpected_send_failure_is_rejection(self) -> None:
        signer = _signer()
        signer.send.side_effect = KeyError("gas")
        client, w3, _ = _client(signer)
        with pytest.raises(ExecutionRejected, match="could not be prepared") as info:
            client.revoke(WALLET)
        assert info.value.step == LedgerStep.REVOKE
        w3.eth.wait_for_transaction_receipt.assert_not_called()

    def test_dynamic_gas_on_legacy_chain(self) -> None:
        signer = TransactionSigner(
            Account.from_key(PRIVATE_KEY), DynamicGasStrategy(), chain_id=80002,
        )
        client, w3, _ = _client(signer)
        w3.eth.get_transaction_count.return_value = 0
        w3.eth.get_block.return_value = {"number": 1}
        with pytest.raises(ConfigurationError, match="EIP-1559"):
            client.mint_attestation(WALLET, b"\x01" * 32, 5000)
        w3.eth.send_raw_transaction.assert_not_called()


class TestClassification:
    def test_contract_revert(self) -> None:
        error = classify_chain_error(ContractLogicError("execution reverted: not admin"), LedgerStep.REVOKE)
        assert isinstance(error, ExecutionRejected)
        assert error.step == LedgerStep.REVOKE

    def test_insufficient_funds(self) -> None:
        error = classify_chain_error(
            ValueError("insufficient funds for gas * price + value"), LedgerStep.MINT,
        )
        assert isinstance(error, ExecutionRejected)
        assert "insufficient balance" in str(error)

    def test_underpriced_replacement(self) -> None:
        error = classify_chain_error(
            ValueError("replacement transaction underpriced"), LedgerStep.MINT,
        )
        assert "nonce conflict" in str(error)

    def test_provider_connection_error(self) -> None:
        error = classify_chain_error(ProviderConnectionError("down"), LedgerStep.IS_HUMAN)
        assert isinstance(error, TransientNetworkError)

    def test_builtin_timeout(self) -> None:
        error = classify_chain_error(TimeoutError(), LedgerStep.MINT)
        assert isinstance(error, TransientNetworkError)

    def test_unknown_rejection(self) -> None:
        error = classify_chain_error(ValueError("something odd"), LedgerStep.MINT)
        assert isinstance(error, ExecutionRejected)
        assert not error.retryable
