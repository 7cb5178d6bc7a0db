"""Attestation service: unified facade for the minting workflow.

This is the interface the upload layer calls. It wires the Web3
provider, signer, gas strategy, ledger client and minter from one
AttestationConfig, and turns every outcome into a ServiceResult instead
of an exception. A failed result carries the error kind, the failing
ledger step and whether a retry is safe, so callers branch on fields
rather than on message text.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from web3 import Web3

from prism_attest.config import AttestationConfig
from prism_attest.errors import AttestationError, ChainError, ConfigurationError
from prism_attest.ledger.client import LedgerClient, Web3LedgerClient
from prism_attest.ledger.signer import TransactionSigner
from prism_attest.minter import AttestationMinter, validate_wallet
from prism_attest.models.attestation import AttestationRequest

logger = logging.getLogger(__name__)


@dataclass
class ServiceResult:
    """Result of a service operation."""
    success: bool
    errors: list[str] = field(default_factory=list)
    data: dict[str, Any] = field(default_factory=dict)
    error_kind: Optional[str] = None
    failed_step: Optional[str] = None
    completed_steps: list[str] = field(default_factory=list)
    retryable: bool = False

    @classmethod
    def ok(cls, data: dict[str, Any]) -> ServiceResult:
        return cls(success=True, data=data)

    @classmethod
    def failed(cls, exc: AttestationError) -> ServiceResult:
        result = cls(
            success=False,
            errors=[str(exc)],
            error_kind=exc.kind.value,
            retryable=exc.retryable,
        )
        if isinstance(exc, ChainError):
            result.failed_step = exc.step.value
            result.completed_steps = [s.value for s in exc.completed_steps]
            if exc.tx_hash:
                result.data["txHash"] = exc.tx_hash
        return result


class AttestationService:
    """Facade over the attestation workflow.

    Usage:
        config = AttestationConfig.from_env()
        service = AttestationService.from_config(config)
        result = service.mint("0xAbC...", confidence_score=0.87, session_id="s-1")
        if result.success:
            print(result.data["tokenId"])
        elif result.retryable:
            ...
    """

    def __init__(
        self,
        config: AttestationConfig,
        ledger: Optional[LedgerClient] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config
        self._ledger = ledger
        self._minter = AttestationMinter(config, ledger, clock=clock)

    @classmethod
    def from_config(cls, config: AttestationConfig) -> AttestationService:
        """Build the service against a live JSON-RPC endpoint.

        Without a contract address no ledger client is built and every
        ledger operation reports a configuration error. Without a
        private key the client is read-only.
        """
        ledger: Optional[LedgerClient] = None
        if config.contract_address:
            w3 = Web3(Web3.HTTPProvider(
                config.rpc_url,
                request_kwargs={"timeout": config.request_timeout_seconds},
            ))
            signer = TransactionSigner.from_config(config) if config.can_sign else None
            ledger = Web3LedgerClient(
                w3,
                config.contract_address,
                signer=signer,
                receipt_timeout_seconds=config.receipt_timeout_seconds,
            )
        return cls(config, ledger)

    @property
    def config(self) -> AttestationConfig:
        return self._config

    def mint(
        self,
        wallet: str,
        confidence_score: float,
        session_id: Optional[str] = None,
        force: bool = False,
    ) -> ServiceResult:
        request = AttestationRequest(
            wallet=wallet,
            confidence_score=confidence_score,
            session_id=session_id,
            force=force,
        )
        try:
            attestation = self._minter.mint(request)
        except AttestationError as exc:
            logger.warning("Mint for %s failed (%s): %s", wallet, exc.kind.value, exc)
            return ServiceResult.failed(exc)
        return ServiceResult.ok(attestation.to_dict())

    def store_legacy_proof(self, data: str) -> ServiceResult:
        try:
            tx_hash = self._minter.store_legacy_proof(data)
        except AttestationError as exc:
            logger.warning("Legacy proof store failed (%s): %s", exc.kind.value, exc)
            return ServiceResult.failed(exc)
        return ServiceResult.ok({"txHash": tx_hash})

    def status(self, wallet: str) -> ServiceResult:
        """Read the wallet's current attestation state. No signing key needed."""
        try:
            wallet = validate_wallet(wallet)
            if self._ledger is None:
                raise ConfigurationError("Missing configuration: PRISM_CONTRACT_ADDRESS")
            is_human = self._ledger.is_human(wallet)
            token_id = self._ledger.token_id_for(wallet)
        except AttestationError as exc:
            return ServiceResult.failed(exc)
        return ServiceResult.ok({"wallet": wallet, "isHuman": is_human, "tokenId": token_id})
