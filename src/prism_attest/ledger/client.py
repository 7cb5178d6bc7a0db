"""Ledger client for the PRISMRegistry contract.

The ledger owns all attestation state (isHuman flag, token id, stored
proof hash, expiry). This client only observes it and moves it through
signed transactions.

Reads are plain eth_call round trips and may run concurrently. Writes go
through the TransactionSigner and block until a receipt is in hand.

Every failure is raised as a ChainError subclass:
- TransientNetworkError: the endpoint was unreachable or did not answer
  in time. Retrying later is safe.
- ExecutionRejected: the node or the contract refused the transaction
  (revert, insufficient funds, nonce conflict, underpriced replacement).

A receipt wait that times out is transient, but the transaction was
already broadcast and may still be included after the caller gives up.
The error carries the tx hash so that the caller can check before
retrying. Nothing here can recall a broadcast transaction.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

import requests
from web3 import Web3
from web3.exceptions import (
    ContractLogicError,
    ProviderConnectionError,
    TimeExhausted,
    Web3Exception,
)

from prism_attest.errors import (
    AttestationError,
    ChainError,
    ConfigurationError,
    ExecutionRejected,
    LedgerStep,
    TransientNetworkError,
)
from prism_attest.ledger.contract import PRISM_REGISTRY_ABI
from prism_attest.ledger.signer import TransactionSigner
from prism_attest.models.attestation import TxReceipt

logger = logging.getLogger(__name__)


_TRANSIENT_ERRORS: tuple[type[BaseException], ...] = (
    requests.exceptions.ConnectionError,
    requests.exceptions.Timeout,
    ProviderConnectionError,
    ConnectionError,
    TimeoutError,
)

# Substrings nodes use for rejections, mapped to a stable reason label.
_REJECTION_REASONS = (
    ("nonce too low", "nonce conflict"),
    ("nonce too high", "nonce conflict"),
    ("already known", "nonce conflict"),
    ("replacement transaction underpriced", "nonce conflict"),
    ("insufficient funds", "insufficient balance"),
    ("execution reverted", "execution reverted"),
)


class LedgerReader(Protocol):
    def is_human(self, wallet: str) -> bool: ...

    def token_id_for(self, wallet: str) -> int: ...


class LedgerWriter(Protocol):
    def revoke(self, wallet: str) -> TxReceipt: ...

    def mint_attestation(
        self, wallet: str, commitment: bytes, confidence_bps: int
    ) -> TxReceipt: ...

    def store_verification(self, proof_hash: bytes) -> TxReceipt: ...


class LedgerClient(LedgerReader, LedgerWriter, Protocol):
    """Full read/write capability over the registry."""


def classify_chain_error(
    exc: BaseException,
    step: LedgerStep,
    tx_hash: Optional[str] = None,
) -> ChainError:
    """Map a web3/transport exception onto the ChainError taxonomy."""
    if isinstance(exc, TimeExhausted):
        return TransientNetworkError(
            "transaction was broadcast but no receipt arrived in time; "
            "it may still be included",
            step,
            tx_hash=tx_hash,
        )
    if isinstance(exc, _TRANSIENT_ERRORS):
        return TransientNetworkError(f"ledger endpoint unreachable: {exc}", step, tx_hash=tx_hash)
    if isinstance(exc, ContractLogicError):
        return ExecutionRejected(f"execution reverted: {exc}", step, tx_hash=tx_hash)

    text = str(exc)
    lowered = text.lower()
    for marker, reason in _REJECTION_REASONS:
        if marker in lowered:
            return ExecutionRejected(f"{reason}: {text}", step, tx_hash=tx_hash)
    return ExecutionRejected(f"rejected by ledger: {text}", step, tx_hash=tx_hash)


class Web3LedgerClient:
    """LedgerClient backed by a web3 contract handle.

    Built without a signer, the client is read-only and writes raise
    ConfigurationError.

    Usage:
        w3 = Web3(Web3.HTTPProvider(config.rpc_url))
        client = Web3LedgerClient(w3, config.contract_address, signer)
        if client.is_human(wallet):
            client.revoke(wallet)
    """

    def __init__(
        self,
        w3: Web3,
        contract_address: str,
        signer: Optional[TransactionSigner] = None,
        receipt_timeout_seconds: float = 120,
        poll_latency_seconds: float = 0.5,
    ) -> None:
        self._w3 = w3
        self._contract = w3.eth.contract(
            address=Web3.to_checksum_address(contract_address),
            abi=PRISM_REGISTRY_ABI,
        )
        self._signer = signer
        self._receipt_timeout = receipt_timeout_seconds
        self._poll_latency = poll_latency_seconds

    @property
    def contract_address(self) -> str:
        return self._contract.address

    @property
    def can_write(self) -> bool:
        return self._signer is not None

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def is_human(self, wallet: str) -> bool:
        call = self._contract.functions.isHuman(Web3.to_checksum_address(wallet))
        return bool(self._read(LedgerStep.IS_HUMAN, call))

    def token_id_for(self, wallet: str) -> int:
        call = self._contract.functions.tokenIdFor(Web3.to_checksum_address(wallet))
        return int(self._read(LedgerStep.TOKEN_ID_RESOLVE, call))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def revoke(self, wallet: str) -> TxReceipt:
        call = self._contract.functions.revoke(Web3.to_checksum_address(wallet))
        return self._transact(LedgerStep.REVOKE, call)

    def mint_attestation(
        self, wallet: str, commitment: bytes, confidence_bps: int
    ) -> TxReceipt:
        call = self._contract.functions.mintAttestation(
            Web3.to_checksum_address(wallet), commitment, confidence_bps
        )
        return self._transact(LedgerStep.MINT, call)

    def store_verification(self, proof_hash: bytes) -> TxReceipt:
        call = self._contract.functions.storeVerification(proof_hash)
        return self._transact(LedgerStep.STORE_VERIFICATION, call)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _read(self, step: LedgerStep, call: Any) -> Any:
        try:
            return call.call()
        except (Web3Exception, ValueError, OSError, requests.exceptions.RequestException) as exc:
            error = classify_chain_error(exc, step)
            logger.warning("Ledger read %s failed: %s", step.value, error)
            raise error from exc

    def _transact(self, step: LedgerStep, call: Any) -> TxReceipt:
        if self._signer is None:
            raise ConfigurationError(
                f"Cannot {step.value}: ledger client has no signing identity"
            )

        tx_hash: Optional[str] = None
        try:
            raw_hash = self._signer.send(self._w3, call)
            tx_hash = Web3.to_hex(raw_hash)
            raw = self._w3.eth.wait_for_transaction_receipt(
                raw_hash,
                timeout=self._receipt_timeout,
                poll_latency=self._poll_latency,
            )
        except AttestationError:
            raise
        except (Web3Exception, ValueError, OSError, requests.exceptions.RequestException) as exc:
            error = classify_chain_error(exc, step, tx_hash=tx_hash)
            logger.warning("Ledger write %s failed: %s", step.value, error)
            raise error from exc
        except Exception as exc:
            # Local build or signing failure, or an unexpected provider response.
            error = ExecutionRejected(
                f"transaction could not be prepared: {exc!r}", step, tx_hash=tx_hash,
            )
            logger.warning("Ledger write %s failed: %s", step.value, error)
            raise error from exc

        receipt = TxReceipt(
            tx_hash=tx_hash,
            block_number=int(raw["blockNumber"]),
            status=int(raw["status"]),
            gas_used=int(raw.get("gasUsed", 0)),
        )
        if not receipt.succeeded:
            logger.warning("Ledger write %s reverted in tx %s", step.value, tx_hash)
            raise ExecutionRejected("transaction reverted", step, tx_hash=tx_hash)

        logger.info(
            "Ledger write %s included in block %d (tx %s)",
            step.value, receipt.block_number, tx_hash,
        )
        return receipt
