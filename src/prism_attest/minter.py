"""Attestation minter: turns a verification outcome into an on-chain record.

Flow for one request:
1. Validate the wallet, then check that writes are configured.
2. Clamp the confidence score and convert it to basis points.
3. Expiry = now + TTL.
4. Build the proof material and compute its commitment.
5. If ``force``: when the wallet is currently human, revoke and wait for
   inclusion. Minting twice with force never leaves two live records.
6. Mint and wait for inclusion.
7. Read back the token id assigned by the mint.

Any ledger failure aborts the whole operation; there is no partial
result. A failed revoke stops before the mint is attempted. Errors carry
the failing step and the steps that completed before it, so a caller can
tell "revoke landed, mint failed" apart from "nothing happened".
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from web3 import Web3

from prism_attest.config import AttestationConfig
from prism_attest.crypto.proof_hasher import (
    compute_commitment,
    confidence_to_bps,
    digest_text,
    to_hex,
)
from prism_attest.errors import ChainError, ConfigurationError, LedgerStep, ValidationError
from prism_attest.ledger.client import LedgerClient
from prism_attest.models.attestation import (
    AttestationRequest,
    AttestationResult,
    ProofMaterial,
)

logger = logging.getLogger(__name__)


def validate_wallet(wallet: object) -> str:
    """Return the wallet stripped of surrounding whitespace, or raise."""
    if not isinstance(wallet, str) or not wallet.strip():
        raise ValidationError("wallet is required")
    wallet = wallet.strip()
    if not wallet.startswith(("0x", "0X")) or not Web3.is_address(wallet):
        raise ValidationError(f"wallet is not a valid account address: {wallet!r}")
    return wallet


class AttestationMinter:
    """Orchestrates hashing and ledger calls for one attestation at a time.

    Stateless between calls: all attestation state lives on the ledger.
    """

    def __init__(
        self,
        config: AttestationConfig,
        ledger: Optional[LedgerClient],
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config
        self._ledger = ledger
        self._clock = clock

    def _build_material(self, wallet: str, request: AttestationRequest) -> ProofMaterial:
        """Proof material for an already validated wallet. Reads the clock."""
        confidence_bps = confidence_to_bps(request.confidence_score)
        expires_at = int(self._clock()) + self._config.ttl_seconds
        return ProofMaterial.build(
            wallet=wallet,
            confidence_bps=confidence_bps,
            expires_at_epoch_sec=expires_at,
            session_id=request.session_id,
        )

    def mint(self, request: AttestationRequest) -> AttestationResult:
        wallet = validate_wallet(request.wallet)
        material = self._build_material(wallet, request)
        ledger = self._require_ledger()

        commitment = compute_commitment(material)

        completed: list[LedgerStep] = []
        try:
            if request.force:
                if ledger.is_human(wallet):
                    logger.info("Revoking existing attestation for %s", wallet)
                    ledger.revoke(wallet)
                    completed.append(LedgerStep.REVOKE)

            receipt = ledger.mint_attestation(wallet, commitment, material.confidence_bps)
            completed.append(LedgerStep.MINT)

            token_id = ledger.token_id_for(wallet)
        except ChainError as exc:
            exc.completed_steps = tuple(completed)
            raise

        logger.info(
            "Minted attestation for %s: token %d, %d bps, expires %d",
            wallet, token_id, material.confidence_bps, material.expires_at_epoch_sec,
        )
        return AttestationResult(
            tx_hash=receipt.tx_hash,
            proof_hash_hex="0x" + to_hex(commitment),
            expires_at_epoch_sec=material.expires_at_epoch_sec,
            token_id=token_id,
        )

    def store_legacy_proof(self, data: str) -> str:
        """Hash arbitrary text and record it via storeVerification.

        Kept for the older on-chain entry point. No wallet, confidence,
        expiry, or revoke logic is involved.
        """
        if not isinstance(data, str):
            raise ValidationError("data must be a string")
        ledger = self._require_ledger()
        receipt = ledger.store_verification(digest_text(data))
        return receipt.tx_hash

    def _require_ledger(self) -> LedgerClient:
        self._config.require_write_access()
        if self._ledger is None:
            raise ConfigurationError("No ledger client configured")
        return self._ledger
