"""Attestation data model.

An attestation is a ledger-recorded claim that a wallet passed
verification with a given confidence, valid until an expiry. The
workflow never stores it; it only builds the claim, binds it into a
32-byte commitment, and reports what the ledger returned.

The ProofMaterial field order and the ":" separator are the hash
contract. Changing either changes every commitment, so any change must
come with a new PROOF_FORMAT_VERSION.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


PROOF_FORMAT_VERSION = 1
PROOF_SEPARATOR = ":"


@dataclass(frozen=True)
class AttestationRequest:
    """A verification outcome to be recorded on-chain."""
    wallet: str
    confidence_score: float
    session_id: Optional[str] = None
    force: bool = False


@dataclass(frozen=True)
class ProofMaterial:
    """The claim fields bound by a proof commitment.

    Wallet is lowercased at construction so that two spellings of the
    same address produce the same material.
    """
    session_id: str
    wallet: str
    confidence_bps: int
    expires_at_epoch_sec: int

    @classmethod
    def build(
        cls,
        wallet: str,
        confidence_bps: int,
        expires_at_epoch_sec: int,
        session_id: Optional[str] = None,
    ) -> ProofMaterial:
        return cls(
            session_id=session_id or "",
            wallet=wallet.lower(),
            confidence_bps=confidence_bps,
            expires_at_epoch_sec=expires_at_epoch_sec,
        )

    def canonical_fields(self) -> tuple[str, ...]:
        """Return all fields in canonical order for hashing."""
        return (
            self.session_id,
            self.wallet,
            str(self.confidence_bps),
            str(self.expires_at_epoch_sec),
        )

    def canonical_string(self) -> str:
        return PROOF_SEPARATOR.join(self.canonical_fields())


@dataclass(frozen=True)
class TxReceipt:
    """Confirmation that a submitted transaction was included."""
    tx_hash: str
    block_number: int
    status: int
    gas_used: int = 0

    @property
    def succeeded(self) -> bool:
        return self.status == 1


@dataclass(frozen=True)
class AttestationResult:
    """What a successful mint returns to the caller."""
    tx_hash: str
    proof_hash_hex: str
    expires_at_epoch_sec: int
    token_id: int

    def to_dict(self) -> dict[str, Any]:
        """Wire shape consumed by the upload layer."""
        return {
            "txHash": self.tx_hash,
            "proofHashHex": self.proof_hash_hex,
            "expiresAtEpochSec": self.expires_at_epoch_sec,
            "tokenId": self.token_id,
        }
