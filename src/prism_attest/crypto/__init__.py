"""Commitment hashing for attestation claims."""

from prism_attest.crypto.proof_hasher import (
    compute_commitment,
    confidence_to_bps,
    digest_text,
    to_hex,
)

__all__ = ["compute_commitment", "confidence_to_bps", "digest_text", "to_hex"]
