"""Proof hasher: turns an attestation claim into a 32-byte commitment.

The commitment binds the claim fields without revealing any of the
biometric data behind them. It is SHA-256 over the UTF-8 bytes of the
canonical ProofMaterial string. SHA-256 already yields 32 bytes, so the
slice to COMMITMENT_SIZE never truncates; it is kept so the size stays
fixed if the digest is ever swapped for a longer one.

Everything here is pure: no I/O, no clock, no randomness.
"""

from __future__ import annotations

import hashlib
import math
from decimal import ROUND_HALF_UP, Decimal

from prism_attest.errors import ValidationError
from prism_attest.models.attestation import ProofMaterial


COMMITMENT_SIZE = 32
BPS_SCALE = 10_000


def digest_text(text: str) -> bytes:
    """Hash arbitrary text into a commitment-sized digest."""
    return hashlib.sha256(text.encode("utf-8")).digest()[:COMMITMENT_SIZE]


def compute_commitment(material: ProofMaterial) -> bytes:
    """Compute the 32-byte commitment for a proof material."""
    return digest_text(material.canonical_string())


def to_hex(commitment: bytes) -> str:
    """Lowercase hex, no prefix."""
    return commitment.hex()


def confidence_to_bps(score: float) -> int:
    """Clamp a confidence score to [0, 1] and convert to basis points.

    Rounds half-up on the score's shortest decimal representation, so
    0.00005 gives 1 bps and 0.87 gives exactly 8700 regardless of binary
    float error.
    """
    if isinstance(score, bool) or not isinstance(score, (int, float, Decimal)):
        raise ValidationError(f"confidence score must be a number, got {score!r}")
    if (isinstance(score, float) and math.isnan(score)) or (
        isinstance(score, Decimal) and score.is_nan()
    ):
        raise ValidationError("confidence score must not be NaN")
    if score <= 0:
        return 0
    if score >= 1:
        return BPS_SCALE
    scaled = Decimal(str(score)) * BPS_SCALE
    return int(scaled.quantize(Decimal(1), rounding=ROUND_HALF_UP))
