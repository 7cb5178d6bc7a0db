"""Domain models for the attestation workflow."""

from prism_attest.models.attestation import (
    AttestationRequest,
    AttestationResult,
    ProofMaterial,
    TxReceipt,
)

__all__ = ["AttestationRequest", "AttestationResult", "ProofMaterial", "TxReceipt"]
