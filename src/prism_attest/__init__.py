"""PRISM attestation minter.

Turns an off-chain verification outcome (wallet, session, confidence)
into a tamper-evident attestation on the PRISMRegistry ledger contract.
"""

from prism_attest.config import AttestationConfig
from prism_attest.errors import (
    AttestationError,
    ChainError,
    ConfigurationError,
    ErrorKind,
    ExecutionRejected,
    LedgerStep,
    TransientNetworkError,
    ValidationError,
)
from prism_attest.minter import AttestationMinter
from prism_attest.models.attestation import (
    AttestationRequest,
    AttestationResult,
    ProofMaterial,
    TxReceipt,
)
from prism_attest.service import AttestationService, ServiceResult

__version__ = "0.1.0"

__all__ = [
    "AttestationConfig",
    "AttestationError",
    "AttestationMinter",
    "AttestationRequest",
    "AttestationResult",
    "AttestationService",
    "ChainError",
    "ConfigurationError",
    "ErrorKind",
    "ExecutionRejected",
    "LedgerStep",
    "ProofMaterial",
    "ServiceResult",
    "TransientNetworkError",
    "TxReceipt",
    "ValidationError",
]
