"""Ledger access: contract client, transaction signer, gas strategies."""

from prism_attest.ledger.client import (
    LedgerClient,
    LedgerReader,
    LedgerWriter,
    Web3LedgerClient,
    classify_chain_error,
)
from prism_attest.ledger.gas import DynamicGasStrategy, FixedGasStrategy, GasStrategy
from prism_attest.ledger.signer import TransactionSigner

__all__ = [
    "LedgerClient",
    "LedgerReader",
    "LedgerWriter",
    "Web3LedgerClient",
    "classify_chain_error",
    "DynamicGasStrategy",
    "FixedGasStrategy",
    "GasStrategy",
    "TransactionSigner",
]
