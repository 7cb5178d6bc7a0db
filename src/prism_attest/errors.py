"""Error taxonomy for the attestation workflow.

Every failure surfaced by this package is an AttestationError carrying an
ErrorKind, so callers can branch on retryability without matching on
message text:

- ValidationError: the request itself is malformed. Caller-fixable.
- ConfigurationError: signing key or contract address missing or bad.
  Operator-fixable.
- ChainError: a ledger round trip failed. Split into
  TransientNetworkError (endpoint unreachable, timeout; safe to retry
  with backoff) and ExecutionRejected (revert, insufficient funds, nonce
  conflict; re-derive state before retrying).

None of these are retried automatically.
"""

from __future__ import annotations

import enum
from typing import Optional


class ErrorKind(str, enum.Enum):
    """Classification of workflow failures."""
    VALIDATION = "validation"
    CONFIGURATION = "configuration"
    TRANSIENT_NETWORK = "transient_network"
    EXECUTION_REJECTED = "execution_rejected"


class LedgerStep(str, enum.Enum):
    """The ledger round trip a ChainError occurred in."""
    IS_HUMAN = "is_human"
    REVOKE = "revoke"
    MINT = "mint"
    TOKEN_ID_RESOLVE = "token_id_resolve"
    STORE_VERIFICATION = "store_verification"


_WRITE_STEPS = frozenset({
    LedgerStep.REVOKE,
    LedgerStep.MINT,
    LedgerStep.STORE_VERIFICATION,
})


class AttestationError(Exception):
    """Base class for all attestation workflow errors."""

    kind: ErrorKind = ErrorKind.VALIDATION

    @property
    def retryable(self) -> bool:
        return False


class ValidationError(AttestationError):
    kind = ErrorKind.VALIDATION


class ConfigurationError(AttestationError):
    kind = ErrorKind.CONFIGURATION


class ChainError(AttestationError):
    """A ledger call failed.

    ``step`` names the call that failed. ``completed_steps`` lists the
    ledger steps of the same operation that finished before it, which
    tells a caller whether on-chain state already moved (for example a
    revoke that landed before the mint failed). ``tx_hash`` is set when
    the failing transaction was broadcast.
    """

    kind = ErrorKind.EXECUTION_REJECTED

    def __init__(
        self,
        message: str,
        step: LedgerStep,
        tx_hash: Optional[str] = None,
        completed_steps: tuple[LedgerStep, ...] = (),
    ) -> None:
        super().__init__(message)
        self.step = step
        self.tx_hash = tx_hash
        self.completed_steps = completed_steps

    @property
    def state_changed(self) -> bool:
        """True if an earlier write of the same operation already landed."""
        return any(step in _WRITE_STEPS for step in self.completed_steps)

    def __str__(self) -> str:
        text = f"{self.step.value} failed: {self.args[0]}"
        if self.tx_hash:
            text += f" (tx {self.tx_hash})"
        if self.completed_steps:
            done = ", ".join(s.value for s in self.completed_steps)
            text += f" [completed: {done}]"
        return text


class TransientNetworkError(ChainError):
    kind = ErrorKind.TRANSIENT_NETWORK

    @property
    def retryable(self) -> bool:
        return True


class ExecutionRejected(ChainError):
    kind = ErrorKind.EXECUTION_REJECTED
