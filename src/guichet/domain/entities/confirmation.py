"""
Confirmation states and outcomes.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from guichet.domain.entities.prepared_transaction import SubmissionHandle


class ConfirmationState(str, Enum):
    """Confirmation polling states."""

    SUBMITTED = "submitted"
    PENDING = "pending"
    CONFIRMED = "confirmed"
    TIMED_OUT = "timed_out"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Terminal states end polling for a handle."""
        return self in (
            ConfirmationState.CONFIRMED,
            ConfirmationState.TIMED_OUT,
            ConfirmationState.FAILED,
        )


@dataclass(frozen=True)
class ConfirmationOutcome:
    """
    Terminal result of polling a submission handle.

    Attributes:
        state: CONFIRMED, TIMED_OUT or FAILED
        handle: Polled submission handle
        reason: Failure reason reported by the ledger (FAILED only)
        cycles: Number of status queries issued
        elapsed: Seconds between submission and the terminal state
    """

    state: ConfirmationState
    handle: SubmissionHandle
    reason: Optional[str] = None
    cycles: int = 0
    elapsed: float = 0.0

    def __post_init__(self):
        if not self.state.is_terminal:
            raise ValueError(f"Outcome must be terminal, got {self.state.value}")

    @property
    def succeeded(self) -> bool:
        return self.state == ConfirmationState.CONFIRMED
