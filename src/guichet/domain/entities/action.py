"""
User-initiated actions and their results.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from guichet.domain.entities.confirmation import ConfirmationOutcome
from guichet.domain.entities.prepared_transaction import SubmissionHandle
from guichet.domain.entities.signed_message import SignedMessagePair
from guichet.domain.exceptions import GuichetException


class ActionKind(str, Enum):
    """Action slots. Each slot runs at most one action at a time."""

    AIRDROP = "airdrop"
    TRANSFER = "transfer"
    TOKEN_TRANSFER = "token_transfer"
    SIGN_MESSAGE = "sign_message"


@dataclass(frozen=True)
class ActionResult:
    """
    Result of one orchestrated action.

    Exactly one of (success, error) describes the outcome: a successful
    result has no error, a failed one carries the GuichetException that
    ended it.
    """

    action: ActionKind
    success: bool
    message: str
    handle: Optional[SubmissionHandle] = None
    outcome: Optional[ConfirmationOutcome] = None
    signed_message: Optional[SignedMessagePair] = None
    error: Optional[GuichetException] = None

    @property
    def error_code(self) -> Optional[str]:
        return self.error.code if self.error else None

    def to_dict(self) -> dict:
        """Convert result to dictionary representation."""
        return {
            "action": self.action.value,
            "success": self.success,
            "message": self.message,
            "signature": self.handle.signature if self.handle else None,
            "state": self.outcome.state.value if self.outcome else None,
            "signed_message": (
                self.signed_message.signature_b58 if self.signed_message else None
            ),
            "error_code": self.error_code,
        }
