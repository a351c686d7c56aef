"""
Domain entities.
"""

from guichet.domain.entities.action import ActionKind, ActionResult
from guichet.domain.entities.confirmation import (
    ConfirmationOutcome,
    ConfirmationState,
)
from guichet.domain.entities.prepared_transaction import (
    PreparedTransaction,
    RecencyToken,
    SubmissionHandle,
)
from guichet.domain.entities.signed_message import SignedMessagePair
from guichet.domain.entities.token_holding import TokenHolding
from guichet.domain.entities.transfer_request import (
    AirdropRequest,
    NativeTransfer,
    TokenTransfer,
    TransferRequest,
)
from guichet.domain.entities.wallet_state import WalletState

__all__ = [
    "ActionKind",
    "ActionResult",
    "AirdropRequest",
    "ConfirmationOutcome",
    "ConfirmationState",
    "NativeTransfer",
    "PreparedTransaction",
    "RecencyToken",
    "SignedMessagePair",
    "SubmissionHandle",
    "TokenHolding",
    "TokenTransfer",
    "TransferRequest",
    "WalletState",
]
