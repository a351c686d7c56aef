"""
Transfer and airdrop requests.

Recipient and mint stay raw strings here; they are parsed into public keys
by the instruction builder before anything touches the network.
"""

from dataclasses import dataclass
from typing import Union

from guichet.domain.exceptions import InvalidAmountError
from guichet.domain.value_objects.amount import SOL_DECIMALS, Amount


@dataclass(frozen=True)
class NativeTransfer:
    """Transfer of lamports from the fee payer to a recipient."""

    recipient: str
    amount: Amount

    def __post_init__(self):
        if self.amount.exponent != SOL_DECIMALS:
            raise InvalidAmountError(
                str(self.amount), f"native amounts use {SOL_DECIMALS} decimals"
            )


@dataclass(frozen=True)
class TokenTransfer:
    """
    Transfer of SPL tokens between associated token accounts.

    Business rules:
    - amount.exponent must equal the mint's decimals (source_decimals)
    """

    recipient: str
    mint: str
    amount: Amount
    source_decimals: int

    def __post_init__(self):
        if self.amount.exponent != self.source_decimals:
            raise InvalidAmountError(
                str(self.amount),
                f"expected {self.source_decimals} decimals for mint {self.mint}, "
                f"got {self.amount.exponent}",
            )


@dataclass(frozen=True)
class AirdropRequest:
    """Network-funded credit of test lamports to a recipient."""

    recipient: str
    amount: Amount


TransferRequest = Union[NativeTransfer, TokenTransfer]
