"""
TokenHolding entity - one SPL token account snapshot.
"""

from dataclasses import dataclass
from decimal import Decimal

from guichet.domain.value_objects.amount import Amount, from_base_units


@dataclass(frozen=True)
class TokenHolding:
    """
    Token balance held by an owner for a mint.

    Business rules:
    - raw_amount is the on-chain integer amount
    - display_amount = raw_amount / 10**decimals, exact
    - Zero balances are kept (informational)
    """

    mint: str
    owner: str
    raw_amount: int
    decimals: int
    token_account: str = ""

    def __post_init__(self):
        if self.raw_amount < 0:
            raise ValueError("raw_amount cannot be negative")
        if self.decimals < 0:
            raise ValueError("decimals cannot be negative")

    @property
    def amount(self) -> Amount:
        return Amount(base_units=self.raw_amount, exponent=self.decimals)

    @property
    def display_amount(self) -> Decimal:
        return self.amount.display_value

    @property
    def display_text(self) -> str:
        """Canonical decimal string for presentation."""
        return from_base_units(self.amount)

    def to_dict(self) -> dict:
        """Convert entity to dictionary representation."""
        return {
            "mint": self.mint,
            "owner": self.owner,
            "token_account": self.token_account,
            "raw_amount": str(self.raw_amount),
            "decimals": self.decimals,
            "display_amount": self.display_text,
        }
