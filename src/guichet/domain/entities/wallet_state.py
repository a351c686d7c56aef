"""
WalletState entity - local display state for the connected wallet.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional

from guichet.domain.entities.signed_message import SignedMessagePair
from guichet.domain.entities.token_holding import TokenHolding
from guichet.domain.value_objects.amount import Amount


@dataclass
class WalletState:
    """
    Balances and last results shown to the user.

    Business rules:
    - Holdings are replaced wholesale on refresh, never merged
    - Failed actions never write here
    """

    owner: str
    balance: Optional[Amount] = None
    holdings: tuple[TokenHolding, ...] = field(default_factory=tuple)
    last_signed_message: Optional[SignedMessagePair] = None

    def replace_balance(self, balance: Amount) -> None:
        self.balance = balance

    def replace_holdings(self, holdings: Iterable[TokenHolding]) -> None:
        """Swap in a freshly materialized holdings snapshot."""
        self.holdings = tuple(holdings)

    def find_holding(self, mint: str) -> Optional[TokenHolding]:
        """Return the first holding for mint, if any."""
        for holding in self.holdings:
            if holding.mint == mint:
                return holding
        return None

    @property
    def balance_display(self) -> Optional[str]:
        """Native balance with nine decimal places, None before first refresh."""
        if self.balance is None:
            return None
        return f"{self.balance.to_display()} SOL"
