"""
Domain value objects.
"""

from guichet.domain.value_objects.amount import (
    LAMPORTS_PER_SOL,
    MAX_BASE_UNITS,
    SOL_DECIMALS,
    Amount,
    from_base_units,
    to_base_units,
)
from guichet.domain.value_objects.wallet_address import WalletAddress

__all__ = [
    "Amount",
    "to_base_units",
    "from_base_units",
    "LAMPORTS_PER_SOL",
    "SOL_DECIMALS",
    "MAX_BASE_UNITS",
    "WalletAddress",
]
