"""
WalletAddress value object - Immutable Solana public key.
"""

from dataclasses import dataclass

from solders.pubkey import Pubkey

from guichet.domain.exceptions import InvalidRecipientError


@dataclass(frozen=True)
class WalletAddress:
    """
    Value object representing a validated Solana public key.

    Business rules:
    - Must decode from base58 to exactly 32 bytes
    - Immutable once created
    """

    pubkey: Pubkey

    @classmethod
    def parse(cls, address: str, field: str = "recipient") -> "WalletAddress":
        """
        Parse a base58 address.

        Args:
            address: Base58 encoded public key
            field: Input field name used in the error

        Returns:
            WalletAddress

        Raises:
            InvalidRecipientError: If the address is not a valid public key
        """
        if not isinstance(address, str) or not address.strip():
            raise InvalidRecipientError(str(address or ""), field=field)

        text = address.strip()
        # Pubkey.from_string accepts some malformed lengths on older solders
        if not 32 <= len(text) <= 44:
            raise InvalidRecipientError(text, field=field)

        try:
            pubkey = Pubkey.from_string(text)
        except Exception as e:
            raise InvalidRecipientError(text, field=field) from e

        return cls(pubkey=pubkey)

    @property
    def address(self) -> str:
        """Base58 address string."""
        return str(self.pubkey)

    def truncated(self) -> str:
        """Return truncated address for display (e.g., 'ABC...XYZ')."""
        return f"{self.address[:6]}...{self.address[-4:]}"

    def __str__(self) -> str:
        """String representation returns full address."""
        return self.address
