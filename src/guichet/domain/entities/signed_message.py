"""
SignedMessagePair entity.
"""

from dataclasses import dataclass

import base58


@dataclass(frozen=True)
class SignedMessagePair:
    """
    Message, signature and signer that passed local verification.

    Only the sign-message use case creates these, after the signature
    verifies against the signer's public key.
    """

    message_bytes: bytes
    signature_bytes: bytes
    signer: str

    @property
    def signature_b58(self) -> str:
        """Base58 signature for display."""
        return base58.b58encode(self.signature_bytes).decode()

    @property
    def signature_hex(self) -> str:
        return self.signature_bytes.hex()
