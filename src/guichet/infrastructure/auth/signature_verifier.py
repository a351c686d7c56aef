"""
Ed25519 signature verification.

Re-verifies signatures returned by the wallet before they are trusted.
"""

from typing import Union

import base58
from nacl.exceptions import BadSignatureError
from nacl.signing import VerifyKey
from solders.pubkey import Pubkey

PublicKeyLike = Union[bytes, Pubkey, str]

SIGNATURE_LENGTH = 64
PUBLIC_KEY_LENGTH = 32


def _public_key_bytes(public_key: PublicKeyLike) -> bytes:
    if isinstance(public_key, Pubkey):
        return bytes(public_key)
    if isinstance(public_key, str):
        return base58.b58decode(public_key)
    return bytes(public_key)


class SignatureVerifier:
    """
    Solana wallet signature verification using Ed25519.

    Pure: no I/O, no state. Malformed keys and signatures verify as False
    rather than raising.
    """

    def verify(
        self,
        message_bytes: bytes,
        signature_bytes: bytes,
        public_key: PublicKeyLike,
    ) -> bool:
        """
        Verify an Ed25519 signature.

        Args:
            message_bytes: Exact bytes that were signed
            signature_bytes: 64-byte signature
            public_key: Signer public key (raw bytes, Pubkey or base58)

        Returns:
            True if the signature is valid for message and key
        """
        try:
            key_bytes = _public_key_bytes(public_key)
            signature = bytes(signature_bytes)
            message = bytes(message_bytes)
        except (ValueError, TypeError):
            return False

        if len(key_bytes) != PUBLIC_KEY_LENGTH:
            return False
        if len(signature) != SIGNATURE_LENGTH:
            return False

        try:
            VerifyKey(key_bytes).verify(message, signature)
        except (BadSignatureError, ValueError, TypeError):
            return False
        return True
