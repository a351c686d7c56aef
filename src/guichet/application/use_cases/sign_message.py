"""
Sign Message use case.

Asks the wallet to sign a text message and verifies the signature locally
before accepting it.
"""

import logging

from solders.pubkey import Pubkey

from guichet.domain.entities.signed_message import SignedMessagePair
from guichet.domain.exceptions import (
    CapabilityMissingError,
    GuichetException,
    VerificationFailureError,
    WalletRejectedError,
)
from guichet.domain.services.i_signing_agent import CanSign, MessageSigner, NoSigning
from guichet.infrastructure.auth.signature_verifier import SignatureVerifier

logger = logging.getLogger(__name__)


class SignMessage:
    """
    Sign a message with the connected wallet.

    Business rules:
    - Message signing is a capability resolved once, not probed per call
    - Message is encoded as UTF-8 before signing
    - A signature that fails verification is never returned
    """

    def __init__(
        self,
        message_signer: MessageSigner,
        signer: Pubkey,
        verifier: SignatureVerifier,
    ):
        """
        Initialize use case with dependencies.

        Args:
            message_signer: NoSigning or CanSign variant for the wallet
            signer: Wallet public key expected to have signed
            verifier: Ed25519 verifier
        """
        self.message_signer = message_signer
        self.signer = signer
        self.verifier = verifier

    async def execute(self, text: str) -> SignedMessagePair:
        """
        Execute sign message.

        Args:
            text: Message text

        Returns:
            Verified SignedMessagePair

        Raises:
            CapabilityMissingError: If the wallet cannot sign messages
            VerificationFailureError: If the signature does not verify
            WalletRejectedError: If the wallet refuses to sign
        """
        signer = self.message_signer
        if isinstance(signer, NoSigning):
            raise CapabilityMissingError(
                "sign_message", "Wallet does not support message signing"
            )
        if not isinstance(signer, CanSign):
            raise TypeError(f"Unknown message signer: {type(signer).__name__}")

        message_bytes = text.encode("utf-8")
        try:
            signature = await signer.sign_fn(message_bytes)
        except GuichetException:
            raise
        except Exception as e:
            raise WalletRejectedError(
                "message signing", str(e) or type(e).__name__
            ) from e

        if not isinstance(signature, (bytes, bytearray)):
            logger.warning(
                f"Wallet returned {type(signature).__name__} instead of a signature"
            )
            raise VerificationFailureError(str(self.signer))
        signature = bytes(signature)

        if not self.verifier.verify(message_bytes, signature, self.signer):
            logger.warning(f"Wallet signature rejected for {self.signer}")
            raise VerificationFailureError(str(self.signer))

        logger.info(f"Message signed and verified for {self.signer}")
        return SignedMessagePair(
            message_bytes=message_bytes,
            signature_bytes=signature,
            signer=str(self.signer),
        )
