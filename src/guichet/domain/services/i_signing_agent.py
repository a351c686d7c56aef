"""
Signing agent (wallet) interface.

The wallet owns the keys. Message signing is an optional capability,
resolved once into a MessageSigner variant instead of being probed per call.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Flag, auto
from typing import Awaitable, Callable, Union

from solders.pubkey import Pubkey

from guichet.domain.entities.prepared_transaction import (
    PreparedTransaction,
    SubmissionHandle,
)


class SigningCapability(Flag):
    """Capabilities advertised by a signing agent."""

    NONE = 0
    SEND_TRANSACTION = auto()
    SIGN_MESSAGE = auto()


class ISigningAgent(ABC):
    """Abstract interface for the connected wallet."""

    @property
    @abstractmethod
    def public_key(self) -> Pubkey:
        """Wallet public key (fee payer and signer)."""

    @property
    @abstractmethod
    def capabilities(self) -> SigningCapability:
        """Capabilities this wallet supports."""

    @abstractmethod
    async def sign_bytes(self, message: bytes) -> bytes:
        """
        Sign arbitrary bytes.

        Args:
            message: Bytes to sign

        Returns:
            64-byte Ed25519 signature
        """

    @abstractmethod
    async def send_prepared(self, prepared: PreparedTransaction) -> SubmissionHandle:
        """
        Sign and submit a prepared transaction.

        Args:
            prepared: Transaction built for this submission attempt

        Returns:
            Submission handle
        """


@dataclass(frozen=True)
class NoSigning:
    """Wallet cannot sign arbitrary messages."""


@dataclass(frozen=True)
class CanSign:
    """Wallet can sign arbitrary messages through sign_fn."""

    sign_fn: Callable[[bytes], Awaitable[bytes]]


MessageSigner = Union[NoSigning, CanSign]


def resolve_message_signer(agent: ISigningAgent) -> MessageSigner:
    """Resolve the agent's message-signing capability once."""
    if SigningCapability.SIGN_MESSAGE in agent.capabilities:
        return CanSign(sign_fn=agent.sign_bytes)
    return NoSigning()
