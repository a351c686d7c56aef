"""
Keypair-backed signing agent.

Stands in for a browser wallet when running from the command line: signs
with a local Solana keypair file and submits through the RPC client.
"""

import json
import logging
from pathlib import Path

from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.transaction import Transaction

from guichet.domain.entities.prepared_transaction import (
    PreparedTransaction,
    SubmissionHandle,
)
from guichet.domain.exceptions import CapabilityMissingError
from guichet.domain.services.i_rpc_client import IRpcClient
from guichet.domain.services.i_signing_agent import (
    ISigningAgent,
    SigningCapability,
)

logger = logging.getLogger(__name__)


def load_keypair(keypair_path: str) -> Keypair:
    """
    Load Solana keypair from JSON file.

    Args:
        keypair_path: Path to keypair JSON file (64-byte array)

    Returns:
        Solana Keypair object

    Raises:
        FileNotFoundError: If the file does not exist

    Examples:
        >>> keypair = load_keypair("~/.config/solana/id.json")
        >>> print(keypair.pubkey())
    """
    path = Path(keypair_path).expanduser()

    if not path.exists():
        raise FileNotFoundError(f"Keypair not found: {keypair_path}")

    with open(path, "r") as f:
        secret_key = json.load(f)

    return Keypair.from_bytes(bytes(secret_key))


class KeypairSigningAgent(ISigningAgent):
    """
    Signing agent holding a local keypair.

    Args:
        keypair: Keypair used for every signature
        rpc_client: Client used to submit signed transactions
        allow_message_signing: Advertise message signing (disable to
            behave like a wallet without signMessage)
    """

    def __init__(
        self,
        keypair: Keypair,
        rpc_client: IRpcClient,
        allow_message_signing: bool = True,
    ):
        self._keypair = keypair
        self._rpc = rpc_client
        self._capabilities = SigningCapability.SEND_TRANSACTION
        if allow_message_signing:
            self._capabilities |= SigningCapability.SIGN_MESSAGE

    @classmethod
    def from_file(
        cls, keypair_path: str, rpc_client: IRpcClient, **kwargs
    ) -> "KeypairSigningAgent":
        return cls(load_keypair(keypair_path), rpc_client, **kwargs)

    @property
    def public_key(self) -> Pubkey:
        return self._keypair.pubkey()

    @property
    def capabilities(self) -> SigningCapability:
        return self._capabilities

    async def sign_bytes(self, message: bytes) -> bytes:
        if SigningCapability.SIGN_MESSAGE not in self._capabilities:
            raise CapabilityMissingError("sign_message")
        return bytes(self._keypair.sign_message(message))

    async def send_prepared(self, prepared: PreparedTransaction) -> SubmissionHandle:
        """Sign the prepared transaction with its own recency token and submit."""
        transaction = Transaction(
            [self._keypair],
            prepared.to_message(),
            prepared.recency_token.to_hash(),
        )
        logger.debug(
            f"Signed transaction with {len(prepared.instructions)} instruction(s) "
            f"at blockhash {prepared.recency_token.blockhash}"
        )
        return await self._rpc.submit(bytes(transaction))
