"""
Get Native Balance use case.

Reads the wallet's lamport balance from the ledger.
"""

import logging

from guichet.domain.services.i_rpc_client import IRpcClient
from guichet.domain.value_objects.amount import Amount
from guichet.domain.value_objects.wallet_address import WalletAddress

logger = logging.getLogger(__name__)


class GetNativeBalance:
    """
    Get native SOL balance.

    Business rules:
    - Balance is kept as integer lamports, formatted only for display
    """

    def __init__(self, rpc_client: IRpcClient):
        """
        Initialize use case with dependencies.

        Args:
            rpc_client: Ledger RPC client
        """
        self.rpc_client = rpc_client

    async def execute(self, owner: str) -> Amount:
        """
        Execute get native balance.

        Args:
            owner: Base58 wallet address

        Returns:
            Balance as an Amount with 9 decimals

        Raises:
            InvalidRecipientError: If owner is not a public key
            NetworkError: If the RPC call fails
        """
        address = WalletAddress.parse(owner, field="owner")
        lamports = await self.rpc_client.get_balance(address.pubkey)

        logger.debug(f"Balance for {address.truncated()}: {lamports} lamports")
        return Amount.lamports(lamports)
