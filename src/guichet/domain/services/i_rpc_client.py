"""
Ledger RPC client interface.

Defines the ledger queries and submissions the lifecycle manager relies on.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence

from solders.pubkey import Pubkey

from guichet.domain.entities.prepared_transaction import (
    RecencyToken,
    SubmissionHandle,
)


class IRpcClient(ABC):
    """
    Abstract interface for ledger RPC access.

    All methods raise NetworkError (or a subclass) on transport failures
    and RPC error responses.
    """

    @abstractmethod
    async def get_balance(self, pubkey: Pubkey) -> int:
        """
        Get native balance.

        Args:
            pubkey: Account public key

        Returns:
            Balance in lamports
        """

    @abstractmethod
    async def enumerate_token_accounts(self, owner: Pubkey) -> list[dict[str, Any]]:
        """
        List token accounts owned by owner under the SPL token program.

        Args:
            owner: Owner public key

        Returns:
            Raw jsonParsed account records ({"pubkey": ..., "account": ...})
        """

    @abstractmethod
    async def get_latest_recency_token(self) -> RecencyToken:
        """Fetch the latest blockhash and its last valid block height."""

    @abstractmethod
    async def get_status(
        self, handles: Sequence[SubmissionHandle]
    ) -> list[Optional[dict[str, Any]]]:
        """
        Query signature statuses.

        Args:
            handles: Submission handles to query

        Returns:
            One status dict per handle (None when unknown to the ledger),
            with "confirmationStatus" and "err" keys
        """

    @abstractmethod
    async def submit(self, serialized_transaction: bytes) -> SubmissionHandle:
        """
        Submit a signed, serialized transaction.

        Args:
            serialized_transaction: Wire-format signed transaction

        Returns:
            Submission handle (transaction signature)
        """

    @abstractmethod
    async def request_airdrop(self, pubkey: Pubkey, lamports: int) -> SubmissionHandle:
        """
        Request a network-funded airdrop.

        Args:
            pubkey: Recipient public key
            lamports: Amount in lamports

        Returns:
            Submission handle of the airdrop transaction
        """

    @abstractmethod
    async def account_exists(self, pubkey: Pubkey) -> bool:
        """Check whether an account exists on chain."""
