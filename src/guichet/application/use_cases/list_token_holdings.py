"""
List Token Holdings use case.

Enumerates SPL token accounts owned by a wallet and materializes them as
TokenHolding snapshots.
"""

import logging
from typing import Any, Optional

from guichet.domain.entities.token_holding import TokenHolding
from guichet.domain.services.i_rpc_client import IRpcClient
from guichet.domain.value_objects.wallet_address import WalletAddress

logger = logging.getLogger(__name__)


def parse_token_account(record: dict[str, Any]) -> TokenHolding:
    """
    Convert one jsonParsed getTokenAccountsByOwner record.

    Args:
        record: {"pubkey": ..., "account": {"data": {"parsed": {"info": ...}}}}

    Returns:
        TokenHolding

    Raises:
        KeyError, TypeError, ValueError: If the record is malformed
    """
    info = record["account"]["data"]["parsed"]["info"]
    token_amount = info["tokenAmount"]

    return TokenHolding(
        mint=info["mint"],
        owner=info["owner"],
        raw_amount=int(token_amount["amount"]),
        decimals=int(token_amount["decimals"]),
        token_account=record.get("pubkey", ""),
    )


class ListTokenHoldings:
    """
    List token holdings for a wallet.

    Business rules:
    - Raw amounts are parsed from strings into integers, never floats
    - Every call returns a fresh snapshot; nothing is merged with the past
    - Zero balances are included unless include_empty is False
    - Malformed records are skipped, not fatal
    """

    def __init__(self, rpc_client: IRpcClient):
        self.rpc_client = rpc_client

    async def execute(
        self, owner: str, include_empty: bool = True
    ) -> tuple[TokenHolding, ...]:
        """
        Execute list token holdings.

        Args:
            owner: Base58 wallet address
            include_empty: Keep accounts with a zero balance

        Returns:
            Tuple of TokenHolding in ledger order

        Raises:
            InvalidRecipientError: If owner is not a public key
            NetworkError: If the RPC call fails
        """
        address = WalletAddress.parse(owner, field="owner")
        records = await self.rpc_client.enumerate_token_accounts(address.pubkey)

        holdings: list[TokenHolding] = []
        for record in records:
            holding = self._parse(record)
            if holding is None:
                continue
            if not include_empty and holding.raw_amount == 0:
                continue
            holdings.append(holding)

        logger.info(
            f"Found {len(holdings)} token holding(s) for {address.truncated()}"
        )
        return tuple(holdings)

    def _parse(self, record: dict[str, Any]) -> Optional[TokenHolding]:
        try:
            return parse_token_account(record)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(
                f"Skipping malformed token account {record.get('pubkey', '?')}: {e}"
            )
            return None
