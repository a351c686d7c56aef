"""
Send Token Transfer use case.

Transfers SPL tokens between associated token accounts, creating the
recipient's account when it does not exist yet.
"""

import logging
from typing import Iterable, Optional

from guichet.application.services.confirmation_poller import ConfirmationPoller
from guichet.application.use_cases.list_token_holdings import ListTokenHoldings
from guichet.domain.entities.confirmation import ConfirmationOutcome
from guichet.domain.entities.token_holding import TokenHolding
from guichet.domain.entities.transfer_request import TokenTransfer
from guichet.domain.exceptions import (
    GuichetException,
    TokenAccountMissingError,
    WalletRejectedError,
)
from guichet.domain.services.i_rpc_client import IRpcClient
from guichet.domain.services.i_signing_agent import ISigningAgent
from guichet.domain.value_objects.amount import to_base_units
from guichet.domain.value_objects.wallet_address import WalletAddress
from guichet.infrastructure.blockchain.instruction_builder import (
    InstructionBuilder,
)

logger = logging.getLogger(__name__)


class SendTokenTransfer:
    """
    Send SPL tokens to a recipient.

    Business rules:
    - Recipient and mint validated before any network call
    - Amount uses the sender holding's decimals for the mint
    - Sender must hold a token account for the mint
    - Recipient token account created idempotently when missing
    - Success only once the transaction confirms
    """

    def __init__(
        self,
        rpc_client: IRpcClient,
        signing_agent: ISigningAgent,
        builder: InstructionBuilder,
        poller: ConfirmationPoller,
        list_holdings: ListTokenHoldings,
    ):
        self.rpc_client = rpc_client
        self.signing_agent = signing_agent
        self.builder = builder
        self.poller = poller
        self.list_holdings = list_holdings

    async def execute(
        self,
        recipient: str,
        mint: str,
        amount_text: str,
        known_holdings: Optional[Iterable[TokenHolding]] = None,
    ) -> ConfirmationOutcome:
        """
        Execute token transfer.

        Args:
            recipient: Base58 recipient wallet address
            mint: Base58 token mint address
            amount_text: Token amount as typed by the user
            known_holdings: Current holdings snapshot; fetched when None
                or when it has no entry for the mint

        Returns:
            CONFIRMED outcome

        Raises:
            InvalidRecipientError: If recipient or mint is invalid
            InvalidAmountError: If amount is invalid for the mint's decimals
            TokenAccountMissingError: If the sender holds no account for mint
            NetworkError: If an RPC call fails
            WalletRejectedError: If the wallet refuses to sign or send
            ConfirmationTimeoutError: If confirmation exceeds the deadline
            OnChainFailureError: If the transaction fails on chain
        """
        WalletAddress.parse(recipient)
        WalletAddress.parse(mint, field="mint")

        holding = await self._find_holding(mint, known_holdings)
        request = TokenTransfer(
            recipient=recipient,
            mint=mint,
            amount=to_base_units(amount_text, holding.decimals),
            source_decimals=holding.decimals,
        )
        self.builder.validate(request)

        dest_account = self.builder.recipient_token_account(request)
        dest_exists = await self.rpc_client.account_exists(dest_account)
        recency_token = await self.rpc_client.get_latest_recency_token()

        prepared = self.builder.build(
            request,
            fee_payer=self.signing_agent.public_key,
            recency_token=recency_token,
            recipient_account_exists=dest_exists,
        )

        try:
            handle = await self.signing_agent.send_prepared(prepared)
        except GuichetException:
            raise
        except Exception as e:
            raise WalletRejectedError(
                "transaction", str(e) or type(e).__name__
            ) from e

        logger.info(
            f"Submitted token transfer of {request.amount.base_units} "
            f"base units of {mint} to {recipient}: {handle}"
        )

        return await self.poller.wait_for(handle)

    async def _find_holding(
        self, mint: str, known_holdings: Optional[Iterable[TokenHolding]]
    ) -> TokenHolding:
        owner = str(self.signing_agent.public_key)

        for holding in known_holdings or ():
            if holding.mint == mint:
                return holding

        logger.debug(f"No cached holding for {mint}, enumerating token accounts")
        for holding in await self.list_holdings.execute(owner):
            if holding.mint == mint:
                return holding

        raise TokenAccountMissingError(mint=mint, owner=owner)
