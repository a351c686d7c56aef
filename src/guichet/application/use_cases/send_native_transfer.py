"""
Send Native Transfer use case.

Builds, signs, submits and confirms a SOL transfer from the connected
wallet.
"""

import logging

from guichet.application.services.confirmation_poller import ConfirmationPoller
from guichet.domain.entities.confirmation import ConfirmationOutcome
from guichet.domain.entities.transfer_request import NativeTransfer
from guichet.domain.exceptions import GuichetException, WalletRejectedError
from guichet.domain.services.i_rpc_client import IRpcClient
from guichet.domain.services.i_signing_agent import ISigningAgent
from guichet.domain.value_objects.amount import SOL_DECIMALS, to_base_units
from guichet.infrastructure.blockchain.instruction_builder import (
    InstructionBuilder,
)

logger = logging.getLogger(__name__)


class SendNativeTransfer:
    """
    Send SOL to a recipient.

    Business rules:
    - Amount converted to integer lamports exactly
    - Recipient validated before any network call
    - A fresh recency token per submission
    - Success only once the transaction confirms
    """

    def __init__(
        self,
        rpc_client: IRpcClient,
        signing_agent: ISigningAgent,
        builder: InstructionBuilder,
        poller: ConfirmationPoller,
    ):
        self.rpc_client = rpc_client
        self.signing_agent = signing_agent
        self.builder = builder
        self.poller = poller

    async def execute(self, recipient: str, amount_text: str) -> ConfirmationOutcome:
        """
        Execute native transfer.

        Args:
            recipient: Base58 recipient address
            amount_text: SOL amount as typed by the user

        Returns:
            CONFIRMED outcome

        Raises:
            InvalidRecipientError: If recipient is invalid
            InvalidAmountError: If amount is invalid
            NetworkError: If fetching the recency token or submitting fails
            WalletRejectedError: If the wallet refuses to sign or send
            ConfirmationTimeoutError: If confirmation exceeds the deadline
            OnChainFailureError: If the transaction fails on chain
        """
        request = NativeTransfer(
            recipient=recipient,
            amount=to_base_units(amount_text, SOL_DECIMALS),
        )
        self.builder.validate(request)

        recency_token = await self.rpc_client.get_latest_recency_token()
        prepared = self.builder.build(
            request,
            fee_payer=self.signing_agent.public_key,
            recency_token=recency_token,
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
            f"Submitted transfer of {request.amount.base_units} lamports "
            f"to {recipient}: {handle}"
        )

        return await self.poller.wait_for(handle)
