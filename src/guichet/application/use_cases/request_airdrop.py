"""
Request Airdrop use case.

Asks a test network to credit lamports to an address and waits for the
airdrop transaction to confirm.
"""

import logging

from guichet.application.services.confirmation_poller import ConfirmationPoller
from guichet.domain.entities.confirmation import ConfirmationOutcome
from guichet.domain.entities.transfer_request import AirdropRequest
from guichet.domain.exceptions import CapabilityMissingError
from guichet.domain.services.i_rpc_client import IRpcClient
from guichet.domain.value_objects.amount import SOL_DECIMALS, to_base_units
from guichet.infrastructure.blockchain.instruction_builder import (
    InstructionBuilder,
)

logger = logging.getLogger(__name__)


class RequestAirdrop:
    """
    Request a network-funded airdrop.

    Business rules:
    - Refused on networks without a faucet (mainnet-beta)
    - Recipient and amount validated before any network call
    - Success only once the airdrop transaction confirms
    """

    def __init__(
        self,
        rpc_client: IRpcClient,
        builder: InstructionBuilder,
        poller: ConfirmationPoller,
        airdrop_enabled: bool = True,
        network: str = "devnet",
    ):
        """
        Initialize use case with dependencies.

        Args:
            rpc_client: Ledger RPC client
            builder: Instruction builder (validation)
            poller: Confirmation poller
            airdrop_enabled: Whether the network offers airdrops
            network: Network name, for error messages
        """
        self.rpc_client = rpc_client
        self.builder = builder
        self.poller = poller
        self.airdrop_enabled = airdrop_enabled
        self.network = network

    async def execute(self, recipient: str, amount_text: str) -> ConfirmationOutcome:
        """
        Execute airdrop request.

        Args:
            recipient: Base58 address to credit
            amount_text: SOL amount as typed by the user

        Returns:
            CONFIRMED outcome

        Raises:
            CapabilityMissingError: If airdrops are disabled on this network
            InvalidRecipientError: If recipient is invalid
            InvalidAmountError: If amount is invalid
            NetworkError: If the airdrop request fails
            ConfirmationTimeoutError: If confirmation exceeds the deadline
            OnChainFailureError: If the airdrop transaction fails
        """
        if not self.airdrop_enabled:
            raise CapabilityMissingError(
                "airdrop", f"Airdrops are not available on {self.network}"
            )

        request = AirdropRequest(
            recipient=recipient,
            amount=to_base_units(amount_text, SOL_DECIMALS),
        )
        pubkey, lamports = self.builder.build_airdrop(request)

        logger.info(f"Requesting airdrop of {lamports} lamports to {pubkey}")
        handle = await self.rpc_client.request_airdrop(pubkey, lamports)

        return await self.poller.wait_for(handle)
