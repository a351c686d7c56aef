"""
Instruction builder for native transfers, token transfers and airdrops.

Turns validated requests into immutable PreparedTransactions. Never submits
and never touches the network: callers fetch the recency token and the
recipient account existence themselves, after validate() has passed.
"""

import logging
from typing import Optional, Union

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey
from solders.system_program import TransferParams, transfer
from spl.token.instructions import TransferCheckedParams, transfer_checked

from guichet.domain.entities.prepared_transaction import (
    PreparedTransaction,
    RecencyToken,
)
from guichet.domain.entities.transfer_request import (
    AirdropRequest,
    NativeTransfer,
    TokenTransfer,
    TransferRequest,
)
from guichet.domain.exceptions import InvalidAmountError
from guichet.domain.value_objects.wallet_address import WalletAddress
from guichet.infrastructure.blockchain.constants import (
    ASSOCIATED_TOKEN_PROGRAM,
    ATA_CREATE_IDEMPOTENT,
    SYSTEM_PROGRAM,
    TOKEN_PROGRAM,
)

logger = logging.getLogger(__name__)


def derive_associated_token_address(owner: Pubkey, mint: Pubkey) -> Pubkey:
    """
    Derive the associated token account for (owner, mint).

    Seeds: [owner, token_program, mint] under the associated token program.

    Args:
        owner: Wallet owning the token account
        mint: Token mint

    Returns:
        Associated token account address
    """
    address, _bump = Pubkey.find_program_address(
        [bytes(owner), bytes(TOKEN_PROGRAM), bytes(mint)],
        ASSOCIATED_TOKEN_PROGRAM,
    )
    return address


def create_associated_token_account_idempotent(
    payer: Pubkey, owner: Pubkey, mint: Pubkey
) -> Instruction:
    """
    Build a CreateIdempotent associated token account instruction.

    Unlike Create, the idempotent variant succeeds when the account already
    exists with the expected owner and mint.
    """
    associated_account = derive_associated_token_address(owner, mint)
    return Instruction(
        ASSOCIATED_TOKEN_PROGRAM,
        bytes([ATA_CREATE_IDEMPOTENT]),
        [
            AccountMeta(payer, True, True),
            AccountMeta(associated_account, False, True),
            AccountMeta(owner, False, False),
            AccountMeta(mint, False, False),
            AccountMeta(SYSTEM_PROGRAM, False, False),
            AccountMeta(TOKEN_PROGRAM, False, False),
        ],
    )


class InstructionBuilder:
    """
    Assembles instruction lists for user actions.

    Business rules:
    - Recipient (and mint) must parse as public keys before anything else
    - Amounts are raw integer base units, never display values
    - A missing recipient token account gets exactly one create instruction
    """

    def validate(self, request: Union[TransferRequest, AirdropRequest]) -> None:
        """
        Validate a request synchronously.

        Raises:
            InvalidRecipientError: If recipient or mint is not a public key
            InvalidAmountError: If the amount is zero
        """
        WalletAddress.parse(request.recipient)
        if isinstance(request, TokenTransfer):
            WalletAddress.parse(request.mint, field="mint")
        if request.amount.is_zero():
            raise InvalidAmountError(str(request.amount), "must be greater than zero")

    def recipient_token_account(self, request: TokenTransfer) -> Pubkey:
        """Associated token account that will receive a token transfer."""
        recipient = WalletAddress.parse(request.recipient).pubkey
        mint = WalletAddress.parse(request.mint, field="mint").pubkey
        return derive_associated_token_address(recipient, mint)

    def build(
        self,
        request: TransferRequest,
        fee_payer: Pubkey,
        recency_token: RecencyToken,
        recipient_account_exists: Optional[bool] = None,
    ) -> PreparedTransaction:
        """
        Build a prepared transaction for a transfer request.

        Args:
            request: Native or token transfer
            fee_payer: Wallet paying fees and signing
            recency_token: Blockhash fetched for this submission attempt
            recipient_account_exists: Whether the recipient's associated
                token account exists (token transfers). None means unknown,
                in which case the idempotent create is included.

        Returns:
            Immutable PreparedTransaction

        Raises:
            InvalidRecipientError: If recipient or mint is invalid
            InvalidAmountError: If the amount is zero
        """
        self.validate(request)

        if isinstance(request, NativeTransfer):
            instructions = self._native_transfer(request, fee_payer)
        elif isinstance(request, TokenTransfer):
            instructions = self._token_transfer(
                request, fee_payer, recipient_account_exists
            )
        else:
            raise TypeError(f"Unsupported request: {type(request).__name__}")

        return PreparedTransaction(
            instructions=tuple(instructions),
            fee_payer=fee_payer,
            recency_token=recency_token,
        )

    def build_airdrop(self, request: AirdropRequest) -> tuple[Pubkey, int]:
        """
        Resolve an airdrop request into (recipient, lamports).

        Airdrops are funded by the network, so there is nothing to sign.
        """
        self.validate(request)
        recipient = WalletAddress.parse(request.recipient).pubkey
        return recipient, request.amount.base_units

    def _native_transfer(
        self, request: NativeTransfer, fee_payer: Pubkey
    ) -> list[Instruction]:
        recipient = WalletAddress.parse(request.recipient).pubkey
        return [
            transfer(
                TransferParams(
                    from_pubkey=fee_payer,
                    to_pubkey=recipient,
                    lamports=request.amount.base_units,
                )
            )
        ]

    def _token_transfer(
        self,
        request: TokenTransfer,
        fee_payer: Pubkey,
        recipient_account_exists: Optional[bool],
    ) -> list[Instruction]:
        recipient = WalletAddress.parse(request.recipient).pubkey
        mint = WalletAddress.parse(request.mint, field="mint").pubkey

        source_account = derive_associated_token_address(fee_payer, mint)
        dest_account = derive_associated_token_address(recipient, mint)

        instructions: list[Instruction] = []
        if not recipient_account_exists:
            logger.debug(
                f"Recipient token account {dest_account} missing or unknown, "
                f"prepending create"
            )
            instructions.append(
                create_associated_token_account_idempotent(
                    payer=fee_payer, owner=recipient, mint=mint
                )
            )

        instructions.append(
            transfer_checked(
                TransferCheckedParams(
                    program_id=TOKEN_PROGRAM,
                    source=source_account,
                    mint=mint,
                    dest=dest_account,
                    owner=fee_payer,
                    amount=request.amount.base_units,
                    decimals=request.source_decimals,
                )
            )
        )
        return instructions
