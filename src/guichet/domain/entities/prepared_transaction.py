"""
PreparedTransaction entity - instructions ready for the wallet to sign.
"""

from dataclasses import dataclass

from solders.hash import Hash
from solders.instruction import Instruction
from solders.message import Message
from solders.pubkey import Pubkey


@dataclass(frozen=True)
class RecencyToken:
    """
    Recent blockhash reference that makes a transaction valid.

    Expires once the ledger passes last_valid_block_height.
    """

    blockhash: str
    last_valid_block_height: int

    def to_hash(self) -> Hash:
        """Blockhash as a solders Hash."""
        return Hash.from_string(self.blockhash)


@dataclass(frozen=True)
class PreparedTransaction:
    """
    Ordered instructions plus fee payer and recency token.

    Business rules:
    - Built fresh for each submission attempt, never reused
    - Immutable after handoff to the signing agent
    """

    instructions: tuple[Instruction, ...]
    fee_payer: Pubkey
    recency_token: RecencyToken

    def __post_init__(self):
        if not self.instructions:
            raise ValueError("PreparedTransaction needs at least one instruction")

    def to_message(self) -> Message:
        """Compile instructions into a message bound to the recency token."""
        return Message.new_with_blockhash(
            list(self.instructions),
            self.fee_payer,
            self.recency_token.to_hash(),
        )

    @property
    def program_ids(self) -> list[Pubkey]:
        """Program invoked by each instruction, in order."""
        return [ix.program_id for ix in self.instructions]


@dataclass(frozen=True)
class SubmissionHandle:
    """Transaction signature returned by submission; key for polling."""

    signature: str

    def __str__(self) -> str:
        return self.signature
