"""
Solana blockchain adapters.
"""

from guichet.infrastructure.blockchain.instruction_builder import (
    InstructionBuilder,
    create_associated_token_account_idempotent,
    derive_associated_token_address,
)
from guichet.infrastructure.blockchain.solana_rpc_client import (
    RPCTransportError,
    SolanaRPCClient,
)

__all__ = [
    "InstructionBuilder",
    "create_associated_token_account_idempotent",
    "derive_associated_token_address",
    "RPCTransportError",
    "SolanaRPCClient",
]
