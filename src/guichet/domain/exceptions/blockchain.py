"""
Blockchain-related exceptions.

Covers RPC transport failures and terminal transaction outcomes.
"""

from typing import Optional

from guichet.domain.exceptions.base import GuichetException


class NetworkError(GuichetException):
    """Transient failure talking to the ledger. Retried by the RPC client."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, code="NETWORK_ERROR", details=details)


class RPCError(NetworkError):
    """RPC call failed (transport error or JSON-RPC error object)."""


class TransactionError(GuichetException):
    """Base exception for submitted transactions that did not succeed."""

    def __init__(
        self,
        message: str,
        tx_signature: str | None = None,
        code: str | None = None,
    ):
        super().__init__(
            message,
            code=code,
            details={"signature": tx_signature} if tx_signature else None,
        )
        self.tx_signature = tx_signature


class ConfirmationTimeoutError(TransactionError):
    """
    Deadline elapsed without a terminal status.

    The transaction may still land; callers should not report it as rejected.
    """

    def __init__(self, tx_signature: str, deadline: float):
        super().__init__(
            f"Transaction not confirmed within {deadline:g}s, "
            f"it may still complete: {tx_signature}",
            tx_signature=tx_signature,
            code="CONFIRMATION_TIMEOUT",
        )
        self.deadline = deadline


class OnChainFailureError(TransactionError):
    """Ledger reported an explicit failure for the transaction."""

    def __init__(self, tx_signature: str, reason: str):
        super().__init__(
            f"Transaction failed on chain: {reason}",
            tx_signature=tx_signature,
            code="ON_CHAIN_FAILURE",
        )
        self.reason = reason


class TokenAccountMissingError(GuichetException):
    """Sender holds no token account for the requested mint."""

    def __init__(self, mint: str, owner: str):
        super().__init__(
            f"No token account for mint {mint} owned by {owner}",
            code="TOKEN_ACCOUNT_MISSING",
            details={"mint": mint, "owner": owner},
        )
        self.mint = mint
        self.owner = owner
