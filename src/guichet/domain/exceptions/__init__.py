"""
Domain exceptions package.
"""

# Signing exceptions
from guichet.domain.exceptions.auth import (
    VerificationFailureError,
    WalletRejectedError,
)

# Base exceptions
from guichet.domain.exceptions.base import (
    ActionInProgressError,
    CapabilityMissingError,
    GuichetException,
    InvalidAmountError,
    InvalidInputError,
    InvalidRecipientError,
    WalletNotConnectedError,
)

# Blockchain exceptions
from guichet.domain.exceptions.blockchain import (
    ConfirmationTimeoutError,
    NetworkError,
    OnChainFailureError,
    RPCError,
    TokenAccountMissingError,
    TransactionError,
)

__all__ = [
    # Base
    "GuichetException",
    "InvalidInputError",
    "InvalidAmountError",
    "InvalidRecipientError",
    "CapabilityMissingError",
    "WalletNotConnectedError",
    "ActionInProgressError",
    # Blockchain
    "NetworkError",
    "RPCError",
    "TransactionError",
    "ConfirmationTimeoutError",
    "OnChainFailureError",
    "TokenAccountMissingError",
    # Signing
    "VerificationFailureError",
    "WalletRejectedError",
]
