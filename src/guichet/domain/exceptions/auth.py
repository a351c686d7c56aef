"""
Signing-related exceptions.
"""

from guichet.domain.exceptions.base import GuichetException


class VerificationFailureError(GuichetException):
    """Raised when a wallet-produced signature fails local verification."""

    def __init__(self, signer: str):
        super().__init__(
            f"Signature returned by wallet does not verify for {signer}",
            code="VERIFICATION_FAILURE",
            details={"signer": signer},
        )
        self.signer = signer


class WalletRejectedError(GuichetException):
    """Raised when the wallet refuses or fails a signing request."""

    def __init__(self, operation: str, reason: str):
        super().__init__(
            f"Wallet rejected {operation}: {reason}",
            code="WALLET_REJECTED",
            details={"operation": operation, "reason": reason},
        )
        self.operation = operation
        self.reason = reason
