"""
Base domain exceptions.
"""

from typing import Optional


class GuichetException(Exception):
    """Base exception for all Guichet domain errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: Optional[dict] = None,
    ):
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class InvalidInputError(GuichetException):
    """Raised when user input is rejected before any network call."""

    def __init__(self, field: str, reason: str, code: str = "INVALID_INPUT"):
        message = f"Invalid {field}: {reason}"
        super().__init__(message, code=code, details={"field": field})
        self.field = field
        self.reason = reason


class InvalidAmountError(InvalidInputError):
    """Raised when an amount is empty, non-numeric, non-positive or too precise."""

    def __init__(self, value: str, reason: str):
        super().__init__(field="amount", reason=reason, code="INVALID_AMOUNT")
        self.value = value


class InvalidRecipientError(InvalidInputError):
    """Raised when an address does not parse as a public key."""

    def __init__(self, address: str, field: str = "recipient"):
        super().__init__(
            field=field,
            reason=f"'{address}' is not a valid public key",
            code="INVALID_RECIPIENT",
        )
        self.address = address


class CapabilityMissingError(GuichetException):
    """Raised when the signing agent or network lacks a requested capability."""

    def __init__(self, capability: str, message: str | None = None):
        super().__init__(
            message or f"Capability not available: {capability}",
            code="CAPABILITY_MISSING",
            details={"capability": capability},
        )
        self.capability = capability


class WalletNotConnectedError(CapabilityMissingError):
    """Raised when an action needs a connected wallet and none is present."""

    def __init__(self):
        super().__init__("wallet", "Wallet not connected")


class ActionInProgressError(GuichetException):
    """Raised when an action slot is entered while already busy."""

    def __init__(self, action: str):
        super().__init__(
            f"Action already in progress: {action}",
            code="ACTION_IN_PROGRESS",
            details={"action": action},
        )
        self.action = action
