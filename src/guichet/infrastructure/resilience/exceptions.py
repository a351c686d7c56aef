"""
Resilience exceptions.
"""

from typing import Optional

from guichet.domain.exceptions import NetworkError


class CircuitBreakerOpenError(NetworkError):
    """
    Exception raised when circuit breaker is open.

    Indicates that the RPC endpoint is considered unavailable and calls
    are being blocked.
    """

    def __init__(self, breaker_name: str, failure_count: int):
        """
        Initialize circuit breaker open error.

        Args:
            breaker_name: Name of the circuit breaker
            failure_count: Number of failures that triggered the breaker
        """
        super().__init__(
            f"Circuit breaker '{breaker_name}' is OPEN "
            f"({failure_count} failures). Calls are blocked.",
            details={"breaker": breaker_name, "failure_count": failure_count},
        )
        self.breaker_name = breaker_name
        self.failure_count = failure_count


class RetryError(NetworkError):
    """Raised when all retry attempts are exhausted."""

    def __init__(
        self,
        message: str,
        attempts: int,
        last_exception: Optional[Exception] = None,
    ):
        super().__init__(message, details={"attempts": attempts})
        self.attempts = attempts
        self.last_exception = last_exception
