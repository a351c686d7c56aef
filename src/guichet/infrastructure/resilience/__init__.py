"""
Resilience patterns for ledger RPC access.

- Circuit Breaker: Stops calling a failing endpoint
- Retry: Automatic retry with exponential backoff
"""

from guichet.infrastructure.resilience.circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerConfig,
    CircuitBreakerState,
)
from guichet.infrastructure.resilience.exceptions import (
    CircuitBreakerOpenError,
    RetryError,
)
from guichet.infrastructure.resilience.retry import (
    BackoffStrategy,
    Retry,
    RetryConfig,
)

__all__ = [
    # Circuit Breaker
    "CircuitBreaker",
    "CircuitBreakerConfig",
    "CircuitBreakerState",
    "CircuitBreakerOpenError",
    # Retry
    "Retry",
    "RetryConfig",
    "RetryError",
    "BackoffStrategy",
]
