"""
Circuit Breaker Pattern Implementation.

Stops calling an RPC endpoint that keeps failing.

State Machine:
    CLOSED -> OPEN -> HALF_OPEN -> CLOSED
           |                    |
           +--------------------+

- CLOSED: Normal operation, counting failures
- OPEN: Blocking all calls, waiting for timeout
- HALF_OPEN: Testing if service recovered
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from guichet.infrastructure.resilience.exceptions import CircuitBreakerOpenError

logger = logging.getLogger(__name__)


class CircuitBreakerState(str, Enum):
    """Circuit breaker states."""

    CLOSED = "closed"  # Normal operation
    OPEN = "open"  # Blocking calls
    HALF_OPEN = "half_open"  # Testing recovery


@dataclass
class CircuitBreakerConfig:
    """
    Circuit breaker configuration.

    Attributes:
        failure_threshold: Number of failures before opening circuit
        success_threshold: Number of successes to close from half-open
        timeout: Seconds to wait before trying half-open
        half_open_max_calls: Max calls admitted in half-open state
        expected_exceptions: Exceptions counted as failures
    """

    failure_threshold: int = 5
    success_threshold: int = 2
    timeout: float = 30.0
    half_open_max_calls: int = 3
    expected_exceptions: tuple = (Exception,)


class CircuitBreaker:
    """
    Circuit breaker for async calls.

    Runs on a single event loop, so state changes need no lock: there is
    no await between checking and updating state.

    Example:
        breaker = CircuitBreaker("solana_rpc")
        result = await breaker.call_async(post_json, payload)
    """

    def __init__(
        self,
        name: str,
        config: Optional[CircuitBreakerConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize circuit breaker.

        Args:
            name: Unique name for this circuit breaker
            config: Configuration (uses defaults if not provided)
            clock: Monotonic clock in seconds
        """
        self.name = name
        self.config = config or CircuitBreakerConfig()
        self._clock = clock

        self._state = CircuitBreakerState.CLOSED
        self._failure_count = 0
        self._success_count = 0
        self._last_failure_time: Optional[float] = None
        self._half_open_calls = 0

    @property
    def state(self) -> CircuitBreakerState:
        """Get current state."""
        return self._state

    @property
    def failure_count(self) -> int:
        """Get current failure count."""
        return self._failure_count

    async def call_async(self, func: Callable, *args, **kwargs) -> Any:
        """
        Execute async function with circuit breaker protection.

        Args:
            func: Async function to call
            *args: Positional arguments for function
            **kwargs: Keyword arguments for function

        Returns:
            Result from function

        Raises:
            CircuitBreakerOpenError: If circuit is open
            Exception: Any exception from the function
        """
        if not self._can_attempt():
            raise CircuitBreakerOpenError(self.name, self._failure_count)

        if self._state == CircuitBreakerState.HALF_OPEN:
            self._half_open_calls += 1

        try:
            result = await func(*args, **kwargs)
        except self.config.expected_exceptions:
            self._on_failure()
            raise
        self._on_success()
        return result

    def _can_attempt(self) -> bool:
        if self._state == CircuitBreakerState.CLOSED:
            return True

        if self._state == CircuitBreakerState.OPEN:
            if self._should_attempt_reset():
                self._transition(CircuitBreakerState.HALF_OPEN)
                return True
            return False

        return self._half_open_calls < self.config.half_open_max_calls

    def _should_attempt_reset(self) -> bool:
        """Check if enough time has passed to try half-open."""
        if self._last_failure_time is None:
            return False
        elapsed = self._clock() - self._last_failure_time
        return elapsed >= self.config.timeout

    def _on_success(self) -> None:
        if self._state == CircuitBreakerState.CLOSED:
            self._failure_count = 0

        elif self._state == CircuitBreakerState.HALF_OPEN:
            self._success_count += 1
            if self._success_count >= self.config.success_threshold:
                self._transition(CircuitBreakerState.CLOSED)

    def _on_failure(self) -> None:
        self._failure_count += 1
        self._last_failure_time = self._clock()

        if self._state == CircuitBreakerState.CLOSED:
            if self._failure_count >= self.config.failure_threshold:
                self._transition(CircuitBreakerState.OPEN)

        elif self._state == CircuitBreakerState.HALF_OPEN:
            # Any failure in half-open goes back to open
            self._transition(CircuitBreakerState.OPEN)

    def _transition(self, state: CircuitBreakerState) -> None:
        logger.warning(
            f"Circuit breaker '{self.name}': {self._state.value} -> {state.value}"
        )
        self._state = state
        self._success_count = 0
        self._half_open_calls = 0
        if state == CircuitBreakerState.HALF_OPEN:
            self._failure_count = 0
        elif state == CircuitBreakerState.CLOSED:
            self._failure_count = 0
            self._last_failure_time = None
