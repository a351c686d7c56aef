"""
Confirmation poller - bounded-time polling of submitted transactions.

State Machine:
    SUBMITTED -> PENDING -> CONFIRMED
                        |-> FAILED(reason)
                        |-> TIMED_OUT

- SUBMITTED: Handle just returned by submission
- PENDING: Status queried, no terminal marker yet
- CONFIRMED: Ledger reports the target commitment
- FAILED: Ledger reports an explicit transaction error
- TIMED_OUT: Deadline elapsed without a terminal status

Clock and sleep are injectable so tests can drive time without waiting.
"""

import asyncio
import logging
import time
from collections import OrderedDict
from typing import Any, Awaitable, Callable, Optional

from guichet.config.settings import GuichetConfig
from guichet.domain.entities.confirmation import (
    ConfirmationOutcome,
    ConfirmationState,
)
from guichet.domain.entities.prepared_transaction import SubmissionHandle
from guichet.domain.exceptions import (
    ConfirmationTimeoutError,
    NetworkError,
    OnChainFailureError,
)
from guichet.domain.services.i_rpc_client import IRpcClient

logger = logging.getLogger(__name__)

ACCEPTED_MARKERS = {
    "confirmed": frozenset({"confirmed", "finalized"}),
    "finalized": frozenset({"finalized"}),
}


class ConfirmationPoller:
    """
    Turns a submission handle into a terminal ConfirmationOutcome.

    Business rules:
    - One status query per cycle, one cadence wait between cycles
    - Transient NetworkErrors count as pending cycles within the deadline
    - Terminal outcomes are cached for the cache_size most recently used
      handles; re-polling a cached handle does not query. A handle evicted
      from the cache is polled afresh, so size the cache above the number
      of handles a caller may re-poll
    - Concurrent polls of one handle share a single polling loop
    """

    def __init__(
        self,
        rpc_client: IRpcClient,
        poll_interval: float = 1.0,
        deadline: float = 30.0,
        commitment: str = "confirmed",
        cache_size: int = 256,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """
        Initialize poller.

        Args:
            rpc_client: Status source
            poll_interval: Seconds between status queries
            deadline: Seconds after submission before TIMED_OUT
            commitment: Target commitment ("confirmed" or "finalized")
            cache_size: Max terminal outcomes kept (LRU), bounds the
                no-requery guarantee
            clock: Monotonic clock in seconds
            sleep: Coroutine used for the cadence wait
        """
        if poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        if deadline <= 0:
            raise ValueError("deadline must be positive")
        if cache_size <= 0:
            raise ValueError("cache_size must be positive")
        if commitment not in ACCEPTED_MARKERS:
            raise ValueError(f"Unsupported commitment: {commitment}")

        self._rpc = rpc_client
        self.poll_interval = poll_interval
        self.deadline = deadline
        self.commitment = commitment
        self._accepted = ACCEPTED_MARKERS[commitment]
        self._cache_size = cache_size
        self._clock = clock
        self._sleep = sleep

        self._outcomes: OrderedDict[SubmissionHandle, ConfirmationOutcome] = (
            OrderedDict()
        )
        self._states: dict[SubmissionHandle, ConfirmationState] = {}
        self._in_flight: dict[SubmissionHandle, asyncio.Task] = {}

    @classmethod
    def from_settings(
        cls, rpc_client: IRpcClient, settings: GuichetConfig, **kwargs
    ) -> "ConfirmationPoller":
        """Build a poller from the confirmation section of settings."""
        confirmation = settings.confirmation
        return cls(
            rpc_client,
            poll_interval=confirmation.poll_interval,
            deadline=confirmation.deadline,
            commitment=settings.commitment,
            cache_size=confirmation.outcome_cache_size,
            **kwargs,
        )

    def state_of(self, handle: SubmissionHandle) -> Optional[ConfirmationState]:
        """Current state of a handle, None if never polled."""
        outcome = self._outcomes.get(handle)
        if outcome is not None:
            return outcome.state
        return self._states.get(handle)

    def cached_outcome(self, handle: SubmissionHandle) -> Optional[ConfirmationOutcome]:
        """Terminal outcome for a handle, if already reached."""
        return self._outcomes.get(handle)

    def interpret(
        self, status: Optional[dict[str, Any]]
    ) -> tuple[ConfirmationState, Optional[str]]:
        """
        Map a signature status to a state.

        Args:
            status: getSignatureStatuses entry (None when unknown)

        Returns:
            Tuple of (state, failure reason)
        """
        if not status:
            return ConfirmationState.PENDING, None

        err = status.get("err")
        if err is not None:
            return ConfirmationState.FAILED, str(err)

        if status.get("confirmationStatus") in self._accepted:
            return ConfirmationState.CONFIRMED, None

        return ConfirmationState.PENDING, None

    async def poll(self, handle: SubmissionHandle) -> ConfirmationOutcome:
        """
        Poll a handle until it reaches a terminal state.

        Args:
            handle: Submission handle

        Returns:
            Terminal ConfirmationOutcome (cached on repeat calls)
        """
        cached = self._outcomes.get(handle)
        if cached is not None:
            self._outcomes.move_to_end(handle)
            logger.debug(f"Returning cached {cached.state.value} for {handle}")
            return cached

        task = self._in_flight.get(handle)
        if task is None:
            task = asyncio.ensure_future(self._run(handle))
            self._in_flight[handle] = task
            task.add_done_callback(lambda _t: self._in_flight.pop(handle, None))

        return await asyncio.shield(task)

    async def wait_for(self, handle: SubmissionHandle) -> ConfirmationOutcome:
        """
        Poll a handle and raise unless it confirms.

        Args:
            handle: Submission handle

        Returns:
            CONFIRMED outcome

        Raises:
            ConfirmationTimeoutError: Deadline elapsed (may still complete)
            OnChainFailureError: Ledger reported a transaction error
        """
        outcome = await self.poll(handle)

        if outcome.state == ConfirmationState.TIMED_OUT:
            raise ConfirmationTimeoutError(handle.signature, self.deadline)
        if outcome.state == ConfirmationState.FAILED:
            raise OnChainFailureError(handle.signature, outcome.reason or "unknown")

        return outcome

    async def _run(self, handle: SubmissionHandle) -> ConfirmationOutcome:
        started = self._clock()
        cycles = 0
        self._states[handle] = ConfirmationState.SUBMITTED
        logger.info(f"Polling {handle} (deadline {self.deadline:g}s)")

        while True:
            elapsed = self._clock() - started
            if elapsed >= self.deadline:
                return self._finish(
                    handle, ConfirmationState.TIMED_OUT, None, cycles, elapsed
                )

            cycles += 1
            try:
                statuses = await self._rpc.get_status([handle])
                status = statuses[0] if statuses else None
            except NetworkError as e:
                logger.warning(
                    f"Status query {cycles} for {handle} failed, retrying: {e}"
                )
                status = None

            state, reason = self.interpret(status)
            if state.is_terminal:
                return self._finish(
                    handle, state, reason, cycles, self._clock() - started
                )

            self._states[handle] = ConfirmationState.PENDING
            await self._sleep(self.poll_interval)

    def _finish(
        self,
        handle: SubmissionHandle,
        state: ConfirmationState,
        reason: Optional[str],
        cycles: int,
        elapsed: float,
    ) -> ConfirmationOutcome:
        outcome = ConfirmationOutcome(
            state=state,
            handle=handle,
            reason=reason,
            cycles=cycles,
            elapsed=elapsed,
        )
        self._states.pop(handle, None)
        self._outcomes[handle] = outcome
        while len(self._outcomes) > self._cache_size:
            self._outcomes.popitem(last=False)

        log = logger.info if outcome.succeeded else logger.warning
        log(
            f"{handle} -> {state.value} after {cycles} cycle(s), {elapsed:.1f}s"
            + (f": {reason}" if reason else "")
        )
        return outcome
