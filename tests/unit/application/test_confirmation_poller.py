"""
Unit tests for ConfirmationPoller.

Time is driven by FakeClock: each cadence wait advances the clock by the
poll interval without real sleeping.

Usage:
    pytest tests/unit/application/test_confirmation_poller.py
"""

import asyncio
from unittest.mock import AsyncMock

import pytest
from helpers.fakes import (
    CONFIRMED_STATUS,
    FAILED_STATUS,
    FINALIZED_STATUS,
    PROCESSED_STATUS,
)

from guichet.application.services.confirmation_poller import ConfirmationPoller
from guichet.domain.entities.confirmation import ConfirmationState
from guichet.domain.entities.prepared_transaction import SubmissionHandle
from guichet.domain.exceptions import (
    ConfirmationTimeoutError,
    NetworkError,
    OnChainFailureError,
)
from guichet.domain.services.i_rpc_client import IRpcClient


class TestConfirmationPoller:
    """Unit tests for ConfirmationPoller."""

    # ================================================================
    # Helper Methods
    # ================================================================

    def _rpc(self, *responses) -> AsyncMock:
        rpc = AsyncMock(spec=IRpcClient)
        rpc.get_status.side_effect = list(responses)
        return rpc

    def _poller(self, rpc, clock, **kwargs) -> ConfirmationPoller:
        kwargs.setdefault("poll_interval", 1.0)
        kwargs.setdefault("deadline", 5.0)
        return ConfirmationPoller(rpc, clock=clock, sleep=clock.sleep, **kwargs)

    # ================================================================
    # Test Methods
    # ================================================================

    async def test_confirmed_after_pending_cycles(self, fake_clock):
        """Test three pending cycles then confirmed issues no further queries."""
        rpc = self._rpc(
            [None], [PROCESSED_STATUS], [PROCESSED_STATUS], [CONFIRMED_STATUS]
        )
        poller = self._poller(rpc, fake_clock)
        handle = SubmissionHandle("sig")

        outcome = await poller.poll(handle)

        assert outcome.state == ConfirmationState.CONFIRMED
        assert outcome.cycles == 4
        assert rpc.get_status.await_count == 4
        assert fake_clock.sleeps == [1.0, 1.0, 1.0]
        rpc.get_status.assert_awaited_with([handle])

    async def test_timeout_after_deadline(self, fake_clock):
        """Test a never-terminal source times out with no sixth query."""
        rpc = AsyncMock(spec=IRpcClient)
        rpc.get_status.return_value = [PROCESSED_STATUS]
        poller = self._poller(rpc, fake_clock)

        outcome = await poller.poll(SubmissionHandle("sig"))

        assert outcome.state == ConfirmationState.TIMED_OUT
        assert rpc.get_status.await_count == 5
        assert outcome.cycles == 5
        assert outcome.elapsed == 5.0

    async def test_failed_status_carries_reason(self, fake_clock):
        rpc = self._rpc([FAILED_STATUS])
        poller = self._poller(rpc, fake_clock)

        outcome = await poller.poll(SubmissionHandle("sig"))

        assert outcome.state == ConfirmationState.FAILED
        assert "InstructionError" in outcome.reason
        assert fake_clock.sleeps == []

    async def test_network_error_counts_as_pending(self, fake_clock):
        rpc = self._rpc(NetworkError("connection reset"), [CONFIRMED_STATUS])
        poller = self._poller(rpc, fake_clock)

        outcome = await poller.poll(SubmissionHandle("sig"))

        assert outcome.state == ConfirmationState.CONFIRMED
        assert outcome.cycles == 2

    async def test_finalized_commitment_ignores_confirmed(self, fake_clock):
        rpc = self._rpc([CONFIRMED_STATUS], [FINALIZED_STATUS])
        poller = self._poller(rpc, fake_clock, commitment="finalized")

        outcome = await poller.poll(SubmissionHandle("sig"))

        assert outcome.state == ConfirmationState.CONFIRMED
        assert outcome.cycles == 2

    async def test_confirmed_commitment_accepts_finalized(self, fake_clock):
        rpc = self._rpc([FINALIZED_STATUS])
        outcome = await self._poller(rpc, fake_clock).poll(SubmissionHandle("sig"))
        assert outcome.succeeded

    async def test_terminal_outcome_is_cached(self, fake_clock):
        rpc = self._rpc([CONFIRMED_STATUS])
        poller = self._poller(rpc, fake_clock)
        handle = SubmissionHandle("sig")

        first = await poller.poll(handle)
        second = await poller.poll(handle)

        assert second is first
        assert rpc.get_status.await_count == 1
        assert poller.state_of(handle) == ConfirmationState.CONFIRMED

    async def test_cache_evicts_least_recent(self, fake_clock):
        rpc = AsyncMock(spec=IRpcClient)
        rpc.get_status.return_value = [CONFIRMED_STATUS]
        poller = self._poller(rpc, fake_clock, cache_size=1)

        await poller.poll(SubmissionHandle("a"))
        await poller.poll(SubmissionHandle("b"))

        assert poller.cached_outcome(SubmissionHandle("a")) is None
        assert poller.cached_outcome(SubmissionHandle("b")) is not None

    async def test_cached_handles_within_capacity_never_requery(self, fake_clock):
        """Test every handle still inside the cache returns without a query."""
        rpc = AsyncMock(spec=IRpcClient)
        rpc.get_status.return_value = [CONFIRMED_STATUS]
        poller = self._poller(rpc, fake_clock, cache_size=3)
        handles = [SubmissionHandle(f"sig-{i}") for i in range(3)]

        for handle in handles:
            await poller.poll(handle)
        for handle in handles:
            await poller.poll(handle)

        assert rpc.get_status.await_count == 3

    async def test_evicted_handle_is_polled_afresh(self, fake_clock):
        rpc = AsyncMock(spec=IRpcClient)
        rpc.get_status.return_value = [CONFIRMED_STATUS]
        poller = self._poller(rpc, fake_clock, cache_size=1)

        await poller.poll(SubmissionHandle("a"))
        await poller.poll(SubmissionHandle("b"))
        await poller.poll(SubmissionHandle("a"))

        assert rpc.get_status.await_count == 3
        assert poller.cached_outcome(SubmissionHandle("b")) is None

    async def test_concurrent_polls_share_one_loop(self, fake_clock):
        rpc = self._rpc([PROCESSED_STATUS], [CONFIRMED_STATUS])
        poller = self._poller(rpc, fake_clock)
        handle = SubmissionHandle("sig")

        first, second = await asyncio.gather(poller.poll(handle), poller.poll(handle))

        assert first is second
        assert rpc.get_status.await_count == 2

    async def test_wait_for_raises_on_timeout(self, fake_clock):
        rpc = AsyncMock(spec=IRpcClient)
        rpc.get_status.return_value = [None]
        poller = self._poller(rpc, fake_clock, deadline=2.0)

        with pytest.raises(ConfirmationTimeoutError) as exc_info:
            await poller.wait_for(SubmissionHandle("sig"))

        assert exc_info.value.tx_signature == "sig"
        assert "may still complete" in exc_info.value.message

    async def test_wait_for_raises_on_failure(self, fake_clock):
        rpc = self._rpc([FAILED_STATUS])
        poller = self._poller(rpc, fake_clock)

        with pytest.raises(OnChainFailureError):
            await poller.wait_for(SubmissionHandle("sig"))

    def test_rejects_unknown_commitment(self):
        with pytest.raises(ValueError):
            ConfirmationPoller(AsyncMock(spec=IRpcClient), commitment="processed")

    def test_rejects_empty_cache(self):
        with pytest.raises(ValueError):
            ConfirmationPoller(AsyncMock(spec=IRpcClient), cache_size=0)

    def test_interpret_unknown_status_is_pending(self):
        poller = ConfirmationPoller(AsyncMock(spec=IRpcClient))
        assert poller.interpret(None) == (ConfirmationState.PENDING, None)
