"""
Unit tests for LifecycleOrchestrator.

Usage:
    pytest tests/unit/application/test_lifecycle_orchestrator.py
"""

import asyncio
import logging

from helpers.fakes import (
    CONFIRMED_STATUS,
    FAILED_STATUS,
    PROCESSED_STATUS,
    BrokenMessageSigningAgent,
    RejectingSigningAgent,
    token_account_record,
)
from solders.pubkey import Pubkey

from guichet.application.lifecycle_orchestrator import LifecycleOrchestrator
from guichet.application.services.confirmation_poller import ConfirmationPoller
from guichet.domain.entities.action import ActionKind
from guichet.domain.exceptions import (
    ActionInProgressError,
    CapabilityMissingError,
    ConfirmationTimeoutError,
    InvalidRecipientError,
    NetworkError,
    OnChainFailureError,
    VerificationFailureError,
    WalletNotConnectedError,
    WalletRejectedError,
)
from guichet.domain.value_objects.amount import Amount
from guichet.infrastructure.auth.signature_verifier import SignatureVerifier
from guichet.infrastructure.blockchain.instruction_builder import (
    InstructionBuilder,
)
from guichet.infrastructure.wallet.keypair_signing_agent import (
    KeypairSigningAgent,
)


class TestLifecycleOrchestrator:
    """Unit tests for LifecycleOrchestrator."""

    # ================================================================
    # Helper Methods
    # ================================================================

    def _orchestrator(
        self,
        rpc_client,
        notifier,
        fake_clock,
        keypair=None,
        allow_message_signing=True,
        agent_cls=KeypairSigningAgent,
        **kwargs,
    ) -> LifecycleOrchestrator:
        agent = (
            agent_cls(
                keypair, rpc_client, allow_message_signing=allow_message_signing
            )
            if keypair is not None
            else None
        )
        kwargs.setdefault("late_check_delay", 0.0)
        kwargs.setdefault("sleep", fake_clock.sleep)
        return LifecycleOrchestrator(
            rpc_client=rpc_client,
            signing_agent=agent,
            builder=InstructionBuilder(),
            poller=ConfirmationPoller(
                rpc_client, deadline=5.0, clock=fake_clock, sleep=fake_clock.sleep
            ),
            verifier=SignatureVerifier(),
            notifier=notifier,
            **kwargs,
        )

    # ================================================================
    # Native transfers
    # ================================================================

    async def test_send_native_success_refreshes_balance(
        self, rpc_client, notifier, fake_clock, wallet_keypair, recipient
    ):
        orch = self._orchestrator(rpc_client, notifier, fake_clock, wallet_keypair)

        result = await orch.send_native(recipient, "1.5")

        assert result.success
        assert result.handle.signature == "sig-transfer"
        assert orch.state.balance == Amount.lamports(2_000_000_000)
        assert notifier.successes and not notifier.errors
        assert not orch.slots[ActionKind.TRANSFER].busy

    async def test_busy_slot_rejects_second_entry(
        self, rpc_client, notifier, fake_clock, wallet_keypair, recipient
    ):
        orch = self._orchestrator(rpc_client, notifier, fake_clock, wallet_keypair)

        async with orch.slots[ActionKind.TRANSFER].hold():
            result = await orch.send_native(recipient, "1")

        assert not result.success
        assert isinstance(result.error, ActionInProgressError)
        assert result.error_code == "ACTION_IN_PROGRESS"
        rpc_client.submit.assert_not_awaited()
        assert not orch.slots[ActionKind.TRANSFER].busy

    async def test_distinct_slots_are_independent(
        self, rpc_client, notifier, fake_clock, wallet_keypair
    ):
        orch = self._orchestrator(rpc_client, notifier, fake_clock, wallet_keypair)

        async with orch.slots[ActionKind.TRANSFER].hold():
            result = await orch.sign_message("hello")

        assert result.success
        assert orch.state.last_signed_message == result.signed_message

    async def test_concurrent_same_action_rejected(
        self, rpc_client, notifier, fake_clock, wallet_keypair, recipient
    ):
        release = asyncio.Event()

        async def slow_submit(_serialized):
            await release.wait()
            return rpc_client.submit.return_value

        rpc_client.submit.side_effect = slow_submit
        orch = self._orchestrator(rpc_client, notifier, fake_clock, wallet_keypair)

        first = asyncio.ensure_future(orch.send_native(recipient, "1"))
        await asyncio.sleep(0)
        second = await orch.send_native(recipient, "1")
        release.set()
        first_result = await first

        assert isinstance(second.error, ActionInProgressError)
        assert first_result.success
        assert rpc_client.submit.await_count == 1

    async def test_invalid_recipient_no_network_and_state_untouched(
        self, rpc_client, notifier, fake_clock, wallet_keypair
    ):
        orch = self._orchestrator(rpc_client, notifier, fake_clock, wallet_keypair)

        result = await orch.send_native("definitely-not-valid", "1")

        assert isinstance(result.error, InvalidRecipientError)
        assert rpc_client.method_calls == []
        assert orch.state.balance is None
        assert len(notifier.errors) == 1

    async def test_on_chain_failure_leaves_state(
        self, rpc_client, notifier, fake_clock, wallet_keypair, recipient
    ):
        rpc_client.get_status.return_value = [FAILED_STATUS]
        orch = self._orchestrator(rpc_client, notifier, fake_clock, wallet_keypair)
        orch.state.replace_balance(Amount.lamports(7))

        result = await orch.send_native(recipient, "1")

        assert isinstance(result.error, OnChainFailureError)
        assert result.handle.signature == "sig-transfer"
        assert orch.state.balance == Amount.lamports(7)
        rpc_client.get_balance.assert_not_awaited()

    async def test_network_error_on_submit(
        self, rpc_client, notifier, fake_clock, wallet_keypair, recipient
    ):
        rpc_client.submit.side_effect = NetworkError("down")
        orch = self._orchestrator(rpc_client, notifier, fake_clock, wallet_keypair)

        result = await orch.send_native(recipient, "1")

        assert result.error_code == "NETWORK_ERROR"
        assert not orch.slots[ActionKind.TRANSFER].busy

    async def test_wallet_rejection_is_a_failed_result(
        self, rpc_client, notifier, fake_clock, wallet_keypair, recipient
    ):
        orch = self._orchestrator(
            rpc_client,
            notifier,
            fake_clock,
            wallet_keypair,
            agent_cls=RejectingSigningAgent,
        )
        orch.state.replace_balance(Amount.lamports(7))

        result = await orch.send_native(recipient, "0.1")

        assert not result.success
        assert isinstance(result.error, WalletRejectedError)
        assert "User rejected the request" in notifier.errors[-1]
        assert orch.state.balance == Amount.lamports(7)
        assert not orch.slots[ActionKind.TRANSFER].busy

    # ================================================================
    # Timeout and late confirmation
    # ================================================================

    async def test_timeout_then_late_confirmation_refreshes_only(
        self, rpc_client, notifier, fake_clock, wallet_keypair, recipient
    ):
        rpc_client.get_status.return_value = [PROCESSED_STATUS]
        orch = self._orchestrator(rpc_client, notifier, fake_clock, wallet_keypair)

        result = await orch.send_native(recipient, "1")

        assert not result.success
        assert isinstance(result.error, ConfirmationTimeoutError)
        assert "may still complete" in result.message
        assert len(orch.pending_reconciliations) == 1

        rpc_client.get_status.return_value = [CONFIRMED_STATUS]
        await asyncio.gather(*orch.pending_reconciliations)

        assert orch.state.balance == Amount.lamports(2_000_000_000)
        assert not result.success

    async def test_timeout_late_still_pending_does_not_refresh(
        self, rpc_client, notifier, fake_clock, wallet_keypair, recipient
    ):
        rpc_client.get_status.return_value = [None]
        orch = self._orchestrator(rpc_client, notifier, fake_clock, wallet_keypair)

        await orch.send_native(recipient, "1")
        await asyncio.gather(*orch.pending_reconciliations)

        rpc_client.get_balance.assert_not_awaited()
        assert orch.state.balance is None

    async def test_aclose_cancels_reconciliation(
        self, rpc_client, notifier, fake_clock, wallet_keypair, recipient
    ):
        rpc_client.get_status.return_value = [None]
        orch = self._orchestrator(
            rpc_client,
            notifier,
            fake_clock,
            wallet_keypair,
            late_check_delay=3600.0,
            sleep=asyncio.sleep,
        )

        await orch.send_native(recipient, "1")
        assert orch.pending_reconciliations

        await orch.aclose()

        assert orch.pending_reconciliations == ()
        rpc_client.get_balance.assert_not_awaited()

    async def test_crashed_late_check_is_logged(
        self, rpc_client, notifier, fake_clock, wallet_keypair, recipient, caplog
    ):
        caplog.set_level(logging.ERROR)
        rpc_client.get_status.return_value = [None]
        orch = self._orchestrator(rpc_client, notifier, fake_clock, wallet_keypair)

        await orch.send_native(recipient, "1")
        rpc_client.get_status.side_effect = RuntimeError("status decoder crashed")
        await asyncio.gather(*orch.pending_reconciliations, return_exceptions=True)
        await asyncio.sleep(0)

        assert "Late status check crashed" in caplog.text
        assert "status decoder crashed" in caplog.text
        assert orch.pending_reconciliations == ()

    # ================================================================
    # Token transfers, airdrops, signing
    # ================================================================

    async def test_send_token_refreshes_holdings(
        self, rpc_client, notifier, fake_clock, wallet_keypair, recipient, mint
    ):
        owner = str(wallet_keypair.pubkey())
        rpc_client.enumerate_token_accounts.return_value = [
            token_account_record(mint, owner, "5000000", 6)
        ]
        orch = self._orchestrator(rpc_client, notifier, fake_clock, wallet_keypair)
        await orch.refresh_holdings()

        rpc_client.enumerate_token_accounts.return_value = [
            token_account_record(mint, owner, "3500000", 6)
        ]
        result = await orch.send_token(recipient, mint, "1.5")

        assert result.success
        assert orch.state.find_holding(mint).raw_amount == 3_500_000

    async def test_airdrop_defaults_to_wallet(
        self, rpc_client, notifier, fake_clock, wallet_keypair
    ):
        orch = self._orchestrator(rpc_client, notifier, fake_clock, wallet_keypair)

        result = await orch.request_airdrop("2")

        assert result.success
        rpc_client.request_airdrop.assert_awaited_once_with(
            wallet_keypair.pubkey(), 2_000_000_000
        )
        assert orch.state.balance is not None

    async def test_airdrop_refused_on_mainnet(
        self, rpc_client, notifier, fake_clock, wallet_keypair
    ):
        orch = self._orchestrator(
            rpc_client,
            notifier,
            fake_clock,
            wallet_keypair,
            airdrop_enabled=False,
            network="mainnet-beta",
        )

        result = await orch.request_airdrop("1")

        assert isinstance(result.error, CapabilityMissingError)
        rpc_client.request_airdrop.assert_not_awaited()

    async def test_sign_with_missing_signature_is_a_failed_result(
        self, rpc_client, notifier, fake_clock, wallet_keypair
    ):
        orch = self._orchestrator(
            rpc_client,
            notifier,
            fake_clock,
            wallet_keypair,
            agent_cls=BrokenMessageSigningAgent,
        )

        result = await orch.sign_message("hello")

        assert not result.success
        assert isinstance(result.error, VerificationFailureError)
        assert orch.state.last_signed_message is None
        assert notifier.errors
        assert not orch.slots[ActionKind.SIGN_MESSAGE].busy

    async def test_sign_without_capability(
        self, rpc_client, notifier, fake_clock, wallet_keypair
    ):
        orch = self._orchestrator(
            rpc_client,
            notifier,
            fake_clock,
            wallet_keypair,
            allow_message_signing=False,
        )

        result = await orch.sign_message("hello")

        assert result.error_code == "CAPABILITY_MISSING"
        assert orch.state.last_signed_message is None

    async def test_no_wallet(self, rpc_client, notifier, fake_clock, recipient):
        orch = self._orchestrator(rpc_client, notifier, fake_clock)

        send = await orch.send_native(recipient, "1")
        sign = await orch.sign_message("hello")

        assert isinstance(send.error, WalletNotConnectedError)
        assert isinstance(sign.error, WalletNotConnectedError)
        assert await orch.refresh_balance() is None

    # ================================================================
    # Refresh
    # ================================================================

    async def test_refresh_replaces_state(
        self, rpc_client, notifier, fake_clock, wallet_keypair
    ):
        owner = str(wallet_keypair.pubkey())
        stale, fresh = str(Pubkey.new_unique()), str(Pubkey.new_unique())
        orch = self._orchestrator(rpc_client, notifier, fake_clock, wallet_keypair)

        rpc_client.enumerate_token_accounts.return_value = [
            token_account_record(stale, owner, "1", 0)
        ]
        assert await orch.refresh()

        rpc_client.enumerate_token_accounts.return_value = [
            token_account_record(fresh, owner, "1", 0)
        ]
        assert await orch.refresh()

        assert [h.mint for h in orch.state.holdings] == [fresh]

    async def test_failed_refresh_keeps_previous_balance(
        self, rpc_client, notifier, fake_clock, wallet_keypair
    ):
        orch = self._orchestrator(rpc_client, notifier, fake_clock, wallet_keypair)
        await orch.refresh_balance()

        rpc_client.get_balance.side_effect = NetworkError("down")

        assert await orch.refresh_balance() is None
        assert orch.state.balance == Amount.lamports(2_000_000_000)
        assert notifier.errors
