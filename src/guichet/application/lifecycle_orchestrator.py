"""
Lifecycle orchestrator - runs user actions end to end.

Each action kind has its own busy/idle slot. An action runs validate ->
build -> sign -> submit -> poll through the use cases, then either
refreshes wallet state (success) or leaves it untouched (failure). All
domain errors are turned into ActionResults here, so callers never see
GuichetException from an action method.
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional

from guichet.application.services.action_slot import ActionSlots
from guichet.application.services.confirmation_poller import ConfirmationPoller
from guichet.application.use_cases.get_native_balance import GetNativeBalance
from guichet.application.use_cases.list_token_holdings import ListTokenHoldings
from guichet.application.use_cases.request_airdrop import RequestAirdrop
from guichet.application.use_cases.send_native_transfer import SendNativeTransfer
from guichet.application.use_cases.send_token_transfer import SendTokenTransfer
from guichet.application.use_cases.sign_message import SignMessage
from guichet.domain.entities.action import ActionKind, ActionResult
from guichet.domain.entities.confirmation import (
    ConfirmationOutcome,
    ConfirmationState,
)
from guichet.domain.entities.prepared_transaction import SubmissionHandle
from guichet.domain.entities.token_holding import TokenHolding
from guichet.domain.entities.wallet_state import WalletState
from guichet.domain.exceptions import (
    ConfirmationTimeoutError,
    GuichetException,
    NetworkError,
    TransactionError,
    WalletNotConnectedError,
)
from guichet.domain.services.i_notifier import INotifier
from guichet.domain.services.i_rpc_client import IRpcClient
from guichet.domain.services.i_signing_agent import (
    ISigningAgent,
    NoSigning,
    resolve_message_signer,
)
from guichet.domain.value_objects.amount import Amount
from guichet.infrastructure.auth.signature_verifier import SignatureVerifier
from guichet.infrastructure.blockchain.instruction_builder import (
    InstructionBuilder,
)
from guichet.infrastructure.monitoring.logger import (
    log_performance,
    set_action_id,
)

logger = logging.getLogger(__name__)

RefreshFn = Callable[[], Awaitable[object]]


class LifecycleOrchestrator:
    """
    Composes use cases per user action.

    Business rules:
    - One action per kind at a time; a second entry is rejected, not queued
    - Action kinds are independent and may run concurrently
    - Failed actions never write wallet state
    - Successful transfers refresh balance (native) or holdings (token)
    - A timed-out transaction gets one late reconciliation check, which
      can refresh state but never turns the action into a success
    """

    def __init__(
        self,
        rpc_client: IRpcClient,
        signing_agent: Optional[ISigningAgent],
        builder: InstructionBuilder,
        poller: ConfirmationPoller,
        verifier: SignatureVerifier,
        notifier: INotifier,
        airdrop_enabled: bool = True,
        network: str = "devnet",
        late_check_delay: float = 30.0,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ):
        """
        Initialize orchestrator.

        Args:
            rpc_client: Ledger RPC client
            signing_agent: Connected wallet, None when not connected
            builder: Instruction builder
            poller: Confirmation poller
            verifier: Signature verifier
            notifier: Outcome notifier
            airdrop_enabled: Whether the network offers airdrops
            network: Network name
            late_check_delay: Seconds before re-checking a timed-out
                transaction (negative disables the check)
            sleep: Coroutine used for the reconciliation delay
        """
        self.rpc_client = rpc_client
        self.signing_agent = signing_agent
        self.poller = poller
        self.notifier = notifier
        self.late_check_delay = late_check_delay
        self._sleep = sleep

        self.slots = ActionSlots()
        self.state: Optional[WalletState] = (
            WalletState(owner=str(signing_agent.public_key))
            if signing_agent is not None
            else None
        )
        self._reconciliations: set[asyncio.Task] = set()

        self.get_balance = GetNativeBalance(rpc_client)
        self.list_holdings = ListTokenHoldings(rpc_client)
        self.airdrop = RequestAirdrop(
            rpc_client,
            builder,
            poller,
            airdrop_enabled=airdrop_enabled,
            network=network,
        )

        if signing_agent is not None:
            self.send_native_transfer: Optional[SendNativeTransfer] = (
                SendNativeTransfer(rpc_client, signing_agent, builder, poller)
            )
            self.send_token_transfer: Optional[SendTokenTransfer] = (
                SendTokenTransfer(
                    rpc_client, signing_agent, builder, poller, self.list_holdings
                )
            )
            self.sign = SignMessage(
                resolve_message_signer(signing_agent),
                signing_agent.public_key,
                verifier,
            )
        else:
            self.send_native_transfer = None
            self.send_token_transfer = None
            self.sign = SignMessage(NoSigning(), None, verifier)

    @property
    def owner(self) -> Optional[str]:
        return self.state.owner if self.state else None

    @property
    def pending_reconciliations(self) -> tuple[asyncio.Task, ...]:
        return tuple(self._reconciliations)

    def _require_wallet(self) -> WalletState:
        if self.state is None:
            raise WalletNotConnectedError()
        return self.state

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    async def request_airdrop(
        self, amount_text: str, recipient: Optional[str] = None
    ) -> ActionResult:
        """
        Request an airdrop to recipient (defaults to the connected wallet).

        Args:
            amount_text: SOL amount as typed by the user
            recipient: Base58 address, None for the connected wallet

        Returns:
            ActionResult
        """

        async def operation() -> ConfirmationOutcome:
            target = recipient or self._require_wallet().owner
            return await self.airdrop.execute(target, amount_text)

        refresh = self.refresh_balance if recipient in (None, self.owner) else None
        return await self._run_transaction(
            ActionKind.AIRDROP,
            operation,
            lambda: f"Airdropped {amount_text.strip()} SOL",
            refresh,
        )

    async def send_native(self, recipient: str, amount_text: str) -> ActionResult:
        """
        Send SOL from the connected wallet.

        Args:
            recipient: Base58 recipient address
            amount_text: SOL amount as typed by the user

        Returns:
            ActionResult
        """

        async def operation() -> ConfirmationOutcome:
            self._require_wallet()
            return await self.send_native_transfer.execute(recipient, amount_text)

        return await self._run_transaction(
            ActionKind.TRANSFER,
            operation,
            lambda: f"Sent {amount_text.strip()} SOL to {recipient}",
            self.refresh_balance,
        )

    async def send_token(
        self, recipient: str, mint: str, amount_text: str
    ) -> ActionResult:
        """
        Send SPL tokens from the connected wallet.

        Args:
            recipient: Base58 recipient wallet address
            mint: Base58 token mint address
            amount_text: Token amount as typed by the user

        Returns:
            ActionResult
        """

        async def operation() -> ConfirmationOutcome:
            state = self._require_wallet()
            return await self.send_token_transfer.execute(
                recipient, mint, amount_text, known_holdings=state.holdings
            )

        return await self._run_transaction(
            ActionKind.TOKEN_TRANSFER,
            operation,
            lambda: f"Sent {amount_text.strip()} of {mint} to {recipient}",
            self.refresh_holdings,
        )

    async def sign_message(self, text: str) -> ActionResult:
        """
        Sign a text message with the connected wallet.

        Args:
            text: Message text

        Returns:
            ActionResult with the verified SignedMessagePair on success
        """
        kind = ActionKind.SIGN_MESSAGE
        action_id = set_action_id()
        logger.info(f"[{action_id}] Starting {kind.value}")

        try:
            async with self.slots[kind].hold():
                state = self._require_wallet()
                signed = await self.sign.execute(text)
        except GuichetException as e:
            return self._failed(kind, e)

        state.last_signed_message = signed
        message = f"Message signed: {signed.signature_b58}"
        self.notifier.success(message)
        return ActionResult(
            action=kind,
            success=True,
            message=message,
            signed_message=signed,
        )

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    async def refresh_balance(self) -> Optional[Amount]:
        """
        Re-read the native balance into wallet state.

        Returns:
            New balance, None if the read failed (state left untouched)
        """
        try:
            state = self._require_wallet()
            balance = await self.get_balance.execute(state.owner)
        except GuichetException as e:
            logger.warning(f"Balance refresh failed: {e.message}")
            self.notifier.error(f"Could not refresh balance: {e.message}")
            return None

        state.replace_balance(balance)
        return balance

    async def refresh_holdings(self) -> Optional[tuple[TokenHolding, ...]]:
        """
        Re-enumerate token holdings and replace the snapshot wholesale.

        Returns:
            New holdings, None if the read failed (state left untouched)
        """
        try:
            state = self._require_wallet()
            holdings = await self.list_holdings.execute(state.owner)
        except GuichetException as e:
            logger.warning(f"Token holdings refresh failed: {e.message}")
            self.notifier.error(f"Could not refresh token holdings: {e.message}")
            return None

        state.replace_holdings(holdings)
        return holdings

    async def refresh(self) -> bool:
        """Refresh balance and holdings concurrently. True if both succeeded."""
        balance, holdings = await asyncio.gather(
            self.refresh_balance(), self.refresh_holdings()
        )
        return balance is not None and holdings is not None

    async def aclose(self) -> None:
        """Cancel pending late-confirmation checks."""
        tasks = list(self._reconciliations)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._reconciliations.clear()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _run_transaction(
        self,
        kind: ActionKind,
        operation: Callable[[], Awaitable[ConfirmationOutcome]],
        describe: Callable[[], str],
        refresh: Optional[RefreshFn],
    ) -> ActionResult:
        action_id = set_action_id()
        logger.info(f"[{action_id}] Starting {kind.value}")
        started = time.monotonic()

        try:
            async with self.slots[kind].hold():
                outcome = await operation()
        except ConfirmationTimeoutError as e:
            if e.tx_signature:
                self._schedule_reconciliation(
                    SubmissionHandle(e.tx_signature), refresh
                )
            return self._failed(kind, e)
        except GuichetException as e:
            return self._failed(kind, e)

        log_performance(logger, kind.value, started)
        message = f"{describe()}: {outcome.handle}"
        self.notifier.success(message)

        if refresh is not None:
            await refresh()

        return ActionResult(
            action=kind,
            success=True,
            message=message,
            handle=outcome.handle,
            outcome=outcome,
        )

    def _failed(self, kind: ActionKind, error: GuichetException) -> ActionResult:
        handle = None
        if isinstance(error, TransactionError) and error.tx_signature:
            handle = SubmissionHandle(error.tx_signature)

        logger.warning(f"{kind.value} failed [{error.code}]: {error.message}")
        self.notifier.error(error.message)

        return ActionResult(
            action=kind,
            success=False,
            message=error.message,
            handle=handle,
            error=error,
        )

    def _schedule_reconciliation(
        self, handle: SubmissionHandle, refresh: Optional[RefreshFn]
    ) -> None:
        if self.late_check_delay < 0:
            return

        task = asyncio.ensure_future(self._reconcile(handle, refresh))
        self._reconciliations.add(task)
        task.add_done_callback(self._reconciliation_done)

    def _reconciliation_done(self, task: asyncio.Task) -> None:
        self._reconciliations.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(
                f"Late status check crashed: {type(error).__name__}: {error}",
                exc_info=error,
            )

    async def _reconcile(
        self, handle: SubmissionHandle, refresh: Optional[RefreshFn]
    ) -> None:
        await self._sleep(self.late_check_delay)

        try:
            statuses = await self.rpc_client.get_status([handle])
        except NetworkError as e:
            logger.warning(f"Late status check for {handle} failed: {e.message}")
            return

        state, reason = self.poller.interpret(statuses[0] if statuses else None)
        logger.info(f"Late status for {handle}: {state.value}")

        if state == ConfirmationState.CONFIRMED:
            self.notifier.success(f"Transaction confirmed after timeout: {handle}")
            if refresh is not None:
                await refresh()
        elif state == ConfirmationState.FAILED:
            logger.warning(f"{handle} failed after timeout: {reason}")
