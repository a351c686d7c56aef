"""
Dependency Injection Container for Guichet.

Manages all service instances and their dependencies.
"""

from typing import Optional

from guichet.application.lifecycle_orchestrator import LifecycleOrchestrator
from guichet.application.services.confirmation_poller import ConfirmationPoller
from guichet.config.settings import GuichetConfig, get_settings
from guichet.domain.exceptions import WalletNotConnectedError
from guichet.domain.services.i_notifier import INotifier
from guichet.domain.services.i_rpc_client import IRpcClient
from guichet.domain.services.i_signing_agent import ISigningAgent
from guichet.infrastructure.auth.signature_verifier import SignatureVerifier
from guichet.infrastructure.blockchain.instruction_builder import (
    InstructionBuilder,
)
from guichet.infrastructure.blockchain.solana_rpc_client import SolanaRPCClient
from guichet.infrastructure.monitoring.notifier import LoggingNotifier
from guichet.infrastructure.wallet.keypair_signing_agent import (
    KeypairSigningAgent,
)


class DIContainer:
    """
    Dependency Injection Container.

    Lazily builds singleton services from settings. Any service can be
    replaced before first use by assigning the matching private slot,
    which is how tests inject fakes.
    """

    def __init__(
        self,
        settings: Optional[GuichetConfig] = None,
        notifier: Optional[INotifier] = None,
    ):
        """
        Initialize container with None instances.

        Args:
            settings: Settings to use (defaults to get_settings())
            notifier: Notifier (defaults to LoggingNotifier)
        """
        self._settings = settings
        self._notifier = notifier

        # Infrastructure
        self._rpc_client: Optional[IRpcClient] = None
        self._signing_agent: Optional[ISigningAgent] = None
        self._instruction_builder: Optional[InstructionBuilder] = None
        self._signature_verifier: Optional[SignatureVerifier] = None

        # Application
        self._poller: Optional[ConfirmationPoller] = None
        self._orchestrator: Optional[LifecycleOrchestrator] = None

    async def shutdown(self) -> None:
        """Cancel background work and close connections."""
        if self._orchestrator:
            await self._orchestrator.aclose()

        if isinstance(self._rpc_client, SolanaRPCClient):
            await self._rpc_client.close()

    @property
    def settings(self) -> GuichetConfig:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    # Infrastructure Getters

    @property
    def notifier(self) -> INotifier:
        if self._notifier is None:
            self._notifier = LoggingNotifier()
        return self._notifier

    @property
    def rpc_client(self) -> IRpcClient:
        """Get Solana RPC client instance."""
        if self._rpc_client is None:
            self._rpc_client = SolanaRPCClient(settings=self.settings)
        return self._rpc_client

    @property
    def has_wallet(self) -> bool:
        return self._signing_agent is not None or bool(self.settings.keypair_path)

    @property
    def signing_agent(self) -> ISigningAgent:
        """
        Get signing agent loaded from the configured keypair.

        Raises:
            WalletNotConnectedError: If no keypair path is configured
            FileNotFoundError: If the keypair file does not exist
        """
        if self._signing_agent is None:
            if not self.settings.keypair_path:
                raise WalletNotConnectedError()
            self._signing_agent = KeypairSigningAgent.from_file(
                self.settings.keypair_path, self.rpc_client
            )
        return self._signing_agent

    @property
    def instruction_builder(self) -> InstructionBuilder:
        if self._instruction_builder is None:
            self._instruction_builder = InstructionBuilder()
        return self._instruction_builder

    @property
    def signature_verifier(self) -> SignatureVerifier:
        if self._signature_verifier is None:
            self._signature_verifier = SignatureVerifier()
        return self._signature_verifier

    # Application Getters

    @property
    def poller(self) -> ConfirmationPoller:
        """Get confirmation poller configured from settings."""
        if self._poller is None:
            self._poller = ConfirmationPoller.from_settings(
                self.rpc_client, self.settings
            )
        return self._poller

    @property
    def orchestrator(self) -> LifecycleOrchestrator:
        """Get lifecycle orchestrator, with a wallet when one is configured."""
        if self._orchestrator is None:
            self._orchestrator = LifecycleOrchestrator(
                rpc_client=self.rpc_client,
                signing_agent=self.signing_agent if self.has_wallet else None,
                builder=self.instruction_builder,
                poller=self.poller,
                verifier=self.signature_verifier,
                notifier=self.notifier,
                airdrop_enabled=self.settings.airdrop_enabled,
                network=self.settings.network,
                late_check_delay=self.settings.confirmation.late_check_delay,
            )
        return self._orchestrator


# Global container instance
_container: Optional[DIContainer] = None


def get_container() -> DIContainer:
    """Get global DI container instance."""
    global _container
    if _container is None:
        _container = DIContainer()
    return _container


async def shutdown_container() -> None:
    """Shutdown DI container."""
    global _container
    if _container is not None:
        await _container.shutdown()
        _container = None
