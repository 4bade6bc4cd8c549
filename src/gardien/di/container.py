"""
Dependency Injection Container for Gardien.

Owns exactly one instance of every component. Nothing is a module-level
singleton; create a container per hosting process (or per test).
"""

import logging
from typing import Optional

from gardien.application.use_cases.consistency_monitor import ConsistencyMonitor
from gardien.application.use_cases.sign_in_orchestrator import SignInOrchestrator
from gardien.application.use_cases.sign_out import SignOut
from gardien.application.use_cases.verify_wallet_ownership import (
    VerifiedHook,
    VerifyWalletOwnership,
)
from gardien.config.settings import Settings, get_settings
from gardien.domain.services.challenge_builder import ChallengeBuilder
from gardien.domain.services.i_auth_verifier import IAuthVerifier
from gardien.domain.services.i_ownership_registry import IOwnershipRegistry
from gardien.domain.services.i_session_backend import ISessionBackend
from gardien.domain.services.i_wallet_provider import IWalletProvider
from gardien.infrastructure.monitoring.logger import setup_logging
from gardien.infrastructure.monitoring.reporter import SystemReporter
from gardien.infrastructure.resilience import BackoffStrategy, RetryConfig
from gardien.infrastructure.session.gotrue_session_backend import (
    GoTrueSessionBackend,
)
from gardien.infrastructure.session.session_channel import SessionChannel
from gardien.infrastructure.session.session_store import SessionStore
from gardien.infrastructure.verifier.ownership_record_client import (
    OwnershipRecordClient,
)
from gardien.infrastructure.verifier.remote_verifier_client import (
    RemoteVerifierClient,
)
from gardien.infrastructure.wallet.signing_client import SigningClient
from gardien.infrastructure.wallet.wallet_connection import WalletConnection
from gardien.presentation.notifications import Notifier, ReporterNotifier
from gardien.presentation.wallet_auth import WalletAuth

logger = logging.getLogger(__name__)


class GardienContainer:
    """
    Dependency Injection Container.

    Components are created lazily on first access. Any of the external
    boundaries (wallet, verifier, registry, backend, notifier) can be
    supplied up front to replace the default implementation.

    Example:
        async with GardienContainer(wallet=connection) as container:
            await container.wallet_auth.sign_in()
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        wallet: Optional[IWalletProvider] = None,
        verifier: Optional[IAuthVerifier] = None,
        registry: Optional[IOwnershipRegistry] = None,
        session_backend: Optional[ISessionBackend] = None,
        notifier: Optional[Notifier] = None,
        on_verified: Optional[VerifiedHook] = None,
        configure_logging: bool = False,
    ):
        """Initialize container with None instances."""
        self.settings = settings or get_settings()
        self._configure_logging = configure_logging
        self._on_verified = on_verified
        self._initialized = False

        # Boundaries
        self._wallet = wallet
        self._verifier = verifier
        self._registry = registry
        self._session_backend = session_backend
        self._notifier = notifier

        # Infrastructure
        self._reporter: Optional[SystemReporter] = None
        self._session_channel: Optional[SessionChannel] = None
        self._session_store: Optional[SessionStore] = None
        self._signing_client: Optional[SigningClient] = None
        self._challenge_builder: Optional[ChallengeBuilder] = None

        # Use Cases
        self._orchestrator: Optional[SignInOrchestrator] = None
        self._monitor: Optional[ConsistencyMonitor] = None
        self._sign_out: Optional[SignOut] = None
        self._verify_ownership: Optional[VerifyWalletOwnership] = None

        # Presentation
        self._wallet_auth: Optional[WalletAuth] = None

    async def __aenter__(self) -> "GardienContainer":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.shutdown()

    async def initialize(self) -> None:
        """Wire subscriptions, read the initial session, start monitoring."""
        if self._initialized:
            return
        if self._configure_logging:
            setup_logging(self.settings.LOG_LEVEL, self.settings.LOG_JSON)

        self.session_store.attach()
        # The orchestrator follows the store from the first published change
        _ = self.orchestrator
        await self.session_store.hydrate()
        self.consistency_monitor.start()
        self._initialized = True
        logger.info(
            "Gardien initialized",
            extra={"env": self.settings.ENV, "authenticated": self.session_store.authenticated},
        )

    async def shutdown(self) -> None:
        """Stop monitoring, cancel attempts and close network clients."""
        if self._monitor:
            self._monitor.stop()
            await self._monitor.wait_idle()

        if self._orchestrator:
            await self._orchestrator.close()

        if self._session_store:
            self._session_store.detach()

        if self._verifier:
            await self._verifier.close()

        if self._registry:
            await self._registry.close()

        if self._session_backend:
            await self._session_backend.close()

        self._initialized = False

    # Boundaries

    @property
    def wallet(self) -> IWalletProvider:
        """Get wallet connection holder."""
        if self._wallet is None:
            self._wallet = WalletConnection()
        return self._wallet

    def _retry_config(self) -> RetryConfig:
        return RetryConfig(
            max_attempts=self.settings.VERIFIER_RETRY_MAX_ATTEMPTS,
            initial_delay=self.settings.VERIFIER_RETRY_INITIAL_DELAY,
            max_delay=self.settings.VERIFIER_RETRY_MAX_DELAY,
            backoff_strategy=BackoffStrategy.EXPONENTIAL,
            jitter=True,
        )

    @property
    def verifier(self) -> IAuthVerifier:
        """Get remote verifier client."""
        if self._verifier is None:
            self._verifier = RemoteVerifierClient(
                base_url=self.settings.VERIFIER_URL,
                function_name=self.settings.AUTH_FUNCTION_NAME,
                api_key=self.settings.API_KEY,
                timeout=self.settings.VERIFIER_TIMEOUT,
                connect_timeout=self.settings.VERIFIER_CONNECT_TIMEOUT,
                retry_config=self._retry_config(),
            )
        return self._verifier

    @property
    def registry(self) -> IOwnershipRegistry:
        """Get ownership record client."""
        if self._registry is None:
            self._registry = OwnershipRecordClient(
                base_url=self.settings.REST_URL,
                api_key=self.settings.API_KEY,
                access_token_provider=self._access_token,
                verifications_table=self.settings.VERIFICATIONS_TABLE,
                entities_table=self.settings.ENTITIES_TABLE,
                verified_column=self.settings.ENTITY_VERIFIED_COLUMN,
                timeout=self.settings.VERIFIER_TIMEOUT,
                connect_timeout=self.settings.VERIFIER_CONNECT_TIMEOUT,
                retry_config=self._retry_config(),
            )
        return self._registry

    @property
    def session_backend(self) -> ISessionBackend:
        """Get session backend."""
        if self._session_backend is None:
            self._session_backend = GoTrueSessionBackend(
                auth_url=self.settings.AUTH_URL,
                api_key=self.settings.API_KEY,
                timeout=self.settings.VERIFIER_TIMEOUT,
                connect_timeout=self.settings.VERIFIER_CONNECT_TIMEOUT,
            )
        return self._session_backend

    @property
    def reporter(self) -> SystemReporter:
        """Get system reporter."""
        if self._reporter is None:
            self._reporter = SystemReporter(
                name=self.settings.APP_NAME.lower(),
                verbose=2 if self.settings.DEBUG else 1,
            )
        return self._reporter

    @property
    def notifier(self) -> Notifier:
        """Get notifier (defaults to the system reporter)."""
        if self._notifier is None:
            self._notifier = ReporterNotifier(self.reporter)
        return self._notifier

    # Infrastructure

    @property
    def session_channel(self) -> SessionChannel:
        if self._session_channel is None:
            self._session_channel = SessionChannel()
        return self._session_channel

    @property
    def session_store(self) -> SessionStore:
        """Get session store."""
        if self._session_store is None:
            self._session_store = SessionStore(
                backend=self.session_backend,
                channel=self.session_channel,
            )
        return self._session_store

    @property
    def challenge_builder(self) -> ChallengeBuilder:
        if self._challenge_builder is None:
            self._challenge_builder = ChallengeBuilder(
                app_name=self.settings.CHALLENGE_APP_NAME,
                ownership_subject=self.settings.OWNERSHIP_SUBJECT,
                ownership_id_label=self.settings.OWNERSHIP_ID_LABEL,
            )
        return self._challenge_builder

    @property
    def signing_client(self) -> SigningClient:
        if self._signing_client is None:
            self._signing_client = SigningClient(self.wallet)
        return self._signing_client

    # Use Cases

    @property
    def orchestrator(self) -> SignInOrchestrator:
        """Get the sign-in orchestrator (one per container)."""
        if self._orchestrator is None:
            self._orchestrator = SignInOrchestrator(
                wallet=self.wallet,
                challenge_builder=self.challenge_builder,
                signing_client=self.signing_client,
                verifier=self.verifier,
                backend=self.session_backend,
                store=self.session_store,
            )
        return self._orchestrator

    @property
    def consistency_monitor(self) -> ConsistencyMonitor:
        """Get consistency monitor."""
        if self._monitor is None:
            self._monitor = ConsistencyMonitor(
                wallet=self.wallet,
                store=self.session_store,
                backend=self.session_backend,
                grace_seconds=self.settings.DISCONNECT_GRACE_SECONDS,
            )
        return self._monitor

    @property
    def sign_out(self) -> SignOut:
        """Get sign-out use case."""
        if self._sign_out is None:
            self._sign_out = SignOut(
                backend=self.session_backend,
                store=self.session_store,
                wallet=self.wallet,
            )
        return self._sign_out

    @property
    def verify_wallet_ownership(self) -> VerifyWalletOwnership:
        """Get ownership verification use case."""
        if self._verify_ownership is None:
            self._verify_ownership = VerifyWalletOwnership(
                wallet=self.wallet,
                challenge_builder=self.challenge_builder,
                signing_client=self.signing_client,
                registry=self.registry,
                on_verified=self._on_verified,
            )
        return self._verify_ownership

    # Presentation

    @property
    def wallet_auth(self) -> WalletAuth:
        """Get the WalletAuth facade."""
        if self._wallet_auth is None:
            self._wallet_auth = WalletAuth(
                orchestrator=self.orchestrator,
                sign_out_use_case=self.sign_out,
                verify_ownership_use_case=self.verify_wallet_ownership,
                store=self.session_store,
                wallet=self.wallet,
                notifier=self.notifier,
            )
        return self._wallet_auth

    def _access_token(self) -> Optional[str]:
        session = self.session_store.current()
        return session.access_token if session else None
