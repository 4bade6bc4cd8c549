"""
Consistency monitor - keeps the session bound to the connected wallet.

    IDLE          no session
    WATCHING      session bound to the connected wallet
    DEBOUNCING    wallet address went null; waiting out the grace period
    INVALIDATED   session cleared; waiting for a new one

A different address invalidates at once. A null address is tolerated for
the grace period so adapter reconnect flicker does not sign the user out.
"""

import asyncio
import logging
from enum import Enum
from typing import Callable, Optional

from gardien.application.background import BackgroundTasks
from gardien.domain.services.i_session_backend import ISessionBackend
from gardien.domain.services.i_wallet_provider import IWalletProvider
from gardien.domain.value_objects.session_change import SessionChange
from gardien.domain.value_objects.wallet_signal import WalletConnectionSignal
from gardien.infrastructure.monitoring.metrics import session_invalidations_total
from gardien.infrastructure.session.session_channel import Subscription
from gardien.infrastructure.session.session_store import SessionStore

logger = logging.getLogger(__name__)


class MonitorState(str, Enum):
    """Consistency monitor states."""

    IDLE = "idle"
    WATCHING = "watching"
    DEBOUNCING = "debouncing"
    INVALIDATED = "invalidated"


class ConsistencyMonitor:
    """
    Clears the session when the wallet it is bound to is gone.

    Invalidation clears the store synchronously, exactly once per session,
    and schedules a backend sign-out.
    """

    def __init__(
        self,
        wallet: IWalletProvider,
        store: SessionStore,
        backend: ISessionBackend,
        grace_seconds: float = 3.0,
    ):
        """
        Initialize monitor.

        Args:
            wallet: Wallet signal source
            store: Session store to guard
            backend: Session backend signed out on invalidation
            grace_seconds: How long a null address is tolerated
        """
        if grace_seconds <= 0:
            raise ValueError("grace_seconds must be positive")

        self.wallet = wallet
        self.store = store
        self.backend = backend
        self.grace_seconds = grace_seconds

        self._state = MonitorState.IDLE
        self._timer: Optional[asyncio.TimerHandle] = None
        self._deadline: Optional[float] = None
        self._debounced_wallet: Optional[str] = None
        self._store_subscription: Optional[Subscription] = None
        self._unsubscribe_wallet: Optional[Callable[[], None]] = None
        self._background = BackgroundTasks()

    @property
    def state(self) -> MonitorState:
        return self._state

    @property
    def deadline(self) -> Optional[float]:
        """Loop time at which a pending debounce invalidates, if any."""
        return self._deadline

    @property
    def running(self) -> bool:
        return self._store_subscription is not None

    def start(self) -> None:
        """Attach to the store and the wallet, then check the current state."""
        if self.running:
            return
        self._store_subscription = self.store.subscribe(self._on_session_change)
        self._unsubscribe_wallet = self.wallet.subscribe(self._on_signal)

        if self.store.current() is not None:
            self._state = MonitorState.WATCHING
            self._evaluate(self.wallet.signal)

    def stop(self) -> None:
        """Detach and cancel any pending debounce."""
        self._cancel_timer()
        if self._store_subscription is not None:
            self._store_subscription.unsubscribe()
            self._store_subscription = None
        if self._unsubscribe_wallet is not None:
            self._unsubscribe_wallet()
            self._unsubscribe_wallet = None
        self._state = MonitorState.IDLE

    async def wait_idle(self) -> None:
        """Wait for scheduled backend sign-outs to finish."""
        await self._background.drain()

    # Events

    def _on_session_change(self, change: SessionChange) -> None:
        if change.session is None:
            self._cancel_timer()
            if self._state != MonitorState.INVALIDATED:
                self._state = MonitorState.IDLE
            return

        # A refresh for the same wallet keeps the original deadline
        if (
            self._state == MonitorState.DEBOUNCING
            and change.session.bound_wallet_address == self._debounced_wallet
        ):
            return

        self._cancel_timer()
        self._state = MonitorState.WATCHING
        self._evaluate(self.wallet.signal)

    def _on_signal(self, signal: WalletConnectionSignal) -> None:
        if self._state in (MonitorState.WATCHING, MonitorState.DEBOUNCING):
            self._evaluate(signal)

    def _on_deadline(self) -> None:
        self._timer = None
        self._deadline = None
        if self._state == MonitorState.DEBOUNCING:
            self._invalidate("disconnect_timeout")

    # Transitions

    def _evaluate(self, signal: WalletConnectionSignal) -> None:
        session = self.store.current()
        if session is None:
            self._cancel_timer()
            self._state = MonitorState.IDLE
            return

        address = signal.effective_address
        if address is None:
            if self._state == MonitorState.WATCHING:
                self._arm_timer()
                self._debounced_wallet = session.bound_wallet_address
                self._state = MonitorState.DEBOUNCING
                logger.info(
                    "Wallet address lost; debouncing",
                    extra={"grace_seconds": self.grace_seconds},
                )
            return

        if address == session.bound_wallet_address:
            if self._state == MonitorState.DEBOUNCING:
                self._cancel_timer()
                logger.info("Wallet reconnected within grace period")
            self._state = MonitorState.WATCHING
            return

        self._invalidate("wallet_mismatch")

    def _invalidate(self, reason: str) -> None:
        self._cancel_timer()
        session = self.store.current()
        self._state = MonitorState.INVALIDATED
        if session is None:
            return

        session_invalidations_total.labels(reason=reason).inc()
        logger.warning(
            "Session invalidated",
            extra={
                "reason": reason,
                "wallet_address": session.bound_wallet_address,
                "signal_address": self.wallet.signal.effective_address,
            },
        )
        self.store.set(None, reason=reason)
        self._background.spawn(self.backend.sign_out(), name="gardien-invalidate")

    def _arm_timer(self) -> None:
        self._cancel_timer()
        loop = asyncio.get_running_loop()
        self._deadline = loop.time() + self.grace_seconds
        self._timer = loop.call_later(self.grace_seconds, self._on_deadline)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._deadline = None
        self._debounced_wallet = None
