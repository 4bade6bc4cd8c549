"""
Session store - the locally held authenticated identity.

Every write carries a recency stamp; the newest write wins regardless of
delivery order. Cleared access tokens are tombstoned and never come back.
"""

import logging
from collections import deque
from typing import Callable, Optional

from gardien.domain.entities.session import Session
from gardien.domain.services.i_session_backend import ISessionBackend
from gardien.domain.value_objects.session_change import (
    SessionChange,
    SessionChangeKind,
    next_stamp,
)
from gardien.infrastructure.monitoring.metrics import session_changes_dropped_total
from gardien.infrastructure.session.session_channel import (
    SessionChannel,
    SessionListener,
    Subscription,
)

logger = logging.getLogger(__name__)

TOMBSTONE_MEMORY = 256


class SessionStore:
    """
    Holds the current Session and publishes accepted changes.

    Sessions enter only through set(), hydrate() or refresh(). Backend
    SIGNED_IN events for a session not already held are dropped, so an
    attempt that is later found stale never becomes visible.
    """

    def __init__(
        self,
        backend: ISessionBackend,
        channel: Optional[SessionChannel] = None,
    ):
        self.backend = backend
        self.channel = channel or SessionChannel()
        self._session: Optional[Session] = None
        self._last_stamp = 0
        self._tombstones: deque = deque(maxlen=TOMBSTONE_MEMORY)
        self._unsubscribe_backend: Optional[Callable[[], None]] = None
        self._hydrated = False

    # Reads

    def current(self) -> Optional[Session]:
        return self._session

    @property
    def authenticated(self) -> bool:
        return self._session is not None

    @property
    def bound_wallet_address(self) -> Optional[str]:
        return self._session.bound_wallet_address if self._session else None

    @property
    def hydrated(self) -> bool:
        return self._hydrated

    def subscribe(self, listener: SessionListener) -> Subscription:
        return self.channel.subscribe(listener)

    def is_tombstoned(self, access_token: str) -> bool:
        return access_token in self._tombstones

    # Lifecycle

    def attach(self) -> None:
        """Start merging backend auth state changes."""
        if self._unsubscribe_backend is None:
            self._unsubscribe_backend = self.backend.on_auth_state_change(
                self._on_backend_change
            )

    def detach(self) -> None:
        if self._unsubscribe_backend is not None:
            self._unsubscribe_backend()
            self._unsubscribe_backend = None

    async def hydrate(self) -> Optional[Session]:
        """
        One-time initial read from the backend.

        The stamp is taken before the read is issued, so a local write made
        while the read is in flight wins over its result.
        """
        stamp = next_stamp()
        session = await self.backend.get_session()
        self.apply(
            SessionChange(SessionChangeKind.INITIAL_SESSION, session, stamp=stamp)
        )
        self._hydrated = True
        return self._session

    async def refresh(self) -> Optional[Session]:
        """Re-read the backend session and merge it like hydrate()."""
        stamp = next_stamp()
        session = await self.backend.get_session()
        self.apply(
            SessionChange(SessionChangeKind.INITIAL_SESSION, session, stamp=stamp)
        )
        return self._session

    # Writes

    def set(self, session: Optional[Session], reason: Optional[str] = None) -> bool:
        """
        Install or clear the session locally.

        Returns:
            True if the write was applied
        """
        kind = SessionChangeKind.SIGNED_IN if session else SessionChangeKind.SIGNED_OUT
        return self.apply(SessionChange(kind, session, reason=reason))

    def discard(self, session: Session, reason: str) -> None:
        """Tombstone a session that must never be installed, clearing it if held."""
        self._tombstone(session.access_token)
        if self._session is not None and (
            self._session.access_token == session.access_token
        ):
            self.set(None, reason=reason)

    def apply(self, change: SessionChange) -> bool:
        """
        Merge one change, last writer wins by stamp.

        Returns:
            True if the change was applied
        """
        if change.stamp <= self._last_stamp:
            return self._drop(change, "stale")

        token = change.access_token
        if token is not None and self.is_tombstoned(token):
            return self._drop(change, "tombstoned")

        previous = self._session
        if previous is not None and previous.access_token != token:
            self._tombstone(previous.access_token)

        self._session = change.session
        self._last_stamp = change.stamp

        if previous != change.session:
            logger.info(
                "Session changed",
                extra={
                    "kind": change.kind.value,
                    "reason": change.reason,
                    "wallet_address": self.bound_wallet_address,
                },
            )
            self.channel.publish(change)
        return True

    def _on_backend_change(self, change: SessionChange) -> None:
        held = self._session
        if change.kind == SessionChangeKind.SIGNED_IN:
            if held is None or held.access_token != change.access_token:
                self._drop(change, "unconfirmed")
                return
        elif change.kind == SessionChangeKind.TOKEN_REFRESHED:
            if (
                held is None
                or change.session is None
                or change.session.bound_wallet_address != held.bound_wallet_address
            ):
                self._drop(change, "unconfirmed")
                return
        self.apply(change)

    def _tombstone(self, access_token: str) -> None:
        if access_token not in self._tombstones:
            self._tombstones.append(access_token)

    def _drop(self, change: SessionChange, cause: str) -> bool:
        session_changes_dropped_total.labels(cause=cause).inc()
        logger.debug(
            f"Dropped {cause} session change",
            extra={"kind": change.kind.value, "stamp": change.stamp},
        )
        return False
