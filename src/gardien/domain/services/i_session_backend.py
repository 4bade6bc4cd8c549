"""
Session backend interface.
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional

from gardien.domain.entities.session import Session, SessionTokens
from gardien.domain.value_objects.session_change import SessionChange

SessionChangeListener = Callable[[SessionChange], None]


class ISessionBackend(ABC):
    """
    Abstract auth backend that holds the installed session.

    Mirrors the auth client contract: read, install, observe, sign out.
    """

    @abstractmethod
    async def get_session(self) -> Optional[Session]:
        """Return the installed session, if any."""

    @abstractmethod
    async def set_session(
        self,
        tokens: SessionTokens,
        bound_wallet_address: str,
        user_id: Optional[str] = None,
    ) -> Session:
        """
        Install session tokens.

        Raises:
            SessionEstablishError: If the backend refuses the tokens
        """

    @abstractmethod
    def on_auth_state_change(
        self, listener: SessionChangeListener
    ) -> Callable[[], None]:
        """
        Subscribe to backend session changes.

        Returns:
            Callable that removes the subscription
        """

    @abstractmethod
    async def sign_out(self) -> None:
        """Drop the installed session (locally and remotely)."""

    async def close(self) -> None:
        """Release network resources."""
