"""
GoTrue session backend.

Validates issued tokens against the auth server and keeps the installed
session in process memory. Persistent storage is left to the embedding
application.
"""

import logging
from typing import Callable, List, Optional

import httpx

from gardien.domain.entities.session import Session, SessionTokens
from gardien.domain.exceptions import SessionEstablishError, TransportError
from gardien.domain.services.i_session_backend import (
    ISessionBackend,
    SessionChangeListener,
)
from gardien.domain.value_objects.session_change import (
    SessionChange,
    SessionChangeKind,
)

logger = logging.getLogger(__name__)


class GoTrueSessionBackend(ISessionBackend):
    """
    Session backend speaking to a GoTrue auth server.

    set_session() calls GET /user with the new access token and refuses
    tokens the server does not accept. sign_out() drops the local session
    first, then revokes it with POST /logout.
    """

    def __init__(
        self,
        auth_url: str,
        api_key: Optional[str] = None,
        timeout: float = 15.0,
        connect_timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        initial_session: Optional[Session] = None,
    ):
        """
        Initialize backend.

        Args:
            auth_url: Auth server base URL (e.g. https://x.supabase.co/auth/v1)
            api_key: Public API key
            timeout: Total request timeout in seconds
            connect_timeout: Connection timeout in seconds
            transport: Optional httpx transport
            initial_session: Session restored by the embedding application
        """
        self.auth_url = auth_url.rstrip("/")
        self.api_key = api_key
        self.timeout = httpx.Timeout(timeout, connect=connect_timeout)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._session = initial_session
        self._listeners: List[SessionChangeListener] = []

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create async HTTP client."""
        if self._client is None or self._client.is_closed:
            headers = {"apikey": self.api_key} if self.api_key else {}
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers=headers,
                transport=self._transport,
            )
        return self._client

    async def get_session(self) -> Optional[Session]:
        return self._session

    async def set_session(
        self,
        tokens: SessionTokens,
        bound_wallet_address: str,
        user_id: Optional[str] = None,
    ) -> Session:
        try:
            response = await self.client.get(
                f"{self.auth_url}/user",
                headers={"Authorization": f"Bearer {tokens.access_token}"},
            )
        except httpx.HTTPError as e:
            logger.warning(f"Auth server unreachable: {type(e).__name__}: {e}")
            raise SessionEstablishError() from e

        if not response.is_success:
            logger.warning(
                f"Auth server refused session tokens: HTTP {response.status_code}"
            )
            raise SessionEstablishError()

        try:
            user = response.json()
        except ValueError as e:
            raise SessionEstablishError() from e
        if not isinstance(user, dict):
            raise SessionEstablishError()

        metadata = user.get("user_metadata") or {}
        claimed = metadata.get("wallet_address")
        if claimed and claimed != bound_wallet_address:
            logger.warning(
                "Token belongs to a different wallet",
                extra={"expected": bound_wallet_address, "actual": claimed},
            )
            raise SessionEstablishError()

        session_user_id = user.get("id") or user_id
        session = Session.from_tokens(
            tokens,
            bound_wallet_address=bound_wallet_address,
            user_id=str(session_user_id) if session_user_id is not None else None,
        )
        self._session = session
        self._emit(SessionChange(SessionChangeKind.SIGNED_IN, session))
        return session

    def on_auth_state_change(
        self, listener: SessionChangeListener
    ) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def sign_out(self) -> None:
        """
        Drop the session locally, then revoke it on the server.

        Raises:
            TransportError: Revocation failed (the local session is gone)
        """
        session = self._session
        if session is None:
            return

        self._session = None
        self._emit(SessionChange(SessionChangeKind.SIGNED_OUT, reason="sign_out"))

        try:
            response = await self.client.post(
                f"{self.auth_url}/logout",
                headers={"Authorization": f"Bearer {session.access_token}"},
            )
        except httpx.HTTPError as e:
            raise TransportError(f"Sign-out request failed: {e}", source="auth") from e

        # 401/404: token already expired or revoked
        if response.status_code >= 500:
            raise TransportError(
                f"Sign-out failed (HTTP {response.status_code})",
                source="auth",
                status_code=response.status_code,
            )

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    def _emit(self, change: SessionChange) -> None:
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception:
                logger.exception("Auth state listener failed")
