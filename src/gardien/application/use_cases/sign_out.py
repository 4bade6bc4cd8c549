"""
Sign Out use case.
"""

import logging
from typing import Optional

from gardien.domain.exceptions import GardienException, TransportError
from gardien.domain.services.i_session_backend import ISessionBackend
from gardien.domain.services.i_wallet_provider import IWalletProvider
from gardien.infrastructure.monitoring.metrics import session_invalidations_total
from gardien.infrastructure.session.session_store import SessionStore

logger = logging.getLogger(__name__)


class SignOut:
    """
    End the session.

    The local session is cleared first and stays cleared whatever the
    backend answers.
    """

    def __init__(
        self,
        backend: ISessionBackend,
        store: SessionStore,
        wallet: Optional[IWalletProvider] = None,
    ):
        self.backend = backend
        self.store = store
        self.wallet = wallet

    async def execute(self, disconnect_wallet: bool = True) -> None:
        """
        Sign out.

        Args:
            disconnect_wallet: Also ask the wallet to disconnect

        Raises:
            TransportError: Backend revocation failed (local state is cleared)
        """
        if self.store.current() is not None:
            session_invalidations_total.labels(reason="sign_out").inc()
        self.store.set(None, reason="sign_out")

        backend_error: Optional[GardienException] = None
        try:
            await self.backend.sign_out()
        except GardienException as e:
            logger.warning(f"Backend sign-out failed: {e.message}")
            backend_error = e

        if disconnect_wallet and self.wallet is not None:
            try:
                await self.wallet.disconnect()
            except Exception as e:
                logger.warning(f"Wallet disconnect failed: {type(e).__name__}: {e}")

        if backend_error is not None:
            if isinstance(backend_error, TransportError):
                raise backend_error
            raise TransportError(backend_error.message, source="auth") from backend_error
