"""
WalletAuth - the surface UI event handlers talk to.

Wraps the orchestrator and use cases, turns failures into notifications and
reports booleans back to the caller.
"""

import logging
from typing import Optional

from gardien.application.use_cases.sign_in_orchestrator import SignInOrchestrator
from gardien.application.use_cases.sign_out import SignOut
from gardien.application.use_cases.verify_wallet_ownership import (
    VerifyWalletOwnership,
)
from gardien.domain.entities.owned_entity import OwnedEntity
from gardien.domain.entities.session import Session
from gardien.domain.exceptions import GardienException
from gardien.domain.services.i_wallet_provider import IWalletProvider
from gardien.infrastructure.session.session_store import SessionStore
from gardien.presentation.notifications import (
    OWNERSHIP_SUCCESS,
    SIGN_IN_SUCCESS,
    SIGN_OUT_SUCCESS,
    Notification,
    NotificationLevel,
    Notifier,
    RetryAction,
    notification_for,
)

logger = logging.getLogger(__name__)


class WalletAuth:
    """Authentication facade for UI code."""

    def __init__(
        self,
        orchestrator: SignInOrchestrator,
        sign_out_use_case: SignOut,
        verify_ownership_use_case: VerifyWalletOwnership,
        store: SessionStore,
        wallet: IWalletProvider,
        notifier: Notifier,
    ):
        self.orchestrator = orchestrator
        self.sign_out_use_case = sign_out_use_case
        self.verify_ownership_use_case = verify_ownership_use_case
        self.store = store
        self.wallet = wallet
        self.notifier = notifier

    @property
    def is_authenticated(self) -> bool:
        return self.store.authenticated

    @property
    def is_authenticating(self) -> bool:
        return self.orchestrator.state.in_flight

    @property
    def is_ready(self) -> bool:
        """False until the initial session read has completed."""
        return self.store.hydrated

    @property
    def session(self) -> Optional[Session]:
        return self.store.current()

    @property
    def wallet_address(self) -> Optional[str]:
        return self.wallet.signal.effective_address

    async def sign_in(self) -> bool:
        """
        Sign in with the connected wallet.

        A call made while an attempt is in flight joins it and gets the same
        result; only the caller that started the attempt notifies.

        Returns:
            True when a session was established
        """
        joined = self.orchestrator.in_flight
        try:
            await self.orchestrator.sign_in()
        except GardienException as e:
            if not joined:
                self._report(e, retry=self.sign_in)
            return False

        if joined:
            return True

        self.notifier.notify(
            Notification(NotificationLevel.SUCCESS, SIGN_IN_SUCCESS)
        )
        return True

    async def sign_out(self) -> None:
        self.orchestrator.cancel()
        try:
            await self.sign_out_use_case.execute()
        except GardienException as e:
            self._report(e)
            return

        self.notifier.notify(
            Notification(NotificationLevel.SUCCESS, SIGN_OUT_SUCCESS)
        )

    async def verify_ownership(self, entity: OwnedEntity) -> bool:
        """
        Attest that the connected wallet owns the entity's linked wallet.

        Returns:
            True when the attestation was written and the entity flagged
        """
        try:
            await self.verify_ownership_use_case.execute(entity)
        except GardienException as e:

            async def retry() -> bool:
                return await self.verify_ownership(entity)

            self._report(e, retry=retry)
            return False

        self.notifier.notify(
            Notification(NotificationLevel.SUCCESS, OWNERSHIP_SUCCESS)
        )
        return True

    def _report(self, error: GardienException, retry: Optional[RetryAction] = None):
        notification = notification_for(error, retry=retry)
        if notification is None:
            logger.debug(f"Suppressed notification for {error.code}")
            return
        self.notifier.notify(notification)
