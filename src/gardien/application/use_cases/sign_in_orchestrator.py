"""
Sign-in orchestrator - single-flight wallet sign-in.

One attempt at a time runs as a shared asyncio.Task:

    IDLE -> AWAITING_SIGNATURE -> VERIFYING_REMOTELY -> ESTABLISHING_SESSION
         -> AUTHENTICATED

Any failure passes through FAILED back to IDLE. Calls made while an attempt
is in flight join it and receive its outcome.
"""

import asyncio
import logging
import time
from typing import Callable, List, Optional

from gardien.application.background import BackgroundTasks
from gardien.domain.entities.session import Session
from gardien.domain.exceptions import (
    AttemptCancelledError,
    ConcurrentAttemptIgnoredError,
    GardienException,
    SessionEstablishError,
    StaleAttemptError,
    TransportError,
    VerificationRejectedError,
    WalletNotConnectedError,
)
from gardien.domain.services.challenge_builder import ChallengeBuilder
from gardien.domain.services.i_auth_verifier import IAuthVerifier
from gardien.domain.services.i_session_backend import ISessionBackend
from gardien.domain.services.i_wallet_provider import IWalletProvider
from gardien.domain.value_objects.orchestrator_state import OrchestratorState
from gardien.domain.value_objects.session_change import SessionChange
from gardien.domain.value_objects.verifier_result import Authenticated, Rejected
from gardien.infrastructure.monitoring.logger import log_performance, set_attempt_id
from gardien.infrastructure.monitoring.metrics import (
    session_invalidations_total,
    sign_in_attempts_total,
    sign_in_duration_seconds,
    sign_in_joined_total,
)
from gardien.infrastructure.session.session_store import SessionStore
from gardien.infrastructure.wallet.signing_client import SigningClient

logger = logging.getLogger(__name__)

StateListener = Callable[[OrchestratorState, Optional[GardienException]], None]


class SignInOrchestrator:
    """
    Single-flight sign-in state machine.

    Business rules:
    - At most one attempt in flight; concurrent calls share its outcome
    - A session is installed only from an Authenticated verifier result
    - The bound wallet must still be the connected wallet when the session
      is installed, otherwise the attempt is stale and discarded
    - No automatic retries; every retry starts from a fresh challenge
    """

    def __init__(
        self,
        wallet: IWalletProvider,
        challenge_builder: ChallengeBuilder,
        signing_client: SigningClient,
        verifier: IAuthVerifier,
        backend: ISessionBackend,
        store: SessionStore,
    ):
        """
        Initialize orchestrator with dependencies.

        Args:
            wallet: Connected wallet (signal source)
            challenge_builder: Builds sign-in challenges
            signing_client: Obtains wallet signatures
            verifier: Remote verifier that mints session tokens
            backend: Session backend that accepts the tokens
            store: Local session store
        """
        self.wallet = wallet
        self.challenge_builder = challenge_builder
        self.signing_client = signing_client
        self.verifier = verifier
        self.backend = backend
        self.store = store

        self._state = OrchestratorState.IDLE
        self._failure: Optional[GardienException] = None
        self._task: Optional[asyncio.Task] = None
        self._pending: Optional[Session] = None
        self._waiters = 0
        self._state_listeners: List[StateListener] = []
        self._background = BackgroundTasks()
        self._subscription = store.subscribe(self._on_session_change)

    # Observation

    @property
    def state(self) -> OrchestratorState:
        return self._state

    @property
    def failure(self) -> Optional[GardienException]:
        """Reason of the last failed attempt."""
        return self._failure

    @property
    def in_flight(self) -> bool:
        return self._task is not None and not self._task.done()

    def subscribe_state(self, listener: StateListener) -> Callable[[], None]:
        """Receive every state transition."""
        self._state_listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._state_listeners:
                self._state_listeners.remove(listener)

        return unsubscribe

    # Commands

    async def sign_in(self, join_in_flight: bool = True) -> Session:
        """
        Sign in with the connected wallet.

        Args:
            join_in_flight: Join an attempt already running (True) or refuse
                with ConcurrentAttemptIgnoredError (False)

        Returns:
            The established Session

        Raises:
            ConcurrentAttemptIgnoredError: Attempt in flight and not joining
            AttemptCancelledError: The shared attempt was cancelled
            GardienException: The attempt's failure, shared by all callers
        """
        if self.in_flight:
            if not join_in_flight:
                raise ConcurrentAttemptIgnoredError("sign_in")
            sign_in_joined_total.inc()
            logger.info("Joining sign-in attempt in flight")
        else:
            current = self.store.current()
            if current is not None and current.is_bound_to(
                self.wallet.signal.effective_address
            ):
                return current
            self._task = asyncio.get_running_loop().create_task(
                self._run_attempt(), name="gardien-sign-in"
            )

        task = self._task
        self._waiters += 1
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            if task.cancelled():
                raise AttemptCancelledError() from None
            raise
        finally:
            self._waiters -= 1
            if self._waiters == 0 and not task.done():
                logger.info("Every caller left; cancelling sign-in attempt")
                task.cancel()

    def cancel(self) -> bool:
        """
        Cancel the attempt in flight.

        Returns:
            True if an attempt was cancelled
        """
        if not self.in_flight:
            return False
        self._task.cancel()
        return True

    async def close(self) -> None:
        """Cancel any attempt and stop observing the store."""
        task = self._task
        if task is not None and not task.done():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
        self._subscription.unsubscribe()
        await self._background.drain()

    # Attempt

    async def _run_attempt(self) -> Session:
        attempt_id = set_attempt_id()
        started = time.monotonic()
        outcome = "error"
        self._failure = None
        logger.info("Sign-in attempt started", extra={"attempt": attempt_id})

        try:
            session = await self._attempt()
            outcome = "authenticated"
            self._transition(OrchestratorState.AUTHENTICATED)
            logger.info(
                "Sign-in attempt authenticated",
                extra={"wallet_address": session.bound_wallet_address},
            )
            return session

        except asyncio.CancelledError:
            outcome = "cancelled"
            self._abandon_pending("cancelled")
            self._transition(OrchestratorState.IDLE)
            logger.info("Sign-in attempt cancelled")
            raise

        except GardienException as e:
            outcome = e.code.lower()
            self._fail(e)
            raise

        except Exception as e:
            logger.exception("Unexpected sign-in failure")
            error = TransportError(f"Unexpected sign-in failure: {e}")
            self._fail(error)
            raise error from e

        finally:
            self._pending = None
            sign_in_attempts_total.labels(outcome=outcome).inc()
            sign_in_duration_seconds.observe(time.monotonic() - started)
            log_performance(logger, f"sign_in ({outcome})", started)
            if self._task is asyncio.current_task():
                self._task = None

    async def _attempt(self) -> Session:
        address = self.wallet.signal.effective_address
        if address is None or not self.wallet.can_sign:
            raise WalletNotConnectedError()

        self._transition(OrchestratorState.AWAITING_SIGNATURE)
        challenge = self.challenge_builder.build_auth(address)
        signature = await self.signing_client.sign(challenge)

        self._transition(OrchestratorState.VERIFYING_REMOTELY)
        result = await self.verifier.verify(address, challenge.text, signature)

        if isinstance(result, Rejected):
            raise VerificationRejectedError(result.error_message, result.status_code)
        if not isinstance(result, Authenticated):
            raise TransportError(f"Unexpected verifier result: {type(result).__name__}")

        self._transition(OrchestratorState.ESTABLISHING_SESSION)
        return await self._establish(result)

    async def _establish(self, result: Authenticated) -> Session:
        bound = result.wallet_address
        self._ensure_still_connected(bound)

        try:
            session = await self.backend.set_session(
                result.tokens, bound, user_id=result.user_id
            )
        except SessionEstablishError:
            raise
        except GardienException as e:
            raise SessionEstablishError(e.message) from e
        self._pending = session

        actual = self.wallet.signal.effective_address
        if actual != bound:
            self.store.discard(session, reason="stale_attempt")
            self._pending = None
            await self._sign_out_backend()
            raise StaleAttemptError(bound, actual)

        self.store.set(session, reason="sign_in")
        confirmed = await self.store.refresh()
        if confirmed is None or confirmed.access_token != session.access_token:
            self._pending = None
            raise StaleAttemptError(bound, self.wallet.signal.effective_address)

        return session

    def _ensure_still_connected(self, bound: str) -> None:
        actual = self.wallet.signal.effective_address
        if actual != bound:
            raise StaleAttemptError(bound, actual)

    async def _sign_out_backend(self) -> None:
        try:
            await self.backend.sign_out()
        except GardienException as e:
            logger.warning(f"Backend sign-out after stale attempt failed: {e.message}")

    def _abandon_pending(self, reason: str) -> None:
        """Drop a session the cancelled attempt already handed to the backend."""
        session = self._pending
        if session is None:
            return
        self.store.discard(session, reason=reason)
        session_invalidations_total.labels(reason=reason).inc()
        self._background.spawn(self.backend.sign_out(), name="gardien-sign-out")

    # State

    def _fail(self, error: GardienException) -> None:
        self._failure = error
        logger.warning(
            f"Sign-in attempt failed: {error.message}", extra={"code": error.code}
        )
        self._transition(OrchestratorState.FAILED)
        self._transition(OrchestratorState.IDLE)

    def _transition(self, state: OrchestratorState) -> None:
        if state == self._state:
            return
        self._state = state
        for listener in list(self._state_listeners):
            try:
                listener(state, self._failure)
            except Exception:
                logger.exception("State listener failed")

    def _on_session_change(self, change: SessionChange) -> None:
        if self.in_flight:
            return
        if change.session is None and self._state == OrchestratorState.AUTHENTICATED:
            self._transition(OrchestratorState.IDLE)
        elif change.session is not None and self._state == OrchestratorState.IDLE:
            self._transition(OrchestratorState.AUTHENTICATED)
