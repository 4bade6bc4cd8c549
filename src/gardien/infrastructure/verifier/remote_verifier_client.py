"""
Remote verifier client for wallet sign-in.

Posts {wallet_address, message, signature} to the wallet-auth function.
The signature travels base58-encoded.
"""

import hashlib
import logging
from collections import deque
from typing import Optional

import base58
import httpx
from pydantic import ValidationError as PydanticValidationError

from gardien.domain.entities.session import SessionTokens
from gardien.domain.exceptions import ChallengeReuseError, TransportError
from gardien.domain.services.i_auth_verifier import IAuthVerifier
from gardien.domain.value_objects.verifier_result import (
    Authenticated,
    Rejected,
    VerifierResult,
)
from gardien.infrastructure.resilience import RetryConfig
from gardien.infrastructure.verifier.http_base import BaseHttpClient, error_message
from gardien.infrastructure.verifier.schemas import WalletAuthResponse

logger = logging.getLogger(__name__)

DEFAULT_REJECTION = "Authentication failed"
SUBMITTED_MESSAGE_MEMORY = 1024


class RemoteVerifierClient(BaseHttpClient, IAuthVerifier):
    """
    HTTP client for the wallet-auth verifier.

    A signed message is submitted at most once per client. Retrying a
    rejected or failed sign-in means building and signing a new challenge.
    """

    def __init__(
        self,
        base_url: str,
        function_name: str = "wallet-auth",
        api_key: Optional[str] = None,
        timeout: float = 15.0,
        connect_timeout: float = 5.0,
        retry_config: Optional[RetryConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        submitted_memory: int = SUBMITTED_MESSAGE_MEMORY,
    ):
        """
        Initialize verifier client.

        Args:
            base_url: Functions base URL (e.g. https://x.supabase.co/functions/v1)
            function_name: Name of the verifying function
            api_key: Public API key
            timeout: Total request timeout in seconds
            connect_timeout: Connection timeout in seconds
            retry_config: Retry policy for connection failures
            transport: Optional httpx transport
            submitted_memory: How many submitted messages are remembered
        """
        super().__init__(
            base_url,
            api_key=api_key,
            timeout=timeout,
            connect_timeout=connect_timeout,
            retry_config=retry_config,
            transport=transport,
        )
        self.function_name = function_name.strip("/")
        self._submitted: deque = deque(maxlen=submitted_memory)

    async def verify(
        self,
        wallet_address: str,
        message: str,
        signature: bytes,
    ) -> VerifierResult:
        """
        Submit a signed challenge.

        Args:
            wallet_address: Wallet address claiming ownership
            message: Challenge text that was signed
            signature: Raw signature bytes

        Returns:
            Authenticated or Rejected

        Raises:
            ChallengeReuseError: Message already submitted by this client
            TransportError: Network failure, timeout or server error
        """
        digest = hashlib.sha256(message.encode("utf-8")).hexdigest()
        if digest in self._submitted:
            raise ChallengeReuseError()
        self._submitted.append(digest)

        payload = {
            "wallet_address": wallet_address,
            "message": message,
            "signature": base58.b58encode(signature).decode("ascii"),
        }

        response = await self.send(
            "POST",
            f"/{self.function_name}",
            operation="wallet_auth",
            json=payload,
        )

        if not response.is_success:
            reason = error_message(response, DEFAULT_REJECTION)
            logger.info(
                f"Verifier rejected sign-in: HTTP {response.status_code}: {reason}",
                extra={"wallet_address": wallet_address},
            )
            return Rejected(error_message=reason, status_code=response.status_code)

        return self._interpret(response, wallet_address)

    def _interpret(self, response: httpx.Response, wallet_address: str) -> VerifierResult:
        try:
            data = response.json()
        except ValueError as e:
            raise TransportError(
                "Verifier returned a non-JSON response",
                status_code=response.status_code,
            ) from e

        try:
            body = WalletAuthResponse.model_validate(data)
        except PydanticValidationError as e:
            logger.warning(f"Malformed verifier response: {e}")
            return Rejected(DEFAULT_REJECTION, status_code=response.status_code)

        session = body.session
        user = body.user
        if (
            not body.success
            or session is None
            or not session.access_token
            or not session.refresh_token
            or user is None
            or not user.wallet_address
        ):
            return Rejected(body.error or DEFAULT_REJECTION, status_code=response.status_code)

        if user.wallet_address != wallet_address:
            logger.warning(
                "Verifier bound a different wallet than requested",
                extra={"requested": wallet_address, "bound": user.wallet_address},
            )
            return Rejected(DEFAULT_REJECTION, status_code=response.status_code)

        tokens = SessionTokens(
            access_token=session.access_token,
            refresh_token=session.refresh_token,
            expires_in=session.expires_in,
            expires_at=session.expires_at,
            token_type=session.token_type or "bearer",
        )
        return Authenticated(
            tokens=tokens,
            wallet_address=user.wallet_address,
            user_id=str(user.id) if user.id is not None else None,
        )
