"""
Shared httpx plumbing for the remote verifier clients.

Connection-establishment failures are retried; nothing that may have reached
the server is. Network failures and 5xx responses become TransportError;
interpreting 2xx/4xx is left to the concrete client.
"""

import logging
import time
from dataclasses import replace
from typing import Dict, Optional

import httpx

from gardien.domain.exceptions import TransportError
from gardien.infrastructure.monitoring.metrics import (
    verifier_request_duration_seconds,
    verifier_requests_total,
)
from gardien.infrastructure.resilience import (
    BackoffStrategy,
    Retry,
    RetryConfig,
    RetryError,
)

logger = logging.getLogger(__name__)

# Exceptions raised before the request left the client
CONNECT_ERRORS = (httpx.ConnectError, httpx.ConnectTimeout)


class BaseHttpClient:
    """
    Lazily created httpx.AsyncClient with retry and metrics.

    Args:
        base_url: Service base URL
        api_key: Public API key, sent as apikey and Bearer headers
        timeout: Total request timeout in seconds
        connect_timeout: Connection timeout in seconds
        retry_config: Retry policy for connection failures
        transport: Optional httpx transport (tests use httpx.MockTransport)
    """

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: float = 15.0,
        connect_timeout: float = 5.0,
        retry_config: Optional[RetryConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = httpx.Timeout(timeout, connect=connect_timeout)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

        base_config = retry_config or RetryConfig(
            max_attempts=2,
            initial_delay=0.5,
            max_delay=5.0,
            backoff_strategy=BackoffStrategy.EXPONENTIAL,
        )
        self.retry = Retry(replace(base_config, retry_on=CONNECT_ERRORS))

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers=self.default_headers(),
                transport=self._transport,
                limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
            )
        return self._client

    def default_headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["apikey"] = self.api_key
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def send(
        self,
        method: str,
        path: str,
        operation: str,
        **kwargs,
    ) -> httpx.Response:
        """
        Send one request (retried only if the connection was never made).

        Args:
            method: HTTP method
            path: Path relative to base_url, starting with "/"
            operation: Operation name for metrics and logs
            **kwargs: Passed to httpx.AsyncClient.request

        Returns:
            Response with status < 500

        Raises:
            TransportError: Network failure, timeout or 5xx response
        """
        url = f"{self.base_url}{path}"
        started = time.monotonic()

        try:
            response = await self.retry.execute_async(
                self.client.request, method, url, **kwargs
            )
        except RetryError as e:
            verifier_requests_total.labels(operation=operation, status="unreachable").inc()
            logger.error(f"{operation}: could not connect to {self.base_url}: {e}")
            raise TransportError(
                f"Could not reach {operation} service"
            ) from e.last_exception
        except httpx.TimeoutException as e:
            verifier_requests_total.labels(operation=operation, status="timeout").inc()
            logger.warning(f"{operation}: request timed out")
            raise TransportError(f"{operation} request timed out") from e
        except httpx.HTTPError as e:
            verifier_requests_total.labels(operation=operation, status="network").inc()
            logger.warning(f"{operation}: {type(e).__name__}: {e}")
            raise TransportError(f"{operation} request failed: {e}") from e
        finally:
            verifier_request_duration_seconds.labels(operation=operation).observe(
                time.monotonic() - started
            )

        if response.status_code >= 500:
            verifier_requests_total.labels(operation=operation, status="server_error").inc()
            logger.warning(
                f"{operation}: server error {response.status_code}: "
                f"{response.text[:200]}"
            )
            raise TransportError(
                f"{operation} service error (HTTP {response.status_code})",
                status_code=response.status_code,
            )

        status = "ok" if response.is_success else "rejected"
        verifier_requests_total.labels(operation=operation, status=status).inc()
        return response

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None


def error_message(response: httpx.Response, default: str) -> str:
    """Pull an error message out of a JSON error body."""
    try:
        body = response.json()
    except ValueError:
        return default
    if isinstance(body, dict):
        for key in ("error", "message", "msg", "error_description"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return default
