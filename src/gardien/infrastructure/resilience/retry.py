"""
Retry pattern with exponential backoff and jitter.

Only for failures where the request provably never reached the server.
Anything that may have been processed remotely must not go through here.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class BackoffStrategy(str, Enum):
    """Backoff strategy for retries."""

    EXPONENTIAL = "exponential"
    LINEAR = "linear"
    CONSTANT = "constant"


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    max_attempts: int = 3
    """Maximum number of attempts (including initial attempt)"""

    initial_delay: float = 1.0
    """Initial delay between retries in seconds"""

    max_delay: float = 60.0
    """Maximum delay between retries in seconds"""

    backoff_strategy: BackoffStrategy = BackoffStrategy.EXPONENTIAL
    """Backoff strategy: exponential, linear, or constant"""

    backoff_multiplier: float = 2.0
    """Multiplier for exponential/linear backoff"""

    jitter: bool = True
    """Add random jitter to prevent thundering herd"""

    jitter_factor: float = 0.1
    """Jitter factor (0.0-1.0). 0.1 means +/-10% randomness"""

    retry_on: tuple = (Exception,)
    """Exception types to retry on"""


class RetryError(Exception):
    """Raised when all retry attempts are exhausted."""

    def __init__(
        self,
        message: str,
        attempts: int,
        last_exception: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.attempts = attempts
        self.last_exception = last_exception


class Retry:
    """
    Async retry handler with configurable backoff strategies.

    Example:
        retry = Retry(RetryConfig(max_attempts=2, retry_on=(httpx.ConnectError,)))
        response = await retry.execute_async(client.post, url, json=payload)
    """

    def __init__(self, config: Optional[RetryConfig] = None):
        self.config = config or RetryConfig()

    def _calculate_delay(self, attempt: int) -> float:
        """
        Calculate delay for current attempt.

        Args:
            attempt: Current attempt number (0-indexed)

        Returns:
            Delay in seconds
        """
        if self.config.backoff_strategy == BackoffStrategy.EXPONENTIAL:
            delay = self.config.initial_delay * (
                self.config.backoff_multiplier**attempt
            )
        elif self.config.backoff_strategy == BackoffStrategy.LINEAR:
            delay = self.config.initial_delay + (
                self.config.backoff_multiplier * attempt
            )
        else:  # CONSTANT
            delay = self.config.initial_delay

        delay = min(delay, self.config.max_delay)

        if self.config.jitter:
            jitter_range = delay * self.config.jitter_factor
            delay = max(0.0, delay + random.uniform(-jitter_range, jitter_range))

        return delay

    def _should_retry_exception(self, exception: Exception) -> bool:
        return isinstance(exception, self.config.retry_on)

    async def execute_async(
        self, func: Callable[..., Awaitable[Any]], *args, **kwargs
    ) -> Any:
        """
        Execute async function with retry logic.

        Args:
            func: Async function to execute
            *args: Positional arguments for func
            **kwargs: Keyword arguments for func

        Returns:
            Function result

        Raises:
            RetryError: When all attempts exhausted
            Exception: Non-retryable exceptions are re-raised unchanged
        """
        last_exception = None

        for attempt in range(self.config.max_attempts):
            try:
                result = await func(*args, **kwargs)
                if attempt > 0:
                    logger.info(
                        f"Operation succeeded on attempt "
                        f"{attempt + 1}/{self.config.max_attempts}"
                    )
                return result

            except Exception as e:
                last_exception = e

                if not self._should_retry_exception(e):
                    raise

                if attempt >= self.config.max_attempts - 1:
                    raise RetryError(
                        f"All {self.config.max_attempts} attempts exhausted. "
                        f"Last error: {type(e).__name__}: {e}",
                        attempts=self.config.max_attempts,
                        last_exception=e,
                    ) from e

                delay = self._calculate_delay(attempt)
                logger.warning(
                    f"{type(e).__name__}: {e}. "
                    f"Attempt {attempt + 1}/{self.config.max_attempts}. "
                    f"Retrying in {delay:.2f}s..."
                )
                await asyncio.sleep(delay)

        raise RetryError(
            "Unexpected retry exhaustion",
            attempts=self.config.max_attempts,
            last_exception=last_exception,
        )


__all__ = [
    "Retry",
    "RetryConfig",
    "RetryError",
    "BackoffStrategy",
]
