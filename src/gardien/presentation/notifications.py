"""
User-facing notifications.

Every failed flow produces at most one notification. Retryable failures
carry a retry action that re-runs the whole flow.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, List, Optional

from gardien.domain.exceptions import GardienException, VerificationRejectedError
from gardien.infrastructure.monitoring.reporter import SystemReporter

RetryAction = Callable[[], Awaitable[Any]]


class NotificationLevel(str, Enum):
    """Notification severity."""

    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


MESSAGES = {
    "NOT_CONNECTED": "Please connect your wallet first",
    "SIGNATURE_REJECTED": "Signature request was rejected",
    "WALLET_TRANSPORT": "Failed to sign message",
    "TRANSPORT_ERROR": "Authentication failed. Please try again.",
    "VERIFICATION_REJECTED": "Authentication failed",
    "SESSION_ESTABLISH_FAILED": "Failed to establish session",
    "STALE_ATTEMPT": "Wallet changed during sign-in. Please try again.",
    "ADDRESS_MISMATCH": "Connected wallet doesn't match the KOL's wallet address",
    "MISSING_WALLET_LINK": "This KOL doesn't have a wallet address linked",
    "PARTIAL_VERIFICATION": "Failed to update verification status",
}

SIGN_IN_SUCCESS = "Wallet authenticated successfully!"
OWNERSHIP_SUCCESS = "Wallet verified successfully!"
SIGN_OUT_SUCCESS = "Signed out successfully"

# Codes that never reach the user
SILENT_CODES = {"CONCURRENT_ATTEMPT_IGNORED", "ATTEMPT_CANCELLED"}


@dataclass(frozen=True)
class Notification:
    """One message for the user."""

    level: NotificationLevel
    message: str
    code: Optional[str] = None
    retry: Optional[RetryAction] = None


class Notifier(ABC):
    """Destination for notifications (toast layer, console, ...)."""

    @abstractmethod
    def notify(self, notification: Notification) -> None:
        """Show a notification."""


class ReporterNotifier(Notifier):
    """Writes notifications to the SystemReporter."""

    def __init__(self, reporter: SystemReporter, context: str = "WalletAuth"):
        self.reporter = reporter
        self.context = context

    def notify(self, notification: Notification) -> None:
        message = notification.message
        if notification.retry is not None:
            message = f"{message} (retry available)"

        if notification.level == NotificationLevel.ERROR:
            self.reporter.error(message, context=self.context)
        elif notification.level == NotificationLevel.WARNING:
            self.reporter.warning(message, context=self.context)
        else:
            self.reporter.info(message, context=self.context)


class CollectingNotifier(Notifier):
    """Keeps notifications in memory (headless clients, tests)."""

    def __init__(self) -> None:
        self.notifications: List[Notification] = []

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)

    @property
    def last(self) -> Optional[Notification]:
        return self.notifications[-1] if self.notifications else None


def notification_for(
    error: GardienException, retry: Optional[RetryAction] = None
) -> Optional[Notification]:
    """
    Map a failure to its notification.

    Returns:
        Notification, or None for failures the user should not see
    """
    if error.code in SILENT_CODES:
        return None

    if error.code == "STALE_ATTEMPT":
        return Notification(NotificationLevel.INFO, MESSAGES["STALE_ATTEMPT"], error.code)

    if isinstance(error, VerificationRejectedError):
        message = error.message or MESSAGES["VERIFICATION_REJECTED"]
    else:
        message = MESSAGES.get(error.code, error.message)

    return Notification(
        level=NotificationLevel.ERROR,
        message=message,
        code=error.code,
        retry=retry if error.retryable else None,
    )
