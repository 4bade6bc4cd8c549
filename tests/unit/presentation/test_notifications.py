"""
Unit tests for notification mapping and notifiers.

Usage:
    python tests/unit/presentation/test_notifications.py
    laborant gardien --unit
"""

import io

from gardien.domain.entities.verification_record import VerificationRecord
from gardien.domain.exceptions import (
    AddressMismatchError,
    AttemptCancelledError,
    ConcurrentAttemptIgnoredError,
    PartialVerificationError,
    SignatureRejectedError,
    StaleAttemptError,
    TransportError,
    VerificationRejectedError,
    WalletNotConnectedError,
)
from gardien.infrastructure.monitoring.reporter import SystemReporter
from gardien.presentation.notifications import (
    CollectingNotifier,
    Notification,
    NotificationLevel,
    ReporterNotifier,
    notification_for,
)
from tests.helpers.laborant_test import LaborantTest

ADDRESS = "kshy5yns5FGGXcFVfjT2fTzVsQLFnbZzL9zuh1ZKR2y"


async def _retry():
    return True


class TestNotifications(LaborantTest):
    """Unit tests for user notifications."""

    component_name = "gardien"
    test_category = "unit"

    # ================================================================
    # Mapping
    # ================================================================

    def test_user_messages(self):
        """Test failures map to their user-facing text."""
        self.reporter.info("Testing notification messages", context="Test")

        record = VerificationRecord("kol-1", ADDRESS, "c2ln", "msg", ADDRESS)
        expected = [
            (WalletNotConnectedError(), "Please connect your wallet first"),
            (SignatureRejectedError(), "Signature request was rejected"),
            (TransportError("boom", source="wallet"), "Failed to sign message"),
            (
                AddressMismatchError(ADDRESS, None),
                "Connected wallet doesn't match the KOL's wallet address",
            ),
            (PartialVerificationError(record, "x"), "Failed to update verification status"),
        ]

        for error, message in expected:
            notification = notification_for(error)
            assert notification.level == NotificationLevel.ERROR
            assert notification.message == message, error.code

    def test_verifier_message_passed_through(self):
        """Test a verifier rejection shows the server's reason."""
        notification = notification_for(VerificationRejectedError("Message expired"))

        assert notification.message == "Message expired"
        assert notification.code == "VERIFICATION_REJECTED"

    def test_retry_only_for_retryable(self):
        """Test the retry action is attached to retryable failures only."""
        assert notification_for(TransportError("x"), retry=_retry).retry is _retry
        assert notification_for(VerificationRejectedError(), retry=_retry).retry is _retry
        assert notification_for(SignatureRejectedError(), retry=_retry).retry is None

    def test_silent_and_informational(self):
        """Test suppressed and informational codes."""
        assert notification_for(ConcurrentAttemptIgnoredError()) is None
        assert notification_for(AttemptCancelledError()) is None

        stale = notification_for(StaleAttemptError(ADDRESS, None), retry=_retry)
        assert stale.level == NotificationLevel.INFO
        assert stale.retry is None

    # ================================================================
    # Notifiers
    # ================================================================

    def test_reporter_notifier(self):
        """Test notifications are written through the reporter."""
        stream = io.StringIO()
        notifier = ReporterNotifier(SystemReporter(name="gardien-test", stream=stream))

        notifier.notify(Notification(NotificationLevel.ERROR, "Authentication failed", retry=_retry))
        notifier.notify(Notification(NotificationLevel.SUCCESS, "Signed out successfully"))

        output = stream.getvalue()
        assert "[WalletAuth] Authentication failed (retry available)" in output
        assert "ERROR" in output
        assert "[WalletAuth] Signed out successfully" in output

    def test_collecting_notifier(self):
        """Test the in-memory notifier."""
        notifier = CollectingNotifier()
        assert notifier.last is None

        notifier.notify(Notification(NotificationLevel.INFO, "one"))
        notifier.notify(Notification(NotificationLevel.INFO, "two"))

        assert [n.message for n in notifier.notifications] == ["one", "two"]
        assert notifier.last.message == "two"


if __name__ == "__main__":
    TestNotifications.run_as_main()
