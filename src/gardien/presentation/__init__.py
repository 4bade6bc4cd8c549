"""
Presentation layer: notifications and the WalletAuth facade.
"""

from gardien.presentation.notifications import (
    CollectingNotifier,
    Notification,
    NotificationLevel,
    Notifier,
    ReporterNotifier,
    notification_for,
)
from gardien.presentation.wallet_auth import WalletAuth

__all__ = [
    "CollectingNotifier",
    "Notification",
    "NotificationLevel",
    "Notifier",
    "ReporterNotifier",
    "WalletAuth",
    "notification_for",
]
