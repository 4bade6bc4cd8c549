"""
Session channel - explicit publish/subscribe for session changes.
"""

import logging
from typing import Callable, List

from gardien.domain.value_objects.session_change import SessionChange

logger = logging.getLogger(__name__)

SessionListener = Callable[[SessionChange], None]


class Subscription:
    """Handle returned by subscribe(); call unsubscribe() to stop delivery."""

    def __init__(self, channel: "SessionChannel", listener: SessionListener):
        self._channel = channel
        self.listener = listener
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self.active = False
            self._channel._remove(self)


class SessionChannel:
    """
    Synchronous fan-out of accepted session changes.

    Listeners run in subscription order on the publisher's call stack. A
    listener that raises is logged and does not stop delivery to the others.
    """

    def __init__(self) -> None:
        self._subscriptions: List[Subscription] = []

    def subscribe(self, listener: SessionListener) -> Subscription:
        subscription = Subscription(self, listener)
        self._subscriptions.append(subscription)
        return subscription

    def publish(self, change: SessionChange) -> None:
        for subscription in list(self._subscriptions):
            if not subscription.active:
                continue
            try:
                subscription.listener(change)
            except Exception:
                logger.exception(
                    "Session listener failed", extra={"kind": change.kind.value}
                )

    def _remove(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)
