"""
Session storage and backends.
"""

from gardien.infrastructure.session.gotrue_session_backend import (
    GoTrueSessionBackend,
)
from gardien.infrastructure.session.session_channel import (
    SessionChannel,
    Subscription,
)
from gardien.infrastructure.session.session_store import SessionStore

__all__ = [
    "GoTrueSessionBackend",
    "SessionChannel",
    "SessionStore",
    "Subscription",
]
