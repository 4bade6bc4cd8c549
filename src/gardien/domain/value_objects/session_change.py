"""
SessionChange value object - one message on the session channel.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from gardien.domain.entities.session import Session


class SessionChangeKind(str, Enum):
    """Kinds of session change, named after the auth backend events."""

    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"


_last_stamp = 0


def next_stamp() -> int:
    """
    Monotonic recency stamp in nanoseconds.

    Strictly increasing within the process, even on clocks with coarse
    resolution.
    """
    global _last_stamp
    _last_stamp = max(time.monotonic_ns(), _last_stamp + 1)
    return _last_stamp


@dataclass(frozen=True)
class SessionChange:
    """
    A session change with its recency stamp.

    Stamps are taken where the change originates, so a late delivery keeps
    its original position in the ordering.
    """

    kind: SessionChangeKind
    session: Optional[Session] = None
    stamp: int = field(default_factory=next_stamp)
    reason: Optional[str] = None

    @property
    def access_token(self) -> Optional[str]:
        return self.session.access_token if self.session else None
