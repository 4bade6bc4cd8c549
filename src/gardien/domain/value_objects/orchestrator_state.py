"""
Sign-in orchestrator states.
"""

from enum import Enum


class OrchestratorState(str, Enum):
    """States of the single-flight sign-in machine."""

    IDLE = "idle"
    AWAITING_SIGNATURE = "awaiting_signature"
    VERIFYING_REMOTELY = "verifying_remotely"
    ESTABLISHING_SESSION = "establishing_session"
    AUTHENTICATED = "authenticated"
    FAILED = "failed"

    @property
    def in_flight(self) -> bool:
        return self in (
            OrchestratorState.AWAITING_SIGNATURE,
            OrchestratorState.VERIFYING_REMOTELY,
            OrchestratorState.ESTABLISHING_SESSION,
        )
