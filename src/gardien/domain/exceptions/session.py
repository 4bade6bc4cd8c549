"""
Session exceptions.
"""

from gardien.domain.exceptions.base import GardienException


class SessionEstablishError(GardienException):
    """Raised when the session backend cannot accept the issued tokens."""

    def __init__(self, message: str = "Failed to establish session"):
        super().__init__(message, code="SESSION_ESTABLISH_FAILED")


class StaleAttemptError(GardienException):
    """
    Raised when the wallet changed while a sign-in was in flight.

    The verified result is discarded; no session is installed.
    """

    def __init__(self, expected: str, actual: str | None):
        super().__init__(
            f"Wallet changed during sign-in (verified {expected}, now {actual})",
            code="STALE_ATTEMPT",
        )
        self.expected = expected
        self.actual = actual


class AttemptCancelledError(GardienException):
    """Raised to callers whose sign-in attempt was cancelled under them."""

    def __init__(self):
        super().__init__("Sign-in attempt was cancelled", code="ATTEMPT_CANCELLED")
