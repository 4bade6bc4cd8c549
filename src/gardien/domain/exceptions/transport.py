"""
Transport and remote verification exceptions.
"""

from typing import Optional

from gardien.domain.exceptions.base import GardienException


class TransportError(GardienException):
    """
    Raised on network, timeout or adapter failures.

    Retryable: a retry restarts the whole flow with a fresh challenge.
    """

    retryable = True

    def __init__(
        self,
        message: str,
        source: str = "verifier",
        status_code: Optional[int] = None,
    ):
        code = "WALLET_TRANSPORT" if source == "wallet" else "TRANSPORT_ERROR"
        super().__init__(message, code=code)
        self.source = source
        self.status_code = status_code


class VerificationRejectedError(GardienException):
    """
    Raised when the remote verifier rejects a signed challenge.

    Retryable only with a freshly built challenge.
    """

    retryable = True

    def __init__(
        self,
        message: str = "Authentication failed",
        status_code: Optional[int] = None,
    ):
        super().__init__(message, code="VERIFICATION_REJECTED")
        self.status_code = status_code


class ChallengeReuseError(GardienException):
    """Raised when a signed message would be submitted a second time."""

    def __init__(self):
        super().__init__(
            "Signed message was already submitted; build a new challenge",
            code="CHALLENGE_REUSE",
        )
