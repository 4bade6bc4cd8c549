"""
Base domain exceptions.
"""


class GardienException(Exception):
    """Base exception for all Gardien domain errors."""

    retryable: bool = False

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


class ValidationError(GardienException):
    """Raised when input validation fails."""

    def __init__(self, field: str, reason: str):
        message = f"Validation failed for {field}: {reason}"
        super().__init__(message, code="VALIDATION_ERROR")
        self.field = field
        self.reason = reason


class ConcurrentAttemptIgnoredError(GardienException):
    """
    Raised when a call is ignored because the same flow is already running.

    Informational: the in-flight attempt keeps running and reports its own
    outcome.
    """

    def __init__(self, operation: str = "sign_in"):
        super().__init__(
            f"{operation} already in progress",
            code="CONCURRENT_ATTEMPT_IGNORED",
        )
        self.operation = operation
