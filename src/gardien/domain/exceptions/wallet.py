"""
Wallet and signing exceptions.
"""

from typing import Optional

from gardien.domain.exceptions.base import GardienException


class WalletNotConnectedError(GardienException):
    """Raised when no wallet signing capability is available."""

    def __init__(self, message: str = "Wallet is not connected"):
        super().__init__(message, code="NOT_CONNECTED")


class AddressMismatchError(GardienException):
    """Raised when the connected wallet is not the wallet being proven."""

    def __init__(self, expected: str, actual: Optional[str]):
        super().__init__(
            f"Connected wallet {actual} does not match expected wallet {expected}",
            code="ADDRESS_MISMATCH",
        )
        self.expected = expected
        self.actual = actual


class SignatureRejectedError(GardienException):
    """Raised when the user declines the signature request."""

    def __init__(self, message: str = "Signature request was rejected"):
        super().__init__(message, code="SIGNATURE_REJECTED")


class UserRejectedRequest(Exception):
    """
    Raised by wallet capabilities when the user refuses to sign.

    Adapters that can tell a refusal apart from other failures should raise
    this; the signing client maps it to SignatureRejectedError.
    """
