"""
Domain exceptions package.
"""

# Base exceptions
from gardien.domain.exceptions.base import (
    ConcurrentAttemptIgnoredError,
    GardienException,
    ValidationError,
)

# Ownership exceptions
from gardien.domain.exceptions.ownership import (
    MissingWalletLinkError,
    PartialVerificationError,
)

# Session exceptions
from gardien.domain.exceptions.session import (
    AttemptCancelledError,
    SessionEstablishError,
    StaleAttemptError,
)

# Transport exceptions
from gardien.domain.exceptions.transport import (
    ChallengeReuseError,
    TransportError,
    VerificationRejectedError,
)

# Wallet exceptions
from gardien.domain.exceptions.wallet import (
    AddressMismatchError,
    SignatureRejectedError,
    UserRejectedRequest,
    WalletNotConnectedError,
)

__all__ = [
    # Base
    "GardienException",
    "ValidationError",
    "ConcurrentAttemptIgnoredError",
    # Wallet
    "WalletNotConnectedError",
    "AddressMismatchError",
    "SignatureRejectedError",
    "UserRejectedRequest",
    # Transport
    "TransportError",
    "VerificationRejectedError",
    "ChallengeReuseError",
    # Session
    "SessionEstablishError",
    "StaleAttemptError",
    "AttemptCancelledError",
    # Ownership
    "MissingWalletLinkError",
    "PartialVerificationError",
]
