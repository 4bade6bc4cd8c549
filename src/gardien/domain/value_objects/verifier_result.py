"""
Typed results returned by remote verifier clients.
"""

from dataclasses import dataclass
from typing import Optional, Union

from gardien.domain.entities.session import SessionTokens
from gardien.domain.entities.verification_record import VerificationRecord


@dataclass(frozen=True)
class Authenticated:
    """Verifier accepted the signature and minted session tokens."""

    tokens: SessionTokens
    wallet_address: str
    user_id: Optional[str] = None


@dataclass(frozen=True)
class Attested:
    """Ownership attestation was stored."""

    record: VerificationRecord


@dataclass(frozen=True)
class Rejected:
    """Verifier answered, but refused the attempt."""

    error_message: str
    status_code: Optional[int] = None


VerifierResult = Union[Authenticated, Attested, Rejected]
