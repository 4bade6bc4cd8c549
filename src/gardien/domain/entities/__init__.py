"""
Domain entities.
"""

from gardien.domain.entities.owned_entity import OwnedEntity
from gardien.domain.entities.session import Session, SessionTokens
from gardien.domain.entities.verification_record import VerificationRecord

__all__ = [
    "OwnedEntity",
    "Session",
    "SessionTokens",
    "VerificationRecord",
]
