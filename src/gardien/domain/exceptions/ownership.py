"""
Ownership verification exceptions.
"""

from gardien.domain.entities.verification_record import VerificationRecord
from gardien.domain.exceptions.base import GardienException


class MissingWalletLinkError(GardienException):
    """Raised when the target entity has no wallet address linked."""

    def __init__(self, entity_id: str):
        super().__init__(
            f"Entity {entity_id} has no wallet address linked",
            code="MISSING_WALLET_LINK",
        )
        self.entity_id = entity_id


class PartialVerificationError(GardienException):
    """
    Raised when the attestation was written but the entity flag was not.

    The record stays; it is sufficient evidence of ownership on its own.
    """

    def __init__(self, record: VerificationRecord, reason: str):
        super().__init__(
            f"Verification recorded for {record.entity_id} but entity "
            f"update failed: {reason}",
            code="PARTIAL_VERIFICATION",
        )
        self.record = record
        self.reason = reason
