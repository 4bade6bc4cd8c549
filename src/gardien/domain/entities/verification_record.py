"""
VerificationRecord entity - signed proof that a wallet owns an entity.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class VerificationRecord:
    """
    Ownership attestation.

    Append-only: re-verifying the same entity writes a new record with the
    same meaning, nothing is deduplicated here.
    """

    entity_id: str
    wallet_address: str
    signature: str
    message: str
    verifier_wallet_address: str
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_row(self) -> dict:
        """Row written to the verifications table."""
        return {
            "kol_id": self.entity_id,
            "wallet_address": self.wallet_address,
            "signature": self.signature,
            "message": self.message,
            "verified_by_wallet": self.verifier_wallet_address,
        }
