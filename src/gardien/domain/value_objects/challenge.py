"""
Challenge value object - message presented to the wallet for signing.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ChallengePurpose(str, Enum):
    """What a signed challenge proves."""

    AUTH = "auth"
    OWNERSHIP = "ownership"


@dataclass(frozen=True)
class Challenge:
    """
    Freshly built message to be signed.

    Attributes:
        address: Wallet address the challenge is issued for
        purpose: AUTH (sign-in) or OWNERSHIP (attestation)
        timestamp_ms: Creation time in milliseconds since epoch
        text: Rendered human-readable message
        nonce: Random nonce (AUTH only)
        context_id: Target entity identifier (OWNERSHIP only)
    """

    address: str
    purpose: ChallengePurpose
    timestamp_ms: int
    text: str
    nonce: Optional[str] = None
    context_id: Optional[str] = None

    def to_bytes(self) -> bytes:
        """UTF-8 bytes handed to the wallet's sign_message."""
        return self.text.encode("utf-8")
