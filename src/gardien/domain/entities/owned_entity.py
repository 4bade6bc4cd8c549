"""
OwnedEntity - third-party profile whose wallet ownership can be attested.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class OwnedEntity:
    """Profile record with an optional linked wallet (a KOL profile)."""

    id: str
    wallet_address: Optional[str] = None
    is_wallet_verified: bool = False

    def __post_init__(self):
        if not self.id:
            raise ValueError("Entity id is required")
