"""
Session entity - authenticated identity bound to a wallet.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional


@dataclass(frozen=True)
class SessionTokens:
    """Tokens minted by the remote verifier."""

    access_token: str
    refresh_token: str
    expires_in: Optional[int] = None
    expires_at: Optional[int] = None
    token_type: str = "bearer"

    def __post_init__(self):
        if not self.access_token or not self.refresh_token:
            raise ValueError("Access and refresh tokens are required")

    def __repr__(self) -> str:
        return f"SessionTokens(token_type={self.token_type!r}, expires_at={self.expires_at})"


@dataclass(frozen=True)
class Session:
    """
    Session entity.

    The bound wallet comes from the verifier response, never from what the
    client claimed when it asked to sign in.
    """

    access_token: str
    refresh_token: str
    bound_wallet_address: str
    issued_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: Optional[str] = None
    expires_at: Optional[int] = None
    token_type: str = "bearer"

    def __post_init__(self):
        """Validate session data after initialization."""
        if not self.bound_wallet_address:
            raise ValueError("Bound wallet address is required")
        if not self.access_token or not self.refresh_token:
            raise ValueError("Access and refresh tokens are required")

    @classmethod
    def from_tokens(
        cls,
        tokens: SessionTokens,
        bound_wallet_address: str,
        user_id: Optional[str] = None,
    ) -> "Session":
        return cls(
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            bound_wallet_address=bound_wallet_address,
            user_id=user_id,
            expires_at=tokens.expires_at,
            token_type=tokens.token_type,
        )

    def is_bound_to(self, address: Optional[str]) -> bool:
        return address is not None and address == self.bound_wallet_address

    def to_dict(self) -> dict:
        """Convert entity to dictionary representation (tokens excluded)."""
        return {
            "bound_wallet_address": self.bound_wallet_address,
            "user_id": self.user_id,
            "issued_at": self.issued_at.isoformat(),
            "expires_at": self.expires_at,
            "token_type": self.token_type,
        }

    def __repr__(self) -> str:
        return (
            f"Session(bound_wallet_address={self.bound_wallet_address!r}, "
            f"user_id={self.user_id!r}, issued_at={self.issued_at.isoformat()})"
        )
