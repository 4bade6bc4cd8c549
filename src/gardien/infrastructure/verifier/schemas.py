"""
Response schemas for the remote verifier and record store.
"""

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict


class SessionPayload(BaseModel):
    """Tokens block of the wallet-auth response."""

    model_config = ConfigDict(extra="ignore")

    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    expires_at: Optional[int] = None
    token_type: Optional[str] = None


class UserPayload(BaseModel):
    """User block of the wallet-auth response."""

    model_config = ConfigDict(extra="ignore")

    id: Optional[Union[str, int]] = None
    wallet_address: Optional[str] = None


class WalletAuthResponse(BaseModel):
    """Body returned by the wallet-auth function."""

    model_config = ConfigDict(extra="ignore")

    success: bool = False
    session: Optional[SessionPayload] = None
    user: Optional[UserPayload] = None
    error: Optional[str] = None


class VerificationRow(BaseModel):
    """Row of the verifications table as returned with return=representation."""

    model_config = ConfigDict(extra="ignore")

    id: Optional[Union[str, int]] = None
    kol_id: Union[str, int]
    wallet_address: str
    signature: str
    message: str
    verified_by_wallet: str
    created_at: Optional[datetime] = None
