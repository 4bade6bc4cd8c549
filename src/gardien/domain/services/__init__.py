"""
Domain service interfaces and pure domain services.
"""

from gardien.domain.services.challenge_builder import ChallengeBuilder
from gardien.domain.services.i_auth_verifier import IAuthVerifier
from gardien.domain.services.i_ownership_registry import IOwnershipRegistry
from gardien.domain.services.i_session_backend import ISessionBackend
from gardien.domain.services.i_wallet_provider import IWalletProvider

__all__ = [
    "ChallengeBuilder",
    "IAuthVerifier",
    "IOwnershipRegistry",
    "ISessionBackend",
    "IWalletProvider",
]
