"""
Wallet adapters.
"""

from gardien.infrastructure.wallet.signing_client import SigningClient
from gardien.infrastructure.wallet.wallet_connection import WalletConnection

__all__ = ["SigningClient", "WalletConnection"]
