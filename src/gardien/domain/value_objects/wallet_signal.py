"""
WalletConnectionSignal value object.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class WalletConnectionSignal:
    """
    Snapshot of the externally reported wallet connection.

    The address may drop to None for a moment while a wallet adapter
    refreshes, without the user having disconnected.
    """

    connected: bool = False
    address: Optional[str] = None

    @classmethod
    def disconnected(cls) -> "WalletConnectionSignal":
        return cls(connected=False, address=None)

    @property
    def effective_address(self) -> Optional[str]:
        """Address if connected, None otherwise."""
        return self.address if self.connected else None
