"""
Wallet provider interface.
"""

from abc import ABC, abstractmethod
from typing import Callable

from gardien.domain.value_objects.wallet_signal import WalletConnectionSignal

SignalListener = Callable[[WalletConnectionSignal], None]


class IWalletProvider(ABC):
    """
    Abstract interface for the connected wallet.

    Exposes the connection signal and the message signing capability.
    Key storage and the signing itself live in the wallet.
    """

    @property
    @abstractmethod
    def signal(self) -> WalletConnectionSignal:
        """Current connection signal."""

    @property
    @abstractmethod
    def can_sign(self) -> bool:
        """True when a signing capability is currently available."""

    @abstractmethod
    def subscribe(self, listener: SignalListener) -> Callable[[], None]:
        """
        Subscribe to signal changes.

        Args:
            listener: Called synchronously with each new signal

        Returns:
            Callable that removes the subscription
        """

    @abstractmethod
    async def sign_message(self, message: bytes) -> bytes:
        """
        Ask the wallet to sign a message.

        May wait on the user indefinitely.

        Raises:
            UserRejectedRequest: If the user refuses
        """

    @abstractmethod
    async def disconnect(self) -> None:
        """Ask the wallet to disconnect."""
