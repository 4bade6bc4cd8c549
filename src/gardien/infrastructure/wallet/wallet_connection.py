"""
Wallet connection holder.

The UI (or a headless client) pushes the adapter's connection state in
with update(); everything else reads the signal and signs through here.
"""

import logging
from typing import Awaitable, Callable, List, Optional

from gardien.domain.exceptions import WalletNotConnectedError
from gardien.domain.services.i_wallet_provider import IWalletProvider, SignalListener
from gardien.domain.value_objects.wallet_signal import WalletConnectionSignal

logger = logging.getLogger(__name__)

MessageSigner = Callable[[bytes], Awaitable[bytes]]
Disconnector = Callable[[], Awaitable[None]]


class WalletConnection(IWalletProvider):
    """
    Concrete wallet provider fed by an external adapter.

    The signing capability is dropped whenever the adapter reports a
    disconnect. A connected signal with no address (adapter flicker) keeps
    the capability.
    """

    def __init__(
        self,
        signer: Optional[MessageSigner] = None,
        disconnector: Optional[Disconnector] = None,
        signal: Optional[WalletConnectionSignal] = None,
    ):
        self._signer = signer
        self._disconnector = disconnector
        self._signal = signal or WalletConnectionSignal.disconnected()
        self._listeners: List[SignalListener] = []

    @property
    def signal(self) -> WalletConnectionSignal:
        return self._signal

    @property
    def can_sign(self) -> bool:
        return self._signer is not None and self._signal.connected

    def update(
        self,
        connected: bool,
        address: Optional[str] = None,
        signer: Optional[MessageSigner] = None,
        disconnector: Optional[Disconnector] = None,
    ) -> WalletConnectionSignal:
        """
        Apply a new connection state reported by the adapter.

        Args:
            connected: Adapter connection flag
            address: Reported public key, may be None while connected
            signer: New signing capability (keeps the current one if None)
            disconnector: New disconnect capability (keeps current if None)

        Returns:
            The signal now in effect
        """
        if signer is not None:
            self._signer = signer
        if disconnector is not None:
            self._disconnector = disconnector
        if not connected:
            self._signer = None
            address = None

        new_signal = WalletConnectionSignal(connected=connected, address=address)
        if new_signal == self._signal:
            return self._signal

        self._signal = new_signal
        logger.debug(
            "Wallet signal changed",
            extra={"connected": connected, "wallet_address": address},
        )
        for listener in list(self._listeners):
            try:
                listener(new_signal)
            except Exception:
                logger.exception("Wallet signal listener failed")
        return new_signal

    def subscribe(self, listener: SignalListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def sign_message(self, message: bytes) -> bytes:
        signer = self._signer
        if signer is None:
            raise WalletNotConnectedError("No signing capability attached")
        return await signer(message)

    async def disconnect(self) -> None:
        """Ask the adapter to disconnect, then report the disconnect."""
        if self._disconnector is not None:
            await self._disconnector()
        self.update(connected=False)
