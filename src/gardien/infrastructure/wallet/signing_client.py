"""
Signing client - obtains a wallet signature over a challenge.
"""

import logging

from gardien.domain.exceptions import (
    GardienException,
    SignatureRejectedError,
    TransportError,
    UserRejectedRequest,
    WalletNotConnectedError,
)
from gardien.domain.services.i_wallet_provider import IWalletProvider
from gardien.domain.value_objects.challenge import Challenge

logger = logging.getLogger(__name__)


def _is_user_rejection(error: Exception) -> bool:
    return isinstance(error, UserRejectedRequest) or "user rejected" in str(
        error
    ).lower()


class SigningClient:
    """
    Signs challenges through the connected wallet.

    The wait is user-paced, so there is no timeout. Cancelling the awaiting
    task cancels the wait; CancelledError is never translated.
    """

    def __init__(self, wallet: IWalletProvider):
        self.wallet = wallet

    async def sign(self, challenge: Challenge) -> bytes:
        """
        Ask the wallet to sign a challenge.

        Args:
            challenge: Challenge to sign

        Returns:
            Raw signature bytes

        Raises:
            WalletNotConnectedError: No signing capability or disconnected
            SignatureRejectedError: User refused to sign
            TransportError: Any other wallet failure (source "wallet")
        """
        if not self.wallet.can_sign or not self.wallet.signal.connected:
            raise WalletNotConnectedError()

        logger.info(
            "Requesting signature",
            extra={
                "purpose": challenge.purpose.value,
                "wallet_address": challenge.address,
            },
        )

        try:
            signature = await self.wallet.sign_message(challenge.to_bytes())
        except GardienException:
            raise
        except Exception as e:
            if _is_user_rejection(e):
                logger.info("Signature request rejected by user")
                raise SignatureRejectedError() from e
            logger.warning(f"Wallet signing failed: {type(e).__name__}: {e}")
            raise TransportError(
                f"Failed to sign message: {e}", source="wallet"
            ) from e

        if not signature:
            raise TransportError("Wallet returned an empty signature", source="wallet")

        return bytes(signature)
