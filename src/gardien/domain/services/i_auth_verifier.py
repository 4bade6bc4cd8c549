"""
Remote authentication verifier interface.
"""

from abc import ABC, abstractmethod

from gardien.domain.value_objects.verifier_result import VerifierResult


class IAuthVerifier(ABC):
    """
    Abstract client for the remote service that checks a wallet signature
    and mints session tokens.
    """

    @abstractmethod
    async def verify(
        self,
        wallet_address: str,
        message: str,
        signature: bytes,
    ) -> VerifierResult:
        """
        Submit a signed challenge.

        Args:
            wallet_address: Wallet address claiming ownership
            message: Challenge text that was signed
            signature: Raw signature bytes

        Returns:
            Authenticated or Rejected

        Raises:
            TransportError: Network failure, timeout or server error
            ChallengeReuseError: If the message was already submitted
        """

    @abstractmethod
    async def close(self) -> None:
        """Release network resources."""
