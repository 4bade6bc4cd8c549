"""
Ownership attestation registry interface.
"""

from abc import ABC, abstractmethod

from gardien.domain.entities.verification_record import VerificationRecord
from gardien.domain.value_objects.verifier_result import VerifierResult


class IOwnershipRegistry(ABC):
    """Abstract store for wallet ownership attestations."""

    @abstractmethod
    async def insert_verification(self, record: VerificationRecord) -> VerifierResult:
        """
        Write a verification record.

        Returns:
            Attested or Rejected

        Raises:
            TransportError: Network failure, timeout or server error
        """

    @abstractmethod
    async def mark_entity_verified(self, entity_id: str) -> None:
        """
        Set the verified flag on the target entity.

        Raises:
            TransportError: Network failure, timeout or server error
            VerificationRejectedError: If the update was refused
        """

    @abstractmethod
    async def close(self) -> None:
        """Release network resources."""
