"""
Verify Wallet Ownership use case.
"""

import base64
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Set, Union

from gardien.domain.entities.owned_entity import OwnedEntity
from gardien.domain.entities.verification_record import VerificationRecord
from gardien.domain.exceptions import (
    AddressMismatchError,
    ConcurrentAttemptIgnoredError,
    GardienException,
    MissingWalletLinkError,
    PartialVerificationError,
    TransportError,
    VerificationRejectedError,
    WalletNotConnectedError,
)
from gardien.domain.services.challenge_builder import ChallengeBuilder
from gardien.domain.services.i_ownership_registry import IOwnershipRegistry
from gardien.domain.services.i_wallet_provider import IWalletProvider
from gardien.domain.value_objects.verifier_result import Attested, Rejected
from gardien.infrastructure.monitoring.metrics import ownership_verifications_total
from gardien.infrastructure.wallet.signing_client import SigningClient

logger = logging.getLogger(__name__)

VerifiedHook = Callable[[str], Union[None, Awaitable[Any]]]


@dataclass(frozen=True)
class OwnershipVerificationResult:
    """Outcome of a completed ownership verification."""

    record: VerificationRecord
    entity_marked: bool = True


class VerifyWalletOwnership:
    """
    Prove that the connected wallet owns a profile's linked wallet.

    Business rules:
    - Wallet must be connected with a signing capability
    - Entity must have a linked wallet
    - Connected wallet must equal the linked wallet, checked before any
      signing or network call
    - The attestation is written before the entity flag; a failed flag
      update leaves the attestation in place
    - One verification per entity at a time
    """

    def __init__(
        self,
        wallet: IWalletProvider,
        challenge_builder: ChallengeBuilder,
        signing_client: SigningClient,
        registry: IOwnershipRegistry,
        on_verified: Optional[VerifiedHook] = None,
    ):
        """
        Initialize use case with dependencies.

        Args:
            wallet: Connected wallet
            challenge_builder: Builds ownership challenges
            signing_client: Obtains wallet signatures
            registry: Attestation store
            on_verified: Called with the entity id after success
        """
        self.wallet = wallet
        self.challenge_builder = challenge_builder
        self.signing_client = signing_client
        self.registry = registry
        self.on_verified = on_verified
        self._in_flight: Set[str] = set()

    def is_verifying(self, entity_id: str) -> bool:
        return entity_id in self._in_flight

    async def execute(self, entity: OwnedEntity) -> OwnershipVerificationResult:
        """
        Execute ownership verification.

        Args:
            entity: Target profile

        Returns:
            OwnershipVerificationResult with the stored record

        Raises:
            ConcurrentAttemptIgnoredError: Entity already being verified
            WalletNotConnectedError: No wallet connected
            MissingWalletLinkError: Entity has no linked wallet
            AddressMismatchError: Connected wallet is not the linked wallet
            SignatureRejectedError: User refused to sign
            VerificationRejectedError: Record store refused the attestation
            TransportError: Network failure
            PartialVerificationError: Attestation stored, flag not updated
        """
        if entity.id in self._in_flight:
            raise ConcurrentAttemptIgnoredError("verify_ownership")

        self._in_flight.add(entity.id)
        try:
            result = await self._verify(entity)
        except GardienException as e:
            ownership_verifications_total.labels(outcome=e.code.lower()).inc()
            logger.warning(
                f"Ownership verification failed: {e.message}",
                extra={"entity_id": entity.id, "code": e.code},
            )
            raise
        finally:
            self._in_flight.discard(entity.id)

        ownership_verifications_total.labels(outcome="verified").inc()
        logger.info(
            "Wallet ownership verified",
            extra={"entity_id": entity.id, "wallet_address": entity.wallet_address},
        )
        await self._notify_verified(entity.id)
        return result

    async def _verify(self, entity: OwnedEntity) -> OwnershipVerificationResult:
        # 1. Wallet connected
        address = self.wallet.signal.effective_address
        if address is None or not self.wallet.can_sign:
            raise WalletNotConnectedError()

        # 2. Entity has a wallet to prove
        if not entity.wallet_address:
            raise MissingWalletLinkError(entity.id)

        # 3. Connected wallet is that wallet
        if address != entity.wallet_address:
            raise AddressMismatchError(expected=entity.wallet_address, actual=address)

        # 4. Sign a fresh ownership challenge
        challenge = self.challenge_builder.build_ownership(
            address, entity_id=entity.id, claimed_address=entity.wallet_address
        )
        signature = await self.signing_client.sign(challenge)

        current = self.wallet.signal.effective_address
        if current != address:
            raise AddressMismatchError(expected=entity.wallet_address, actual=current)

        record = VerificationRecord(
            entity_id=entity.id,
            wallet_address=entity.wallet_address,
            signature=base64.b64encode(signature).decode("ascii"),
            message=challenge.text,
            verifier_wallet_address=address,
        )

        # 5. Append the attestation
        result = await self.registry.insert_verification(record)
        if isinstance(result, Rejected):
            raise VerificationRejectedError(result.error_message, result.status_code)
        if not isinstance(result, Attested):
            raise TransportError(
                f"Unexpected registry result: {type(result).__name__}"
            )

        # 6. Flag the entity; no rollback of the attestation
        try:
            await self.registry.mark_entity_verified(entity.id)
        except GardienException as e:
            raise PartialVerificationError(result.record, e.message) from e

        entity.is_wallet_verified = True
        return OwnershipVerificationResult(record=result.record, entity_marked=True)

    async def _notify_verified(self, entity_id: str) -> None:
        if self.on_verified is None:
            return
        try:
            outcome = self.on_verified(entity_id)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception:
            logger.exception(
                "Verified hook failed", extra={"entity_id": entity_id}
            )
