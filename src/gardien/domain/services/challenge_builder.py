"""
Challenge builder - renders the messages a wallet is asked to sign.

Formats:

    Sign this message to authenticate with {app_name}.

    Wallet: {address}
    Timestamp: {timestamp_ms}
    Nonce: {nonce}

    Verify wallet ownership for {subject}
    {id_label}: {entity_id}
    Wallet: {address}
    Timestamp: {timestamp_ms}
"""

import secrets
import time
from collections import deque
from typing import Callable, Optional

from gardien.domain.exceptions import AddressMismatchError, ValidationError
from gardien.domain.value_objects.challenge import Challenge, ChallengePurpose
from gardien.domain.value_objects.wallet_address import WalletAddress

NONCE_BYTES = 16
ISSUED_NONCE_MEMORY = 1024


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


def _random_nonce() -> str:
    return secrets.token_hex(NONCE_BYTES)


class ChallengeBuilder:
    """
    Build fresh, human-readable challenges.

    Business rules:
    - Address must be a valid wallet address
    - AUTH challenges carry a millisecond timestamp and a 128-bit nonce
    - OWNERSHIP challenges carry the entity id and require the claimed
      entity wallet to equal the signing address
    - A builder never hands out the same AUTH nonce twice
    """

    def __init__(
        self,
        app_name: str = "KOL Platform",
        ownership_subject: str = "KOL profile",
        ownership_id_label: str = "KOL ID",
        clock: Callable[[], int] = _now_ms,
        nonce_factory: Callable[[], str] = _random_nonce,
    ):
        """
        Initialize builder.

        Args:
            app_name: Application name shown in AUTH challenges
            ownership_subject: What an OWNERSHIP challenge verifies
            ownership_id_label: Label in front of the entity id
            clock: Millisecond clock
            nonce_factory: Source of random nonces
        """
        self.app_name = app_name
        self.ownership_subject = ownership_subject
        self.ownership_id_label = ownership_id_label
        self._clock = clock
        self._nonce_factory = nonce_factory
        self._issued: deque = deque(maxlen=ISSUED_NONCE_MEMORY)

    def build(
        self,
        purpose: ChallengePurpose,
        address: str,
        context: Optional[dict] = None,
    ) -> Challenge:
        """
        Build a challenge for the given purpose.

        Args:
            purpose: AUTH or OWNERSHIP
            address: Signing wallet address
            context: For OWNERSHIP, {"entity_id": ..., "claimed_address": ...}

        Returns:
            Challenge

        Raises:
            ValidationError: Invalid address or missing context
            AddressMismatchError: Claimed entity wallet differs from address
        """
        if purpose == ChallengePurpose.AUTH:
            return self.build_auth(address)

        context = context or {}
        if "entity_id" not in context:
            raise ValidationError(field="entity_id", reason="required for ownership")
        return self.build_ownership(
            address,
            entity_id=context["entity_id"],
            claimed_address=context.get("claimed_address"),
        )

    def build_auth(self, address: str) -> Challenge:
        """Build a sign-in challenge."""
        self._validate_address(address)

        timestamp = self._clock()
        nonce = self._fresh_nonce()
        text = (
            f"Sign this message to authenticate with {self.app_name}.\n\n"
            f"Wallet: {address}\n"
            f"Timestamp: {timestamp}\n"
            f"Nonce: {nonce}"
        )
        return Challenge(
            address=address,
            purpose=ChallengePurpose.AUTH,
            timestamp_ms=timestamp,
            text=text,
            nonce=nonce,
        )

    def build_ownership(
        self,
        address: str,
        entity_id: str,
        claimed_address: Optional[str],
    ) -> Challenge:
        """Build an ownership attestation challenge."""
        self._validate_address(address)
        if not entity_id:
            raise ValidationError(field="entity_id", reason="cannot be empty")
        if claimed_address != address:
            raise AddressMismatchError(expected=claimed_address or "", actual=address)

        timestamp = self._clock()
        text = (
            f"Verify wallet ownership for {self.ownership_subject}\n"
            f"{self.ownership_id_label}: {entity_id}\n"
            f"Wallet: {address}\n"
            f"Timestamp: {timestamp}"
        )
        return Challenge(
            address=address,
            purpose=ChallengePurpose.OWNERSHIP,
            timestamp_ms=timestamp,
            text=text,
            context_id=entity_id,
        )

    def _fresh_nonce(self) -> str:
        nonce = self._nonce_factory()
        while nonce in self._issued:
            nonce = self._nonce_factory()
        self._issued.append(nonce)
        return nonce

    @staticmethod
    def _validate_address(address: str) -> None:
        try:
            WalletAddress(address)
        except ValueError as e:
            raise ValidationError(field="wallet_address", reason=str(e))
