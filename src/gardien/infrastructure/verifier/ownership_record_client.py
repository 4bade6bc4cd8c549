"""
Ownership record client - writes attestations to a PostgREST record store.
"""

import logging
from typing import Callable, Dict, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from gardien.domain.entities.verification_record import VerificationRecord
from gardien.domain.exceptions import TransportError, VerificationRejectedError
from gardien.domain.services.i_ownership_registry import IOwnershipRegistry
from gardien.domain.value_objects.verifier_result import (
    Attested,
    Rejected,
    VerifierResult,
)
from gardien.infrastructure.resilience import RetryConfig
from gardien.infrastructure.verifier.http_base import BaseHttpClient, error_message
from gardien.infrastructure.verifier.schemas import VerificationRow

logger = logging.getLogger(__name__)

AccessTokenProvider = Callable[[], Optional[str]]


class OwnershipRecordClient(BaseHttpClient, IOwnershipRegistry):
    """
    PostgREST client for ownership attestations.

    Requests run as the signed-in user when an access token is available,
    otherwise with the public API key.
    """

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        access_token_provider: Optional[AccessTokenProvider] = None,
        verifications_table: str = "wallet_verifications",
        entities_table: str = "kols",
        verified_column: str = "is_wallet_verified",
        timeout: float = 15.0,
        connect_timeout: float = 5.0,
        retry_config: Optional[RetryConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(
            base_url,
            api_key=api_key,
            timeout=timeout,
            connect_timeout=connect_timeout,
            retry_config=retry_config,
            transport=transport,
        )
        self.access_token_provider = access_token_provider
        self.verifications_table = verifications_table
        self.entities_table = entities_table
        self.verified_column = verified_column

    def _request_headers(self, prefer: str) -> Dict[str, str]:
        headers = {"Prefer": prefer}
        token = self.access_token_provider() if self.access_token_provider else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def insert_verification(self, record: VerificationRecord) -> VerifierResult:
        """
        Append a verification record.

        Args:
            record: Record with a base64 signature

        Returns:
            Attested with the stored row, or Rejected

        Raises:
            TransportError: Network failure, timeout or server error
        """
        response = await self.send(
            "POST",
            f"/{self.verifications_table}",
            operation="insert_verification",
            json=record.to_row(),
            headers=self._request_headers("return=representation"),
        )

        if not response.is_success:
            reason = error_message(response, "Failed to store verification")
            logger.info(
                f"Verification insert rejected: HTTP {response.status_code}: {reason}",
                extra={"entity_id": record.entity_id},
            )
            return Rejected(error_message=reason, status_code=response.status_code)

        return Attested(record=self._stored_record(response, record))

    async def mark_entity_verified(self, entity_id: str) -> None:
        """
        Flag the entity as wallet-verified.

        Raises:
            VerificationRejectedError: Update refused by the record store
            TransportError: Network failure, timeout or server error
        """
        response = await self.send(
            "PATCH",
            f"/{self.entities_table}",
            operation="mark_entity_verified",
            params={"id": f"eq.{entity_id}"},
            json={self.verified_column: True},
            headers=self._request_headers("return=minimal"),
        )

        if not response.is_success:
            raise VerificationRejectedError(
                error_message(response, "Failed to update verification status"),
                status_code=response.status_code,
            )

    @staticmethod
    def _stored_record(
        response: httpx.Response, submitted: VerificationRecord
    ) -> VerificationRecord:
        """Merge server-assigned fields into the submitted record."""
        try:
            data = response.json()
        except ValueError:
            # 201 with return=minimal semantics (empty body)
            return submitted

        if isinstance(data, list):
            data = data[0] if data else None
        if not isinstance(data, dict):
            return submitted

        try:
            row = VerificationRow.model_validate(data)
        except PydanticValidationError as e:
            raise TransportError(
                f"Record store returned an unexpected row: {e}",
                status_code=response.status_code,
            ) from e

        return VerificationRecord(
            entity_id=str(row.kol_id),
            wallet_address=row.wallet_address,
            signature=row.signature,
            message=row.message,
            verifier_wallet_address=row.verified_by_wallet,
            id=str(row.id) if row.id is not None else None,
            created_at=row.created_at,
        )
