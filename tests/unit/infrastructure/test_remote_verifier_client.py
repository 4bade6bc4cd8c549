"""
Unit tests for RemoteVerifierClient.

Uses httpx.MockTransport in place of the wallet-auth function.

Usage:
    python tests/unit/infrastructure/test_remote_verifier_client.py
    laborant gardien --unit
"""

import json

import base58
import httpx

from gardien.domain.exceptions import ChallengeReuseError, TransportError
from gardien.domain.value_objects.verifier_result import Authenticated, Rejected
from gardien.infrastructure.resilience import RetryConfig
from gardien.infrastructure.verifier.remote_verifier_client import (
    RemoteVerifierClient,
)
from tests.helpers.laborant_test import LaborantTest
from tests.helpers.wallets import Keypair, verify_signature

BASE_URL = "https://project.supabase.co/functions/v1"
OTHER_ADDRESS = "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"


def success_body(address: str) -> dict:
    return {
        "success": True,
        "session": {
            "access_token": "access-1",
            "refresh_token": "refresh-1",
            "expires_in": 3600,
            "expires_at": 1_900_000_000,
            "token_type": "bearer",
        },
        "user": {"id": "user-1", "wallet_address": address},
    }


class TestRemoteVerifierClient(LaborantTest):
    """Unit tests for the wallet-auth client."""

    component_name = "gardien"
    test_category = "unit"

    def setup_test(self):
        self.keypair = Keypair()
        self.requests = []
        self.message = "Sign this message to authenticate with KOL Platform."

    def _client(self, handler) -> RemoteVerifierClient:
        def recording(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        return RemoteVerifierClient(
            BASE_URL,
            api_key="anon-key",
            retry_config=RetryConfig(
                max_attempts=2, initial_delay=0.0, max_delay=0.0, jitter=False
            ),
            transport=httpx.MockTransport(recording),
        )

    def _signature(self) -> bytes:
        return self.keypair.sign(self.message.encode("utf-8"))

    # ================================================================
    # Success
    # ================================================================

    async def test_authenticated(self):
        """Test a verified signature yields tokens bound to the wallet."""
        self.reporter.info("Testing successful verification", context="Test")

        address = self.keypair.address

        def handler(request: httpx.Request) -> httpx.Response:
            payload = json.loads(request.content)
            signature = base58.b58decode(payload["signature"])
            assert verify_signature(
                payload["wallet_address"], payload["message"].encode(), signature
            )
            return httpx.Response(200, json=success_body(address))

        client = self._client(handler)
        result = await client.verify(address, self.message, self._signature())
        await client.close()

        assert isinstance(result, Authenticated)
        assert result.wallet_address == address
        assert result.user_id == "user-1"
        assert result.tokens.access_token == "access-1"
        assert result.tokens.expires_at == 1_900_000_000

    async def test_request_shape(self):
        """Test URL, headers and base58 payload."""
        address = self.keypair.address
        client = self._client(
            lambda request: httpx.Response(200, json=success_body(address))
        )

        await client.verify(address, self.message, self._signature())
        await client.close()

        request = self.requests[0]
        assert request.method == "POST"
        assert str(request.url) == f"{BASE_URL}/wallet-auth"
        assert request.headers["apikey"] == "anon-key"
        assert request.headers["authorization"] == "Bearer anon-key"

        payload = json.loads(request.content)
        assert payload == {
            "wallet_address": address,
            "message": self.message,
            "signature": base58.b58encode(self._signature()).decode(),
        }

    # ================================================================
    # Rejections
    # ================================================================

    async def test_unauthorized_is_rejected(self):
        """Test 401 maps to Rejected with the server message."""
        client = self._client(
            lambda request: httpx.Response(401, json={"error": "Invalid signature"})
        )

        result = await client.verify(
            self.keypair.address, self.message, self._signature()
        )
        await client.close()

        assert isinstance(result, Rejected)
        assert result.error_message == "Invalid signature"
        assert result.status_code == 401

    async def test_unsuccessful_body_is_rejected(self):
        """Test success=false in a 200 body."""
        client = self._client(
            lambda request: httpx.Response(
                200, json={"success": False, "error": "Message expired"}
            )
        )

        result = await client.verify(
            self.keypair.address, self.message, self._signature()
        )
        await client.close()

        assert isinstance(result, Rejected)
        assert result.error_message == "Message expired"

    async def test_missing_tokens_is_rejected(self):
        """Test a success body without a session."""
        body = success_body(self.keypair.address)
        del body["session"]
        client = self._client(lambda request: httpx.Response(200, json=body))

        result = await client.verify(
            self.keypair.address, self.message, self._signature()
        )
        await client.close()

        assert isinstance(result, Rejected)
        assert result.error_message == "Authentication failed"

    async def test_malformed_body_is_rejected(self):
        """Test a body that does not fit the response schema."""
        client = self._client(
            lambda request: httpx.Response(200, json={"success": {"nested": 1}})
        )

        result = await client.verify(
            self.keypair.address, self.message, self._signature()
        )
        await client.close()

        assert isinstance(result, Rejected)

    async def test_other_wallet_bound_is_rejected(self):
        """Test tokens bound to a different wallet are refused."""
        self.reporter.info("Testing bound wallet mismatch", context="Test")

        client = self._client(
            lambda request: httpx.Response(200, json=success_body(OTHER_ADDRESS))
        )

        result = await client.verify(
            self.keypair.address, self.message, self._signature()
        )
        await client.close()

        assert isinstance(result, Rejected)

    # ================================================================
    # Transport failures
    # ================================================================

    async def test_server_error_is_transport(self):
        """Test 5xx maps to TransportError."""
        client = self._client(lambda request: httpx.Response(502, text="bad gateway"))

        try:
            await client.verify(self.keypair.address, self.message, self._signature())
            assert False, "Should have raised TransportError"
        except TransportError as e:
            assert e.status_code == 502
            assert e.retryable
        finally:
            await client.close()

        assert len(self.requests) == 1

    async def test_non_json_success_is_transport(self):
        """Test a 200 with a non-JSON body."""
        client = self._client(lambda request: httpx.Response(200, text="<html>"))

        try:
            await client.verify(self.keypair.address, self.message, self._signature())
            assert False, "Should have raised TransportError"
        except TransportError:
            pass
        finally:
            await client.close()

    async def test_connect_error_retried_then_transport(self):
        """Test connection failures are retried, then surface as TransportError."""
        self.reporter.info("Testing connect retry", context="Test")

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = self._client(handler)

        try:
            await client.verify(self.keypair.address, self.message, self._signature())
            assert False, "Should have raised TransportError"
        except TransportError as e:
            assert e.code == "TRANSPORT_ERROR"
        finally:
            await client.close()

        assert len(self.requests) == 2

    async def test_read_timeout_not_retried(self):
        """Test a timeout after sending is not retried."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        client = self._client(handler)

        try:
            await client.verify(self.keypair.address, self.message, self._signature())
            assert False, "Should have raised TransportError"
        except TransportError as e:
            assert "timed out" in e.message
        finally:
            await client.close()

        assert len(self.requests) == 1

    # ================================================================
    # Single use
    # ================================================================

    async def test_message_submitted_once(self):
        """Test the same signed message cannot be submitted twice."""
        address = self.keypair.address
        client = self._client(
            lambda request: httpx.Response(401, json={"error": "Invalid signature"})
        )

        await client.verify(address, self.message, self._signature())

        try:
            await client.verify(address, self.message, self._signature())
            assert False, "Should have raised ChallengeReuseError"
        except ChallengeReuseError as e:
            assert e.code == "CHALLENGE_REUSE"
        finally:
            await client.close()

        assert len(self.requests) == 1

    async def test_submitted_memory_is_bounded(self):
        """Test only the most recent submitted messages are remembered."""
        address = self.keypair.address
        client = RemoteVerifierClient(
            BASE_URL,
            transport=httpx.MockTransport(
                lambda request: httpx.Response(401, json={"error": "Invalid"})
            ),
            submitted_memory=2,
        )
        messages = [f"{self.message} Nonce: {n}" for n in range(3)]

        try:
            for message in messages:
                await client.verify(address, message, b"\x01" * 64)

            try:
                await client.verify(address, messages[2], b"\x01" * 64)
                assert False, "Should have raised ChallengeReuseError"
            except ChallengeReuseError:
                pass

            result = await client.verify(address, messages[0], b"\x01" * 64)
            assert isinstance(result, Rejected)
        finally:
            await client.close()


if __name__ == "__main__":
    TestRemoteVerifierClient.run_as_main()
