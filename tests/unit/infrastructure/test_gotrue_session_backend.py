"""
Unit tests for GoTrueSessionBackend.

Usage:
    python tests/unit/infrastructure/test_gotrue_session_backend.py
    laborant gardien --unit
"""

import httpx

from gardien.domain.exceptions import SessionEstablishError, TransportError
from gardien.domain.value_objects.session_change import SessionChangeKind
from gardien.infrastructure.session.gotrue_session_backend import (
    GoTrueSessionBackend,
)
from tests.helpers.fakes import make_tokens
from tests.helpers.laborant_test import LaborantTest

AUTH_URL = "https://project.supabase.co/auth/v1"
ADDRESS = "kshy5yns5FGGXcFVfjT2fTzVsQLFnbZzL9zuh1ZKR2y"
OTHER_ADDRESS = "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"


class TestGoTrueSessionBackend(LaborantTest):
    """Unit tests for the GoTrue backend."""

    component_name = "gardien"
    test_category = "unit"

    def setup_test(self):
        self.requests = []
        self.user = {"id": "user-1", "user_metadata": {"wallet_address": ADDRESS}}
        self.logout_status = 204

    def _handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path.endswith("/user"):
            if request.headers["authorization"] != "Bearer access-1":
                return httpx.Response(401, json={"msg": "invalid JWT"})
            return httpx.Response(200, json=self.user)
        if request.url.path.endswith("/logout"):
            return httpx.Response(self.logout_status)
        return httpx.Response(404)

    def _backend(self) -> GoTrueSessionBackend:
        return GoTrueSessionBackend(
            AUTH_URL,
            api_key="anon-key",
            transport=httpx.MockTransport(self._handler),
        )

    async def test_set_session_validates_tokens(self):
        """Test tokens accepted by the auth server are installed."""
        self.reporter.info("Testing set_session", context="Test")

        backend = self._backend()
        events = []
        backend.on_auth_state_change(events.append)

        session = await backend.set_session(make_tokens("1"), ADDRESS)
        await backend.close()

        assert session.bound_wallet_address == ADDRESS
        assert session.user_id == "user-1"
        assert await backend.get_session() == session
        assert [e.kind for e in events] == [SessionChangeKind.SIGNED_IN]
        assert self.requests[0].headers["apikey"] == "anon-key"

    async def test_refused_tokens(self):
        """Test tokens refused by the auth server."""
        backend = self._backend()

        try:
            await backend.set_session(make_tokens("2"), ADDRESS)
            assert False, "Should have raised SessionEstablishError"
        except SessionEstablishError as e:
            assert e.code == "SESSION_ESTABLISH_FAILED"
        finally:
            await backend.close()

        assert await backend.get_session() is None

    async def test_token_for_other_wallet(self):
        """Test a token whose user belongs to another wallet."""
        self.user["user_metadata"]["wallet_address"] = OTHER_ADDRESS
        backend = self._backend()

        try:
            await backend.set_session(make_tokens("1"), ADDRESS)
            assert False, "Should have raised SessionEstablishError"
        except SessionEstablishError:
            pass
        finally:
            await backend.close()

    async def test_sign_out_clears_then_revokes(self):
        """Test sign-out drops the session and calls /logout."""
        backend = self._backend()
        events = []
        backend.on_auth_state_change(events.append)
        await backend.set_session(make_tokens("1"), ADDRESS)

        await backend.sign_out()
        await backend.close()

        assert await backend.get_session() is None
        assert events[-1].kind == SessionChangeKind.SIGNED_OUT
        logout = self.requests[-1]
        assert logout.method == "POST"
        assert logout.headers["authorization"] == "Bearer access-1"

    async def test_sign_out_without_session(self):
        """Test sign-out with nothing installed makes no request."""
        backend = self._backend()

        await backend.sign_out()

        assert self.requests == []

    async def test_sign_out_server_error(self):
        """Test revocation failure still clears the local session."""
        self.logout_status = 500
        backend = self._backend()
        await backend.set_session(make_tokens("1"), ADDRESS)

        try:
            await backend.sign_out()
            assert False, "Should have raised TransportError"
        except TransportError as e:
            assert e.source == "auth"
        finally:
            await backend.close()

        assert await backend.get_session() is None


if __name__ == "__main__":
    TestGoTrueSessionBackend.run_as_main()
