"""
Unit tests for Session and SessionTokens.

Usage:
    python tests/unit/domain/test_session.py
    laborant gardien --unit
"""

from gardien.domain.entities.session import Session, SessionTokens
from tests.helpers.laborant_test import LaborantTest

ADDRESS = "kshy5yns5FGGXcFVfjT2fTzVsQLFnbZzL9zuh1ZKR2y"


class TestSession(LaborantTest):
    """Unit tests for Session entity."""

    component_name = "gardien"
    test_category = "unit"

    def _tokens(self) -> SessionTokens:
        return SessionTokens(
            access_token="access-1",
            refresh_token="refresh-1",
            expires_in=3600,
            expires_at=1_900_000_000,
        )

    def test_from_tokens_carries_verifier_fields(self):
        """Test session built from verifier tokens."""
        self.reporter.info("Testing Session.from_tokens", context="Test")

        session = Session.from_tokens(self._tokens(), ADDRESS, user_id="user-1")

        assert session.access_token == "access-1"
        assert session.refresh_token == "refresh-1"
        assert session.bound_wallet_address == ADDRESS
        assert session.user_id == "user-1"
        assert session.expires_at == 1_900_000_000
        assert session.token_type == "bearer"
        assert session.issued_at.tzinfo is not None

    def test_bound_wallet_required(self):
        """Test session without bound wallet is rejected."""
        try:
            Session(access_token="a", refresh_token="r", bound_wallet_address="")
            assert False, "Should have raised ValueError"
        except ValueError as e:
            assert "wallet" in str(e).lower()

    def test_tokens_required(self):
        """Test empty tokens are rejected."""
        try:
            SessionTokens(access_token="", refresh_token="r")
            assert False, "Should have raised ValueError"
        except ValueError:
            pass

        try:
            Session(access_token="a", refresh_token="", bound_wallet_address=ADDRESS)
            assert False, "Should have raised ValueError"
        except ValueError:
            pass

    def test_is_bound_to(self):
        """Test wallet binding check."""
        session = Session.from_tokens(self._tokens(), ADDRESS)

        assert session.is_bound_to(ADDRESS)
        assert not session.is_bound_to(None)
        assert not session.is_bound_to("9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM")

    def test_repr_and_dict_hide_tokens(self):
        """Test tokens never appear in repr or to_dict."""
        self.reporter.info("Testing token redaction", context="Test")

        session = Session.from_tokens(self._tokens(), ADDRESS)

        assert "access-1" not in repr(session)
        assert "refresh-1" not in repr(session)
        assert "access-1" not in repr(self._tokens())

        data = session.to_dict()
        assert data["bound_wallet_address"] == ADDRESS
        assert "access_token" not in data
        assert "refresh_token" not in data


if __name__ == "__main__":
    TestSession.run_as_main()
