"""
Unit tests for ChallengeBuilder.

Tests rendered challenge formats, nonce freshness and input validation.

Usage:
    python tests/unit/domain/test_challenge_builder.py
    laborant gardien --unit
"""

from gardien.domain.exceptions import AddressMismatchError, ValidationError
from gardien.domain.services.challenge_builder import ChallengeBuilder
from gardien.domain.value_objects.challenge import ChallengePurpose
from tests.helpers.laborant_test import LaborantTest

ADDRESS = "kshy5yns5FGGXcFVfjT2fTzVsQLFnbZzL9zuh1ZKR2y"
OTHER_ADDRESS = "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"
NOW_MS = 1_700_000_000_000


class TestChallengeBuilder(LaborantTest):
    """Unit tests for ChallengeBuilder."""

    component_name = "gardien"
    test_category = "unit"

    # ================================================================
    # Helper Methods
    # ================================================================

    def _builder(self, nonces=None) -> ChallengeBuilder:
        if nonces is None:
            return ChallengeBuilder(clock=lambda: NOW_MS)
        return ChallengeBuilder(clock=lambda: NOW_MS, nonce_factory=iter(nonces).__next__)

    # ================================================================
    # Auth challenges
    # ================================================================

    def test_build_auth_renders_text(self):
        """Test auth challenge text layout."""
        self.reporter.info("Testing auth challenge text", context="Test")

        challenge = self._builder(["ab12"]).build_auth(ADDRESS)

        assert challenge.purpose == ChallengePurpose.AUTH
        assert challenge.address == ADDRESS
        assert challenge.timestamp_ms == NOW_MS
        assert challenge.nonce == "ab12"
        assert challenge.context_id is None
        assert challenge.text == (
            "Sign this message to authenticate with KOL Platform.\n\n"
            f"Wallet: {ADDRESS}\n"
            f"Timestamp: {NOW_MS}\n"
            "Nonce: ab12"
        )

        self.reporter.info("Auth challenge rendered", context="Test")

    def test_build_auth_uses_configured_app_name(self):
        """Test app name is configurable."""
        builder = ChallengeBuilder(app_name="Lumiere", clock=lambda: NOW_MS)

        challenge = builder.build_auth(ADDRESS)

        assert challenge.text.startswith(
            "Sign this message to authenticate with Lumiere.\n\n"
        )

    def test_default_nonce_has_128_bits(self):
        """Test default nonce is 32 hex characters."""
        self.reporter.info("Testing default nonce size", context="Test")

        challenge = self._builder().build_auth(ADDRESS)

        assert len(challenge.nonce) == 32
        int(challenge.nonce, 16)

    def test_consecutive_auth_challenges_differ(self):
        """Test two challenges for the same wallet never share text."""
        builder = self._builder()

        first = builder.build_auth(ADDRESS)
        second = builder.build_auth(ADDRESS)

        assert first.nonce != second.nonce
        assert first.text != second.text

    def test_repeated_nonce_is_redrawn(self):
        """Test a nonce already handed out is never reused."""
        self.reporter.info("Testing nonce collision redraw", context="Test")

        builder = self._builder(["aa", "aa", "bb"])

        first = builder.build_auth(ADDRESS)
        second = builder.build_auth(ADDRESS)

        assert first.nonce == "aa"
        assert second.nonce == "bb"

    def test_to_bytes_is_utf8_text(self):
        """Test bytes handed to the wallet are the UTF-8 text."""
        challenge = self._builder(["ff"]).build_auth(ADDRESS)

        assert challenge.to_bytes() == challenge.text.encode("utf-8")

    # ================================================================
    # Ownership challenges
    # ================================================================

    def test_build_ownership_renders_text(self):
        """Test ownership challenge text layout."""
        self.reporter.info("Testing ownership challenge text", context="Test")

        challenge = self._builder().build_ownership(
            ADDRESS, entity_id="kol-42", claimed_address=ADDRESS
        )

        assert challenge.purpose == ChallengePurpose.OWNERSHIP
        assert challenge.context_id == "kol-42"
        assert challenge.nonce is None
        assert challenge.text == (
            "Verify wallet ownership for KOL profile\n"
            "KOL ID: kol-42\n"
            f"Wallet: {ADDRESS}\n"
            f"Timestamp: {NOW_MS}"
        )

    def test_ownership_with_other_claimed_wallet_raises(self):
        """Test claimed wallet must equal the signing wallet."""
        self.reporter.info("Testing ownership address mismatch", context="Test")

        try:
            self._builder().build_ownership(
                ADDRESS, entity_id="kol-42", claimed_address=OTHER_ADDRESS
            )
            assert False, "Should have raised AddressMismatchError"
        except AddressMismatchError as e:
            assert e.code == "ADDRESS_MISMATCH"
            assert e.expected == OTHER_ADDRESS
            assert e.actual == ADDRESS

    def test_ownership_without_entity_id_raises(self):
        """Test empty entity id is rejected."""
        try:
            self._builder().build_ownership(
                ADDRESS, entity_id="", claimed_address=ADDRESS
            )
            assert False, "Should have raised ValidationError"
        except ValidationError as e:
            assert e.field == "entity_id"

    # ================================================================
    # Dispatch and validation
    # ================================================================

    def test_build_dispatches_on_purpose(self):
        """Test build() routes to the right renderer."""
        builder = self._builder()

        auth = builder.build(ChallengePurpose.AUTH, ADDRESS)
        ownership = builder.build(
            ChallengePurpose.OWNERSHIP,
            ADDRESS,
            {"entity_id": "kol-1", "claimed_address": ADDRESS},
        )

        assert auth.purpose == ChallengePurpose.AUTH
        assert ownership.purpose == ChallengePurpose.OWNERSHIP
        assert ownership.context_id == "kol-1"

    def test_build_ownership_without_context_raises(self):
        """Test ownership requires an entity id in the context."""
        try:
            self._builder().build(ChallengePurpose.OWNERSHIP, ADDRESS)
            assert False, "Should have raised ValidationError"
        except ValidationError as e:
            assert e.field == "entity_id"

    def test_empty_address_raises(self):
        """Test empty address is rejected."""
        self.reporter.info("Testing empty address", context="Test")

        try:
            self._builder().build_auth("")
            assert False, "Should have raised ValidationError"
        except ValidationError as e:
            assert e.code == "VALIDATION_ERROR"
            assert e.field == "wallet_address"

    def test_invalid_address_raises(self):
        """Test non-base58 address is rejected."""
        try:
            self._builder().build_auth("0OIl" * 10)
            assert False, "Should have raised ValidationError"
        except ValidationError as e:
            assert e.field == "wallet_address"


if __name__ == "__main__":
    TestChallengeBuilder.run_as_main()
