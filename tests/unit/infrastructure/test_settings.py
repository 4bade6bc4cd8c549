"""
Unit tests for configuration loading.

Usage:
    python tests/unit/infrastructure/test_settings.py
    laborant gardien --unit
"""

import os

from pydantic import ValidationError

from gardien.config.settings import (
    Settings,
    get_settings,
    load_config,
    override_settings,
    reset_settings,
)
from tests.helpers.laborant_test import LaborantTest


class TestSettings(LaborantTest):
    """Unit tests for Settings and load_config."""

    component_name = "gardien"
    test_category = "unit"

    def setup_test(self):
        self._saved_log_level = os.environ.pop("LOG_LEVEL", None)

    def teardown_test(self):
        os.environ.pop("LOG_LEVEL", None)
        if self._saved_log_level is not None:
            os.environ["LOG_LEVEL"] = self._saved_log_level
        reset_settings()

    def test_test_environment_yaml(self):
        """Test the test YAML overrides the defaults."""
        self.reporter.info("Testing test.yaml loading", context="Test")

        settings = load_config(env="test")

        assert settings.ENV == "test"
        assert settings.DISCONNECT_GRACE_SECONDS == 0.05
        assert settings.LOG_LEVEL == "WARNING"
        assert settings.VERIFIER_RETRY_INITIAL_DELAY == 0.0
        assert settings.AUTH_FUNCTION_NAME == "wallet-auth"

    def test_env_var_wins_over_yaml(self):
        """Test environment variables take priority."""
        os.environ["LOG_LEVEL"] = "debug"

        settings = load_config(env="test")

        assert settings.LOG_LEVEL == "DEBUG"

    def test_defaults(self):
        """Test built-in defaults."""
        settings = Settings()

        assert settings.DISCONNECT_GRACE_SECONDS == 3.0
        assert settings.VERIFICATIONS_TABLE == "wallet_verifications"
        assert settings.ENTITIES_TABLE == "kols"
        assert settings.CHALLENGE_APP_NAME == "KOL Platform"

    def test_urls_normalized(self):
        """Test trailing slashes are stripped."""
        settings = Settings(VERIFIER_URL="https://x.supabase.co/functions/v1/")

        assert settings.VERIFIER_URL == "https://x.supabase.co/functions/v1"

    def test_invalid_values(self):
        """Test validation failures."""
        try:
            Settings(LOG_LEVEL="LOUD")
            assert False, "Should have raised ValidationError"
        except ValidationError:
            pass

        try:
            Settings(AUTH_URL="ftp://auth")
            assert False, "Should have raised ValidationError"
        except ValidationError:
            pass

        try:
            Settings(DISCONNECT_GRACE_SECONDS=0)
            assert False, "Should have raised ValidationError"
        except ValidationError:
            pass

    def test_override_settings(self):
        """Test the global settings override."""
        custom = Settings(APP_NAME="Custom")

        override_settings(custom)

        assert get_settings() is custom


if __name__ == "__main__":
    TestSettings.run_as_main()
