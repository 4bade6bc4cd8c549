"""
Application settings with environment-based configuration.

Priority (highest to lowest):
1. Environment variables (from .env or system)
2. Environment-specific YAML config file (development.yaml, production.yaml)
3. Default YAML config file (default.yaml)
4. Pydantic defaults
"""

import os
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Gardien settings with environment variable support.

    The API key should come from environment variables, not from YAML files.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="allow",
    )

    # Application
    APP_NAME: str = "Gardien"
    APP_VERSION: str = "0.1.0"
    ENV: str = Field(default="development", description="Environment name")
    DEBUG: bool = Field(default=False, description="Debug mode")

    # Remote verifier (edge functions)
    VERIFIER_URL: str = Field(
        default="http://localhost:54321/functions/v1",
        description="Base URL of the verifier functions",
    )
    AUTH_FUNCTION_NAME: str = Field(
        default="wallet-auth",
        description="Function that verifies a signature and mints tokens",
    )

    # Record store (PostgREST) and auth backend (GoTrue)
    REST_URL: str = Field(
        default="http://localhost:54321/rest/v1",
        description="Base URL of the REST record store",
    )
    AUTH_URL: str = Field(
        default="http://localhost:54321/auth/v1",
        description="Base URL of the auth backend",
    )
    API_KEY: Optional[str] = Field(
        default=None,
        description="Public API key sent as apikey/Bearer header",
    )

    # Tables
    VERIFICATIONS_TABLE: str = Field(default="wallet_verifications")
    ENTITIES_TABLE: str = Field(default="kols")
    ENTITY_VERIFIED_COLUMN: str = Field(default="is_wallet_verified")

    # Challenge text
    CHALLENGE_APP_NAME: str = Field(
        default="KOL Platform",
        description="Application name rendered in sign-in challenges",
    )
    OWNERSHIP_SUBJECT: str = Field(default="KOL profile")
    OWNERSHIP_ID_LABEL: str = Field(default="KOL ID")

    # Consistency monitor
    DISCONNECT_GRACE_SECONDS: float = Field(
        default=3.0,
        gt=0.0,
        le=60.0,
        description="How long a null wallet signal is tolerated",
    )

    # Resilience - Timeouts
    VERIFIER_TIMEOUT: float = Field(
        default=15.0,
        gt=0.0,
        description="Verifier request timeout in seconds",
    )
    VERIFIER_CONNECT_TIMEOUT: float = Field(
        default=5.0,
        gt=0.0,
        description="Verifier connect timeout in seconds",
    )

    # Resilience - Retry (connection establishment only)
    VERIFIER_RETRY_MAX_ATTEMPTS: int = Field(default=2, ge=1, le=10)
    VERIFIER_RETRY_INITIAL_DELAY: float = Field(default=0.5, ge=0.0)
    VERIFIER_RETRY_MAX_DELAY: float = Field(default=5.0, ge=0.0)

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_JSON: bool = Field(default=True)

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f"Invalid LOG_LEVEL. Must be one of: {allowed}")
        return v_upper

    @field_validator("VERIFIER_URL", "REST_URL", "AUTH_URL")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Invalid URL (http/https required): {v}")
        return v.rstrip("/")


def load_config(
    config_file: Optional[str] = None,
    env_file: Optional[str] = None,
    env: Optional[str] = None,
) -> Settings:
    """
    Load configuration from YAML files and environment variables.

    Priority: ENV vars > environment-specific YAML > default YAML > defaults

    Args:
        config_file: Optional YAML config filename override
        env_file: Optional .env filename (e.g., ".env.development")
        env: Optional environment name override (e.g., "development", "test")

    Returns:
        Settings instance

    Raises:
        ValidationError: If a value is invalid
    """
    current_file = Path(__file__).resolve()
    project_root = current_file.parent.parent.parent.parent
    config_dir = project_root / "config"

    environment = env or os.getenv("ENV", "production")

    env_map = {
        "production": (".env.production", "production.yaml"),
        "development": (".env.development", "development.yaml"),
        "test": (".env.test", "test.yaml"),
    }

    if env_file is None:
        default_env_file, default_config_file = env_map.get(
            environment, (".env.production", "production.yaml")
        )
        env_file = default_env_file
        if config_file is None:
            config_file = default_config_file

    env_file_path = project_root / env_file
    if env_file_path.exists():
        load_dotenv(env_file_path, override=True)

    default_config_path = config_dir / "default.yaml"
    merged_config = {}

    if default_config_path.exists():
        with open(default_config_path, "r") as f:
            loaded = yaml.safe_load(f)
            if loaded:
                merged_config = loaded

    if config_file:
        env_config_path = config_dir / config_file
        if env_config_path.exists():
            with open(env_config_path, "r") as f:
                loaded = yaml.safe_load(f)
                if loaded:
                    merged_config.update(loaded)

    # Environment variables win over YAML
    for key in list(merged_config):
        if key in os.environ:
            merged_config.pop(key)

    return Settings(**merged_config)


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or initialize global settings."""
    global _settings
    if _settings is None:
        _settings = load_config()
    return _settings


def override_settings(new_settings: Settings) -> None:
    """Override global settings (for testing)."""
    global _settings
    _settings = new_settings


def reset_settings() -> None:
    """Reset settings to force re-initialization (for testing)."""
    global _settings
    _settings = None
