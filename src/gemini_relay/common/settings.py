"""Configuration management for the Gemini relay.

Uses Pydantic Settings for type-safe configuration with .env file support.
Settings are read once at startup and are immutable afterwards.
"""
from __future__ import annotations
import logging

from pydantic import AliasChoices, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

LOGGER = logging.getLogger("gemini_relay.settings")

DEFAULT_ALLOWED_ORIGINS = (
    "https://react-personal-website-f59ef.web.app",
    "https://react-personal-website-f59ef.firebaseapp.com",
    "https://hassirlastre.com",
    "http://localhost:4173",
    "http://localhost:5173",
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    # Provider
    gemini_api_key: str = Field(min_length=1)
    gemini_base_url: str = "https://generativelanguage.googleapis.com"
    provider_timeout: float = 120.0

    # Service
    host: str = "0.0.0.0"
    port: int = 3000
    allowed_origins: str | None = None
    max_body_bytes: int = 1_048_576

    # Environment
    environment: str = Field(
        default="production",
        validation_alias=AliasChoices("environment", "node_env"),
    )
    log_level: str = "INFO"

    @property
    def allowed_origins_list(self) -> list[str]:
        """Parse allowed origins as list, falling back to the built-in list."""
        if not self.allowed_origins:
            return list(DEFAULT_ALLOWED_ORIGINS)
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


def load_settings(**overrides) -> Settings:
    """Build settings from the environment; exit the process if they are invalid."""
    try:
        return Settings(**overrides)
    except ValidationError as e:
        fields = {str(err["loc"][0]) for err in e.errors() if err.get("loc")}
        if "gemini_api_key" in fields:
            LOGGER.error("GEMINI_API_KEY is not configured in the environment")
        else:
            LOGGER.error("Invalid configuration: %s", e)
        raise SystemExit(1) from e
