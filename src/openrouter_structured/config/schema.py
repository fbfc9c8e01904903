"""Configuration schema and validation using Pydantic.

Validates and coerces settings from the environment (``OPENROUTER_`` prefix)
and programmatic overrides into typed values with defaults.
"""

from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from openrouter_structured.constants import (
    DEFAULT_APP_TITLE,
    DEFAULT_APP_URL,
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT_MS,
    MAX_RETRIES,
)


class OpenRouterSettings(BaseSettings):
    """Pydantic settings schema for the OpenRouter client.

    Reads ``OPENROUTER_API_KEY``, ``OPENROUTER_BASE_URL``,
    ``OPENROUTER_TIMEOUT_MS``, ``OPENROUTER_APP_URL``, ``OPENROUTER_APP_TITLE``
    and ``OPENROUTER_MAX_RETRIES``.
    """

    model_config = SettingsConfigDict(
        env_prefix="OPENROUTER_",
        env_file=None,  # Only used when explicitly requested
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    api_key: str | None = Field(default=None, description="OpenRouter API key")

    base_url: str = Field(
        default=DEFAULT_BASE_URL,
        description="Base URL of the OpenAI-compatible API",
        min_length=1,
    )

    timeout_ms: int = Field(
        default=DEFAULT_TIMEOUT_MS,
        description="Default per-request timeout in milliseconds",
        gt=0,
    )

    app_url: str = Field(
        default=DEFAULT_APP_URL,
        description="Sent as HTTP-Referer for OpenRouter attribution",
    )

    app_title: str = Field(
        default=DEFAULT_APP_TITLE,
        description="Sent as X-Title for OpenRouter attribution",
    )

    max_retries: int = Field(
        default=MAX_RETRIES,
        description="Retries after the first attempt for JSON calls",
        ge=0,
    )

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize the base URL so paths can be appended directly."""
        return v.rstrip("/")

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary, keeping the API key out of it."""
        return {
            "base_url": self.base_url,
            "timeout_ms": self.timeout_ms,
            "app_url": self.app_url,
            "app_title": self.app_title,
            "max_retries": self.max_retries,
        }
