"""Immutable client configuration passed explicitly into the client core."""

from dataclasses import dataclass

from openrouter_structured.constants import (
    DEFAULT_APP_TITLE,
    DEFAULT_APP_URL,
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT_MS,
    MAX_RETRIES,
)


@dataclass(frozen=True)
class ClientConfig:
    """Immutable configuration consumed by ``OpenRouterClient``.

    The client never reads the environment itself; build this object with
    ``resolve_config()`` or directly in code.
    """

    api_key: str
    base_url: str = DEFAULT_BASE_URL
    default_timeout_ms: int = DEFAULT_TIMEOUT_MS
    app_url: str = DEFAULT_APP_URL
    app_title: str = DEFAULT_APP_TITLE
    max_retries: int = MAX_RETRIES

    def __post_init__(self) -> None:
        if not self.api_key:
            raise ValueError("OpenRouter API key is required")
        if self.default_timeout_ms <= 0:
            raise ValueError("default_timeout_ms must be positive")
        if self.max_retries < 0:
            raise ValueError("max_retries must be zero or greater")

    def __str__(self) -> str:
        """String representation with redacted API key for safe logging."""
        return (
            f"ClientConfig(api_key='[REDACTED]', base_url={self.base_url!r}, "
            f"default_timeout_ms={self.default_timeout_ms!r}, "
            f"app_url={self.app_url!r}, app_title={self.app_title!r}, "
            f"max_retries={self.max_retries!r})"
        )

    def __repr__(self) -> str:
        """Representation with redacted API key for safe debugging."""
        return self.__str__()

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": self.app_url,
            "X-Title": self.app_title,
        }
