"""Configuration for the structured-output client.

Settings are resolved once, at the edge, into an immutable ``ClientConfig``
that is then passed explicitly into the client. Precedence:
programmatic overrides > environment (``OPENROUTER_*``) > defaults.
"""

from pathlib import Path
from typing import Any

from pydantic import ValidationError

from openrouter_structured.exceptions import ConfigurationError

from .schema import OpenRouterSettings
from .types import ClientConfig


def resolve_config(
    overrides: dict[str, Any] | None = None,
    *,
    use_env_file: str | Path | None = None,
) -> ClientConfig:
    """Resolve configuration from the environment and programmatic overrides.

    Args:
        overrides: Field values that take precedence over the environment.
            ``None`` values are ignored.
        use_env_file: Optional ``.env`` file to read before the environment.

    Raises:
        ConfigurationError: If a value is invalid or the API key is missing.
    """
    explicit = {k: v for k, v in (overrides or {}).items() if v is not None}
    try:
        if use_env_file is not None:
            settings = OpenRouterSettings(_env_file=use_env_file, **explicit)  # type: ignore[call-arg]
        else:
            settings = OpenRouterSettings(**explicit)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid OpenRouter configuration: {e}") from e

    if not settings.api_key:
        raise ConfigurationError(
            "OPENROUTER_API_KEY environment variable is not set and no api_key "
            "override was provided."
        )

    return ClientConfig(
        api_key=settings.api_key,
        base_url=settings.base_url,
        default_timeout_ms=settings.timeout_ms,
        app_url=settings.app_url,
        app_title=settings.app_title,
        max_retries=settings.max_retries,
    )


__all__ = [
    "ClientConfig",
    "OpenRouterSettings",
    "resolve_config",
]
