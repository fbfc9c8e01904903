"""Unit tests for configuration resolution.

These tests verify the core behaviors of the configuration module:
- Loading settings from ``OPENROUTER_*`` environment variables.
- Prioritizing explicit overrides over the environment.
- Keeping the API key out of every string representation.
"""

import os
from unittest.mock import patch

import pytest

from openrouter_structured.config import ClientConfig, OpenRouterSettings, resolve_config
from openrouter_structured.constants import DEFAULT_BASE_URL, DEFAULT_TIMEOUT_MS
from openrouter_structured.exceptions import ConfigurationError

SECRET_KEY = "sk-or-very-secret-key-12345-abcdef"


class TestResolveConfig:
    """Resolution of environment and overrides into a ClientConfig."""

    @pytest.mark.unit
    def test_reads_environment(self):
        with patch.dict(
            os.environ,
            {
                "OPENROUTER_API_KEY": "env-key",
                "OPENROUTER_TIMEOUT_MS": "1500",
                "OPENROUTER_MAX_RETRIES": "4",
                "OPENROUTER_APP_TITLE": "Planner",
            },
        ):
            config = resolve_config()

        assert config.api_key == "env-key"
        assert config.default_timeout_ms == 1500
        assert config.max_retries == 4
        assert config.app_title == "Planner"

    @pytest.mark.unit
    def test_defaults_apply(self):
        with patch.dict(os.environ, {"OPENROUTER_API_KEY": "env-key"}):
            config = resolve_config()

        assert config.base_url == DEFAULT_BASE_URL
        assert config.default_timeout_ms == DEFAULT_TIMEOUT_MS
        assert config.max_retries == 2

    @pytest.mark.unit
    def test_overrides_win_over_environment(self):
        with patch.dict(os.environ, {"OPENROUTER_API_KEY": "env-key"}):
            config = resolve_config({"api_key": "explicit-key", "max_retries": 0})

        assert config.api_key == "explicit-key"
        assert config.max_retries == 0

    @pytest.mark.unit
    def test_none_overrides_are_ignored(self):
        with patch.dict(os.environ, {"OPENROUTER_API_KEY": "env-key"}):
            config = resolve_config({"api_key": None, "timeout_ms": None})

        assert config.api_key == "env-key"
        assert config.default_timeout_ms == DEFAULT_TIMEOUT_MS

    @pytest.mark.unit
    def test_missing_api_key_raises(self):
        with pytest.raises(ConfigurationError, match="OPENROUTER_API_KEY"):
            resolve_config()

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "overrides",
        [
            {"timeout_ms": 0},
            {"max_retries": -1},
            {"timeout_ms": "soon"},
        ],
    )
    def test_invalid_values_raise_configuration_error(self, overrides):
        with pytest.raises(ConfigurationError, match="Invalid OpenRouter configuration"):
            resolve_config({"api_key": "k", **overrides})

    @pytest.mark.unit
    def test_base_url_trailing_slash_is_stripped(self):
        config = resolve_config(
            {"api_key": "k", "base_url": "https://proxy.example/api/v1/"}
        )

        assert config.base_url == "https://proxy.example/api/v1"

    @pytest.mark.unit
    def test_env_file_is_read_when_requested(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("OPENROUTER_API_KEY=file-key\nOPENROUTER_MAX_RETRIES=3\n")

        config = resolve_config(use_env_file=env_file)

        assert config.api_key == "file-key"
        assert config.max_retries == 3


class TestClientConfig:
    """The immutable config object handed to the client."""

    @pytest.mark.unit
    def test_headers(self):
        config = ClientConfig(api_key="k", app_url="https://app.example", app_title="App")

        assert config.headers == {
            "Authorization": "Bearer k",
            "Content-Type": "application/json",
            "HTTP-Referer": "https://app.example",
            "X-Title": "App",
        }

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"api_key": ""},
            {"api_key": "k", "default_timeout_ms": 0},
            {"api_key": "k", "max_retries": -1},
        ],
    )
    def test_rejects_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            ClientConfig(**kwargs)

    @pytest.mark.unit
    def test_is_frozen(self):
        config = ClientConfig(api_key="k")

        with pytest.raises(AttributeError):
            config.api_key = "other"  # type: ignore[misc]


class TestSecrets:
    """The API key must never leak into logs or debug output."""

    @pytest.mark.unit
    def test_api_key_never_in_string_representation(self):
        with patch.dict(os.environ, {"OPENROUTER_API_KEY": SECRET_KEY}):
            config = resolve_config()

        assert SECRET_KEY not in str(config)
        assert SECRET_KEY not in repr(config)
        assert "[REDACTED]" in repr(config)

    @pytest.mark.unit
    def test_settings_dict_excludes_api_key(self):
        settings = OpenRouterSettings(api_key=SECRET_KEY)

        assert "api_key" not in settings.to_dict()
        assert SECRET_KEY not in str(settings.to_dict())
