"""
Global test configuration for the structured-output client.
"""

from collections.abc import Callable
import logging
import os
from typing import Any

import httpx
import pytest

from openrouter_structured.config import ClientConfig
from tests.helpers import RecordingSleep, ScriptedEndpoint


# --- Environment Isolation (Autouse) ---
@pytest.fixture(autouse=True)
def isolate_openrouter_env(request, monkeypatch):
    """Ensure a clean OPENROUTER_* environment for each test.

    Escape hatch: @pytest.mark.allow_env_pollution keeps the current env.
    """
    if request.node.get_closest_marker("allow_env_pollution"):
        return
    for key in list(os.environ.keys()):
        if key.startswith("OPENROUTER_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def quiet_http_loggers():
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


# --- Test Environment Markers ---
def pytest_configure(config):
    """Configure custom markers for test organization."""
    markers = [
        "unit: Fast, isolated unit tests",
        "integration: Component integration tests with mocked HTTP",
        "allow_env_pollution: Skip OPENROUTER_* environment isolation",
    ]
    for marker in markers:
        config.addinivalue_line("markers", marker)


# --- Core Fixtures ---


@pytest.fixture
def mock_api_key():
    """Provide a consistent, fake API key for tests."""
    return "sk-or-test-12345-67890"


@pytest.fixture
def client_config(mock_api_key):
    return ClientConfig(api_key=mock_api_key, base_url="https://openrouter.test/api/v1")


@pytest.fixture
def scripted() -> Callable[[list[Any]], tuple[ScriptedEndpoint, httpx.AsyncClient]]:
    """Build an ``httpx.AsyncClient`` backed by a scripted endpoint."""

    def _make(script: list[Any]) -> tuple[ScriptedEndpoint, httpx.AsyncClient]:
        endpoint = ScriptedEndpoint(script)
        return endpoint, httpx.AsyncClient(transport=httpx.MockTransport(endpoint))

    return _make


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()
