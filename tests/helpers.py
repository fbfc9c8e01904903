"""Shared test doubles for HTTP and timing."""

import json
from typing import Any

import httpx


def completion_body(
    content: str, prompt_tokens: int = 10, completion_tokens: int = 5, **extra: Any
) -> dict[str, Any]:
    """Chat-completions response body carrying ``content``."""
    return {
        "choices": [{"message": {"role": "assistant", "content": content}}],
        "usage": {
            "prompt_tokens": prompt_tokens,
            "completion_tokens": completion_tokens,
        },
        **extra,
    }


class ScriptedEndpoint:
    """Replays a fixed sequence of responses and records every request.

    Each script entry is an ``httpx.Response``, a string (returned as the
    completion content with status 200), or an exception instance to raise.
    """

    def __init__(self, script: list[Any]):
        self.script = list(script)
        self.requests: list[httpx.Request] = []

    @property
    def bodies(self) -> list[dict[str, Any]]:
        return [json.loads(r.content) for r in self.requests]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.script:
            raise AssertionError("No scripted response left")
        item = self.script.pop(0)
        if isinstance(item, Exception):
            raise item
        if isinstance(item, str):
            return httpx.Response(200, json=completion_body(item))
        return item


class RecordingSleep:
    """Async stand-in for ``asyncio.sleep`` that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
