"""HTTP transport for the OpenAI-compatible completion endpoint.

Owns the ``httpx.AsyncClient`` and turns every transport-level failure into
one of the package exceptions, so nothing above this layer sees httpx errors.
"""

import asyncio
from collections.abc import AsyncIterator, Awaitable
import json
import logging
from typing import Any

import httpx

from openrouter_structured.config.types import ClientConfig
from openrouter_structured.core.types import CancellationToken
from openrouter_structured.exceptions import (
    APIError,
    NetworkError,
    RequestCancelledError,
    RequestTimeoutError,
)

log = logging.getLogger(__name__)


def error_message_from_body(body: str, fallback: str = "") -> str:
    """Best human-readable message from an error response body.

    Prefers ``error.message``, then ``message``, then the raw body text.
    """
    try:
        data = json.loads(body)
    except ValueError:
        return body or fallback
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if data.get("message"):
            return str(data["message"])
    return body or fallback


async def race_cancellation[T](
    awaitable: Awaitable[T], cancel: CancellationToken | None
) -> T:
    """Await ``awaitable`` unless ``cancel`` fires first.

    Raises:
        RequestCancelledError: If the token was or becomes cancelled.
    """
    if cancel is None:
        return await awaitable
    if cancel.cancelled:
        if asyncio.iscoroutine(awaitable):
            awaitable.close()
        raise RequestCancelledError()

    work = asyncio.ensure_future(awaitable)
    watcher = asyncio.ensure_future(cancel.wait())
    try:
        await asyncio.wait({work, watcher}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for task in (work, watcher):
            if not task.done():
                task.cancel()
        await asyncio.gather(work, watcher, return_exceptions=True)

    if work.done() and not work.cancelled():
        return work.result()
    raise RequestCancelledError()


class OpenRouterTransport:
    """POSTs JSON bodies to the configured base URL.

    Pass ``http_client`` to share a pool or to inject ``httpx.MockTransport``
    in tests; a client created here is closed by ``aclose()``.
    """

    def __init__(
        self, config: ClientConfig, http_client: httpx.AsyncClient | None = None
    ):
        self.config = config
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _url(self, path: str) -> str:
        return f"{self.config.base_url.rstrip('/')}{path}"

    async def post_json(
        self,
        path: str,
        body: dict[str, Any],
        *,
        timeout_ms: int,
        cancel: CancellationToken | None = None,
        error_label: str = "OpenRouter API error",
    ) -> dict[str, Any]:
        """POST ``body`` and return the decoded JSON response.

        Raises:
            RequestTimeoutError: The whole call exceeded ``timeout_ms``.
            NetworkError: No HTTP response, or an undecodable success body.
            APIError: The endpoint answered with a non-2xx status.
            RequestCancelledError: ``cancel`` fired before completion.
        """
        log.debug("POST %s model=%s", path, body.get("model"))
        try:
            async with asyncio.timeout(timeout_ms / 1000):
                response = await race_cancellation(
                    self._send(path, body, timeout_ms), cancel
                )
        except TimeoutError as e:
            raise RequestTimeoutError(timeout_ms) from e

        if response.is_error:
            message = error_message_from_body(response.text, response.reason_phrase)
            log.warning("%s [%s]: %s", error_label, response.status_code, message)
            raise APIError(
                response.status_code,
                f"{error_label}: {response.status_code} - {message}",
            )

        try:
            data = response.json()
        except ValueError as e:
            raise NetworkError(f"Malformed response body: {response.text[:200]!r}") from e
        if not isinstance(data, dict):
            raise NetworkError("Malformed response body: expected a JSON object")
        return data

    async def _send(
        self, path: str, body: dict[str, Any], timeout_ms: int
    ) -> httpx.Response:
        try:
            return await self._client.post(
                self._url(path),
                json=body,
                headers=self.config.headers,
                timeout=timeout_ms / 1000,
            )
        except httpx.TimeoutException as e:
            raise RequestTimeoutError(timeout_ms) from e
        except httpx.TransportError as e:
            raise NetworkError(f"Network error calling {path}: {e}") from e

    async def stream_lines(
        self,
        path: str,
        body: dict[str, Any],
        *,
        timeout_ms: int,
        cancel: CancellationToken | None = None,
    ) -> AsyncIterator[str]:
        """POST ``body`` and yield the response body line by line.

        ``timeout_ms`` bounds connecting and each read. ``cancel`` is checked
        between lines.
        """
        if cancel is not None and cancel.cancelled:
            raise RequestCancelledError()
        log.debug("POST %s (stream) model=%s", path, body.get("model"))
        try:
            async with self._client.stream(
                "POST",
                self._url(path),
                json=body,
                headers=self.config.headers,
                timeout=timeout_ms / 1000,
            ) as response:
                if response.is_error:
                    text = (await response.aread()).decode("utf-8", errors="replace")
                    message = error_message_from_body(text, response.reason_phrase)
                    log.warning(
                        "OpenRouter API error [%s]: %s", response.status_code, message
                    )
                    raise APIError(
                        response.status_code,
                        f"OpenRouter API error: {response.status_code} - {message}",
                    )
                async for line in response.aiter_lines():
                    if cancel is not None and cancel.cancelled:
                        raise RequestCancelledError()
                    yield line
        except httpx.TimeoutException as e:
            raise RequestTimeoutError(timeout_ms) from e
        except httpx.TransportError as e:
            raise NetworkError(f"Network error calling {path}: {e}") from e
