"""OpenRouter client with raw, JSON and schema-validated chat calls"""  # noqa: D415

from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import aclosing
import json
import logging
from types import TracebackType
from typing import Any, Self

import httpx

from .client.backoff import RandomSource, RetryBudget
from .client.circuit_breaker import CircuitBreaker
from .client.retry import RetryController, Sleeper
from .client.transport import OpenRouterTransport
from .config import ClientConfig, resolve_config
from .constants import (
    CHAT_COMPLETIONS_PATH,
    DEFAULT_CHAT_TEMPERATURE,
    EMBEDDINGS_PATH,
)
from .core.models import estimate_cost, supports_json_mode
from .core.types import (
    CancellationToken,
    ChatRequest,
    ChatResponse,
    EmbeddingRequest,
    EmbeddingResponse,
    JSONResponse,
    SearchResult,
    Usage,
    ValidatedResponse,
)
from .exceptions import NetworkError
from .response.validation import as_schema
from .telemetry import TelemetryContext, TelemetryContextProtocol

log = logging.getLogger(__name__)


def build_chat_body(request: ChatRequest, *, stream: bool = False) -> dict[str, Any]:
    """Build the chat-completions request body for ``request``.

    ``response_format`` is only sent for JSON requests to models that accept
    it, and never when streaming.
    """
    body: dict[str, Any] = {
        "model": request.model,
        "messages": [m.to_dict() for m in request.messages],
        "temperature": (
            request.temperature
            if request.temperature is not None
            else DEFAULT_CHAT_TEMPERATURE
        ),
        "max_tokens": request.max_tokens,
    }
    if stream:
        body["stream"] = True
    elif request.json_mode and supports_json_mode(request.model):
        body["response_format"] = {"type": "json_object"}

    if request.reasoning is not None:
        reasoning = request.reasoning.to_payload()
        if reasoning:
            body["reasoning"] = reasoning
    return body


def _usage_from(data: dict[str, Any]) -> Usage:
    usage = data.get("usage") or {}
    prompt = int(usage.get("prompt_tokens") or 0)
    completion = int(usage.get("completion_tokens") or 0)
    return Usage(prompt, completion, prompt + completion)


def parse_chat_response(model: str, data: dict[str, Any]) -> ChatResponse:
    """Turn a decoded chat-completions body into a ``ChatResponse``."""
    choices = data.get("choices") or []
    first = choices[0] if choices and isinstance(choices[0], dict) else {}
    content = (first.get("message") or {}).get("content") or ""
    usage = _usage_from(data)

    search_results = tuple(
        SearchResult(
            title=str(item.get("title", "")),
            url=str(item.get("url", "")),
            date=item.get("date"),
            snippet=item.get("snippet"),
        )
        for item in data.get("search_results") or ()
        if isinstance(item, dict)
    )
    return ChatResponse(
        content=content,
        usage=usage,
        cost=estimate_cost(model, usage.prompt_tokens, usage.completion_tokens),
        citations=tuple(str(c) for c in data.get("citations") or ()),
        search_results=search_results,
    )


def _stream_delta(line: str) -> str | None:
    """Content delta carried by one SSE line, ``None`` when there is none."""
    try:
        chunk = json.loads(line)
    except ValueError:
        log.warning("Skipping malformed stream chunk: %r", line[:200])
        return None
    try:
        return chunk["choices"][0]["delta"].get("content") or None
    except (KeyError, IndexError, TypeError, AttributeError):
        return None


def _embedding_items(data: dict[str, Any]) -> list[tuple[int, tuple[float, ...]]]:
    """``(index, vector)`` pairs from an embeddings body, in response order."""
    items = data.get("data")
    if not isinstance(items, list):
        raise NetworkError("Malformed embeddings response: missing 'data' list")

    pairs: list[tuple[int, tuple[float, ...]]] = []
    for position, item in enumerate(items):
        vector = item.get("embedding") if isinstance(item, dict) else None
        if not isinstance(vector, list):
            raise NetworkError(
                f"Malformed embeddings response: item {position} has no 'embedding' list"
            )
        index = item.get("index", position)
        if not isinstance(index, int):
            raise NetworkError(
                f"Malformed embeddings response: item {position} has a non-integer index"
            )
        pairs.append((index, tuple(vector)))
    return pairs


class OpenRouterClient:
    """Resilient client for OpenRouter's OpenAI-compatible API.

    ``chat`` is a single raw attempt. ``chat_json`` and
    ``chat_json_validated`` run the retry controller, extracting (and
    validating) JSON from each response until one succeeds or the retry
    budget is spent.

    The client never reads the environment; use ``create_client()`` for that.

    Example:
        async with create_client() as client:
            result = await client.chat_json_validated(request, MyModel)
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
        telemetry: TelemetryContextProtocol | None = None,
        circuit_breaker: CircuitBreaker | None = None,
        sleep: Sleeper | None = None,
        rng: RandomSource | None = None,
    ):
        self.config = config
        self.tele = telemetry or TelemetryContext()
        self.circuit_breaker = circuit_breaker
        self._transport = OpenRouterTransport(config, http_client)
        self._sleep = sleep
        self._rng = rng
        log.debug("OpenRouterClient initialized: %s", config)

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        await self._transport.aclose()

    def _timeout_ms(self, request: ChatRequest | EmbeddingRequest) -> int:
        return request.timeout_ms or self.config.default_timeout_ms

    async def _guarded[T](self, call: Callable[[], Awaitable[T]]) -> T:
        """Run one logical call through the circuit breaker, when configured."""
        if self.circuit_breaker is None:
            return await call()
        return await self.circuit_breaker.call(call)

    async def chat(
        self, request: ChatRequest, cancel: CancellationToken | None = None
    ) -> ChatResponse:
        """Send one chat completion and return the raw text, without retries."""
        return await self._guarded(lambda: self._chat(request, cancel))

    async def _chat(
        self, request: ChatRequest, cancel: CancellationToken | None = None
    ) -> ChatResponse:
        with self.tele("chat", model=request.model):
            data = await self._transport.post_json(
                CHAT_COMPLETIONS_PATH,
                build_chat_body(request),
                timeout_ms=self._timeout_ms(request),
                cancel=cancel,
            )
            response = parse_chat_response(request.model, data)
            self.tele.count("tokens", response.usage.total_tokens)
            return response

    def _controller(self) -> RetryController:
        # Attempts bypass the breaker; the whole run counts as one call.
        return RetryController(
            self._chat, sleep=self._sleep, rng=self._rng, telemetry=self.tele
        )

    def _budget(self, max_retries: int | None) -> RetryBudget:
        retries = self.config.max_retries if max_retries is None else max_retries
        return RetryBudget.from_retries(retries)

    async def chat_json(
        self,
        request: ChatRequest,
        max_retries: int | None = None,
        cancel: CancellationToken | None = None,
    ) -> JSONResponse[Any]:
        """Request JSON and return the first extractable object or array.

        No schema is applied. Usage and cost cover every attempt.

        Raises:
            ExtractionError: No attempt produced JSON.
            APIError: A non-retryable HTTP error, or the last retryable one.
        """
        result = await self._guarded(
            lambda: self._controller().run(
                request, None, self._budget(max_retries), cancel, feedback=False
            )
        )
        return JSONResponse(data=result.data, usage=result.usage, cost=result.cost)

    async def chat_json_validated(
        self,
        request: ChatRequest,
        schema: Any,
        max_retries: int | None = None,
        cancel: CancellationToken | None = None,
    ) -> ValidatedResponse[Any]:
        """Request JSON and validate it against ``schema``.

        ``schema`` is any object with ``safe_parse`` or anything
        ``pydantic.TypeAdapter`` accepts, such as a ``BaseModel`` subclass.
        Failures are fed back to the model on the next attempt.

        Raises:
            SchemaValidationError: The last attempt's value violated ``schema``.
            ExtractionError: The last attempt produced no JSON.
            APIError: A non-retryable HTTP error, or the last retryable one.
            RequestTimeoutError: The last attempt timed out.
            RequestCancelledError: ``cancel`` fired.
            CircuitOpenError: The circuit breaker is open; nothing was sent.
        """
        return await self._guarded(
            lambda: self._controller().run(
                request, as_schema(schema), self._budget(max_retries), cancel
            )
        )

    async def chat_stream(
        self, request: ChatRequest, cancel: CancellationToken | None = None
    ) -> AsyncIterator[str]:
        """Yield content deltas as they arrive over server-sent events.

        JSON mode is never requested while streaming and no usage is reported.
        """
        body = build_chat_body(request, stream=True)
        stream = self._transport.stream_lines(
            CHAT_COMPLETIONS_PATH,
            body,
            timeout_ms=self._timeout_ms(request),
            cancel=cancel,
        )
        async with aclosing(stream) as lines:
            async for raw_line in lines:
                line = raw_line.strip()
                if not line.startswith("data:"):
                    continue
                payload = line[5:].strip()
                if payload == "[DONE]":
                    return
                delta = _stream_delta(payload)
                if delta:
                    yield delta

    async def embeddings(
        self, request: EmbeddingRequest, cancel: CancellationToken | None = None
    ) -> EmbeddingResponse:
        """Embed one or more texts; results follow input order.

        Raises:
            NetworkError: The response body does not carry a list of
                embedding items.
        """
        data = await self._guarded(
            lambda: self._transport.post_json(
                EMBEDDINGS_PATH,
                {"model": request.model, "input": request.inputs},
                timeout_ms=self._timeout_ms(request),
                cancel=cancel,
                error_label="OpenRouter Embeddings API error",
            )
        )
        ordered = sorted(_embedding_items(data), key=lambda item: item[0])
        usage = data.get("usage") or {}
        prompt = int(usage.get("prompt_tokens") or 0)
        total = int(usage.get("total_tokens") or prompt)
        return EmbeddingResponse(
            embeddings=tuple(vector for _, vector in ordered),
            usage=Usage(prompt_tokens=prompt, completion_tokens=0, total_tokens=total),
            cost=estimate_cost(request.model, prompt, 0),
        )


def create_client(
    config: ClientConfig | None = None, **client_kwargs: Any
) -> OpenRouterClient:
    """Create a client, resolving configuration from the environment if needed.

    This is the only place where ambient configuration is read.

    Raises:
        ConfigurationError: No config was given and ``OPENROUTER_API_KEY`` is unset.
    """
    final_config = config if config is not None else resolve_config()
    return OpenRouterClient(final_config, **client_kwargs)
