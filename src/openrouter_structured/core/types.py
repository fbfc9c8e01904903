"""Core data types that flow through a structured-output call.

Every type here lives for at most one logical call: requests and responses
are immutable value objects, and the extraction / validation outcomes are
explicit variants instead of exceptions so that "nothing found" and "schema
mismatch" stay ordinary data until the retry controller decides what they
mean.
"""

from __future__ import annotations

import asyncio
import dataclasses
from enum import Enum
import typing

from openrouter_structured.constants import DEFAULT_MAX_TOKENS

# --- Result Monad ---

TSuccess = typing.TypeVar("TSuccess")
TFailure = typing.TypeVar("TFailure", bound=Exception)


@dataclasses.dataclass(frozen=True, slots=True)
class Success[TSuccess]:
    """A successful attempt outcome."""

    value: TSuccess


@dataclasses.dataclass(frozen=True, slots=True)
class Failure[TFailure]:
    """A failed attempt outcome, containing the error."""

    error: TFailure


Result = Success[TSuccess] | Failure[TFailure]

# --- Requests ---

Role = typing.Literal["system", "user", "assistant"]
ReasoningEffort = typing.Literal["low", "medium", "high"]

MIN_REASONING_TOKENS = 1024


@dataclasses.dataclass(frozen=True, slots=True)
class ChatMessage:
    """A single chat message."""

    role: Role
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclasses.dataclass(frozen=True, slots=True)
class ReasoningOptions:
    """Reasoning/thinking parameters for models that support them.

    ``effort`` targets OpenAI o-series models; ``max_tokens`` targets
    Anthropic and Gemini thinking budgets and is clamped to a floor of 1024.
    """

    effort: ReasoningEffort | None = None
    max_tokens: int | None = None
    include: bool = False

    def to_payload(self) -> dict[str, typing.Any] | None:
        payload: dict[str, typing.Any] = {}
        if self.effort:
            payload["effort"] = self.effort
        if self.max_tokens:
            payload["max_tokens"] = max(MIN_REASONING_TOKENS, self.max_tokens)
        if self.include:
            payload["include"] = True
        return payload or None


def _coerce_messages(
    messages: typing.Iterable[ChatMessage | typing.Mapping[str, str]],
) -> tuple[ChatMessage, ...]:
    coerced: list[ChatMessage] = []
    for message in messages:
        if isinstance(message, ChatMessage):
            coerced.append(message)
        else:
            coerced.append(ChatMessage(role=message["role"], content=message["content"]))
    return tuple(coerced)


@dataclasses.dataclass(frozen=True, slots=True)
class ChatRequest:
    """Description of one chat-completion request.

    ``messages`` accepts ``ChatMessage`` instances or plain ``{"role", "content"}``
    mappings and is normalized to a tuple. ``timeout_ms`` of ``None`` means the
    client's configured default.
    """

    model: str
    messages: tuple[ChatMessage, ...]
    temperature: float | None = None
    max_tokens: int = DEFAULT_MAX_TOKENS
    json_mode: bool = False
    timeout_ms: int | None = None
    reasoning: ReasoningOptions | None = None

    def __post_init__(self) -> None:
        if not self.model:
            raise ValueError("model must be a non-empty string")
        object.__setattr__(self, "messages", _coerce_messages(self.messages))

    def replace(self, **changes: typing.Any) -> ChatRequest:
        return dataclasses.replace(self, **changes)


@dataclasses.dataclass(frozen=True, slots=True)
class EmbeddingRequest:
    """Embedding request for one or more input texts."""

    model: str
    input: str | tuple[str, ...]
    timeout_ms: int | None = None

    @property
    def inputs(self) -> list[str]:
        if isinstance(self.input, str):
            return [self.input]
        return list(self.input)


# --- Responses ---


@dataclasses.dataclass(frozen=True, slots=True)
class Usage:
    """Token usage; attempts add up with ``+``."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def __add__(self, other: Usage) -> Usage:
        if not isinstance(other, Usage):
            return NotImplemented
        return Usage(
            prompt_tokens=self.prompt_tokens + other.prompt_tokens,
            completion_tokens=self.completion_tokens + other.completion_tokens,
            total_tokens=self.total_tokens + other.total_tokens,
        )


@dataclasses.dataclass(frozen=True, slots=True)
class SearchResult:
    """Structured web-search citation returned by search-enabled models."""

    title: str
    url: str
    date: str | None = None
    snippet: str | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class Citation:
    """Normalized citation, independent of the response format it came from."""

    url: str
    title: str | None = None
    date: str | None = None
    snippet: str | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class ChatResponse:
    """Raw single-attempt chat completion."""

    content: str
    usage: Usage
    cost: float
    citations: tuple[str, ...] = ()
    search_results: tuple[SearchResult, ...] = ()


@dataclasses.dataclass(frozen=True, slots=True)
class JSONResponse[T]:
    """Extracted JSON value with usage accumulated over every attempt."""

    data: T
    usage: Usage
    cost: float


@dataclasses.dataclass(frozen=True, slots=True)
class ValidatedResponse[T]:
    """Schema-validated value with usage accumulated over every attempt.

    ``validation_errors`` holds the descriptions of earlier attempts that
    failed before this one succeeded.
    """

    data: T
    usage: Usage
    cost: float
    validation_errors: tuple[str, ...] = ()


@dataclasses.dataclass(frozen=True, slots=True)
class EmbeddingResponse:
    """Embeddings in input order."""

    embeddings: tuple[tuple[float, ...], ...]
    usage: Usage
    cost: float


# --- Scanner / extractor outcomes ---


@dataclasses.dataclass(frozen=True, slots=True)
class Balanced:
    """The structurally balanced prefix found by the scanner."""

    text: str


@dataclasses.dataclass(frozen=True, slots=True)
class Unbalanced:
    """The scanner reached end of input, or the input did not start with the opener."""


ScanResult = Balanced | Unbalanced


class Strategy(str, Enum):
    """Extraction strategies, in trial order."""

    DIRECT = "direct"
    BALANCED_OBJECT = "balanced_object"
    BALANCED_ARRAY = "balanced_array"
    FENCED_BLOCK = "fenced_block"
    FIRST_BRACE = "first_brace"
    FIRST_BRACKET = "first_bracket"
    REPAIR_OBJECT = "repair_object"
    REPAIR_ARRAY = "repair_array"
    GREEDY_REPAIR = "greedy_repair"


@dataclasses.dataclass(frozen=True, slots=True)
class ExtractionCandidate:
    """Syntactically valid JSON text and the strategy that produced it."""

    text: str
    strategy: Strategy


@dataclasses.dataclass(frozen=True, slots=True)
class NotFound:
    """No strategy produced a JSON object or array."""

    reason: str = "All extraction strategies failed"


ExtractionResult = ExtractionCandidate | NotFound

# --- Validation outcomes ---


@dataclasses.dataclass(frozen=True, slots=True)
class FieldViolation:
    """One schema violation; ``path`` is dot-separated, empty for the root."""

    path: str
    message: str

    def describe(self) -> str:
        prefix = f"Field '{self.path}'" if self.path else "Root"
        return f"{prefix}: {self.message}"


@dataclasses.dataclass(frozen=True, slots=True)
class Valid[T]:
    """The parsed value satisfied the schema."""

    value: T


@dataclasses.dataclass(frozen=True, slots=True)
class Invalid:
    """The text did not parse, or the parsed value violated the schema."""

    violations: tuple[FieldViolation, ...]

    def describe(self) -> list[str]:
        return [violation.describe() for violation in self.violations]


ValidationOutcome = Valid[typing.Any] | Invalid

# --- Retry bookkeeping ---


class ErrorKind(str, Enum):
    """Failure classes an attempt can end in."""

    TIMEOUT = "timeout"
    SERVER_ERROR = "server_error"
    RATE_LIMITED = "rate_limited"
    CLIENT_ERROR = "client_error"
    PARSE_FAILURE = "parse_failure"
    VALIDATION_FAILURE = "validation_failure"


_RETRYABLE_KINDS = frozenset(
    {
        ErrorKind.TIMEOUT,
        ErrorKind.SERVER_ERROR,
        ErrorKind.RATE_LIMITED,
        ErrorKind.PARSE_FAILURE,
        ErrorKind.VALIDATION_FAILURE,
    }
)


@dataclasses.dataclass(frozen=True, slots=True)
class ErrorClass:
    """Exactly one class per failed attempt, with the HTTP status when known."""

    kind: ErrorKind
    status: int | None = None

    @property
    def retryable(self) -> bool:
        return self.kind in _RETRYABLE_KINDS

    @property
    def is_rate_limited(self) -> bool:
        return self.kind is ErrorKind.RATE_LIMITED

    def __str__(self) -> str:
        if self.status is None:
            return self.kind.value
        return f"{self.kind.value}({self.status})"


@dataclasses.dataclass(frozen=True, slots=True)
class AttemptRecord:
    """What happened during one attempt of a controller run."""

    index: int
    request_messages: tuple[ChatMessage, ...]
    response_text: str | None
    outcome: str
    error_class: ErrorClass | None = None
    usage: Usage = dataclasses.field(default_factory=Usage)

    @property
    def succeeded(self) -> bool:
        return self.error_class is None

    def describe(self) -> str:
        if self.error_class is None:
            return self.outcome
        return f"{self.error_class}: {self.outcome}"


# --- Cancellation ---


class CancellationToken:
    """Caller-owned cancellation signal for one or more calls.

    Setting the token aborts any in-flight request and any pending backoff
    sleep of the calls it was passed to.
    """

    __slots__ = ("_event",)

    def __init__(self) -> None:
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()
