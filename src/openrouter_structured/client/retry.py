"""Retry controller for structured-output calls.

Drives one logical call through sequential attempts: request, extract,
validate, classify the failure, back off, and feed the failure back to the
model on the next attempt. Attempts never overlap because each prompt depends
on how the previous attempt failed.
"""

import asyncio
from collections.abc import Awaitable, Callable
from enum import Enum
import logging
from typing import Any

from openrouter_structured.constants import (
    DEFAULT_JSON_TEMPERATURE,
    RETRY_TEMPERATURE,
)
from openrouter_structured.core.types import (
    AttemptRecord,
    CancellationToken,
    ChatRequest,
    ChatResponse,
    ExtractionCandidate,
    Failure,
    Result,
    Success,
    Usage,
    Valid,
    ValidatedResponse,
)
from openrouter_structured.exceptions import (
    ExtractionError,
    OpenRouterError,
    RequestCancelledError,
    SchemaValidationError,
)
from openrouter_structured.prompts import build_json_messages
from openrouter_structured.response import extract, validate
from openrouter_structured.response.validation import Schema
from openrouter_structured.telemetry import TelemetryContext, TelemetryContextProtocol

from .backoff import RandomSource, RetryBudget
from .error_handler import classify_error
from .transport import race_cancellation

log = logging.getLogger(__name__)

type Sender = Callable[[ChatRequest, CancellationToken | None], Awaitable[ChatResponse]]
type Sleeper = Callable[[float], Awaitable[Any]]

EXTRACTION_FAILURE_MESSAGE = "Failed to extract valid JSON from response"


class RetryState(str, Enum):
    """Lifecycle of one controller run."""

    IDLE = "idle"
    ATTEMPTING = "attempting"
    RETRYING = "retrying"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"
    FAILED = "failed"
    CANCELLED = "cancelled"


def check_response(content: str, schema: Schema | None) -> Result[Any, OpenRouterError]:
    """Extract and validate one response body.

    Returns the validated value, or the extraction / validation error that
    the attempt ends in.
    """
    found = extract(content)
    if not isinstance(found, ExtractionCandidate):
        return Failure(ExtractionError(content, EXTRACTION_FAILURE_MESSAGE))

    outcome = validate(found.text, schema)
    if isinstance(outcome, Valid):
        return Success(outcome.value)
    return Failure(SchemaValidationError(outcome.violations))


def feedback_for(error: OpenRouterError) -> list[str]:
    """Lines describing ``error`` to the model on the next attempt."""
    if isinstance(error, ExtractionError):
        return [EXTRACTION_FAILURE_MESSAGE]
    if isinstance(error, SchemaValidationError):
        return [v.describe() for v in error.violations]
    return [f"Error: {error.message}"]


def _outcome_text(error: OpenRouterError) -> str:
    if isinstance(error, SchemaValidationError):
        return "; ".join(v.describe() for v in error.violations)
    return error.message


class RetryController:
    """Runs a JSON request until it validates or the budget is spent.

    ``send`` performs a single completion call. ``sleep`` takes seconds and
    ``rng`` feeds backoff jitter; both are injectable for deterministic tests.
    A controller instance serves one ``run`` at a time; ``state`` and
    ``history`` describe the most recent run.
    """

    def __init__(
        self,
        send: Sender,
        *,
        sleep: Sleeper | None = None,
        rng: RandomSource | None = None,
        telemetry: TelemetryContextProtocol | None = None,
    ):
        self._send = send
        self._sleep = sleep or asyncio.sleep
        self._rng = rng
        self._tele = telemetry or TelemetryContext()
        self._state = RetryState.IDLE
        self._history: list[AttemptRecord] = []

    @property
    def state(self) -> RetryState:
        return self._state

    @property
    def history(self) -> tuple[AttemptRecord, ...]:
        return tuple(self._history)

    async def run(
        self,
        request: ChatRequest,
        schema: Schema | None,
        budget: RetryBudget,
        cancel: CancellationToken | None = None,
        *,
        feedback: bool = True,
    ) -> ValidatedResponse[Any]:
        """Run ``request`` through the attempt loop.

        With ``schema=None`` any extracted JSON object or array is accepted.
        ``feedback=False`` keeps earlier failures out of later prompts.

        Raises:
            RequestCancelledError: ``cancel`` fired during a request or sleep.
            OpenRouterError: A fatal error, propagated as raised, or the last
                attempt's error once the budget is spent, carrying every
                attempt in ``attempts``.
        """
        self._state = RetryState.IDLE
        self._history = []
        usage = Usage()
        cost = 0.0
        previous_errors: list[str] = []
        attempt = 0

        with self._tele("structured", model=request.model):
            try:
                while True:
                    if attempt > 0:
                        self._state = RetryState.RETRYING
                        delay = budget.inter_attempt_delay(attempt - 1, self._rng)
                        log.info(
                            "Attempt %d/%d, waiting %.0fms",
                            attempt + 1,
                            budget.max_attempts,
                            delay,
                        )
                        await self._pause(delay, cancel)

                    self._state = RetryState.ATTEMPTING
                    messages = build_json_messages(
                        request.messages,
                        attempt,
                        previous_errors if feedback else (),
                    )
                    attempt_request = request.replace(
                        messages=messages,
                        json_mode=True,
                        temperature=(
                            RETRY_TEMPERATURE
                            if attempt > 0
                            else (
                                request.temperature
                                if request.temperature is not None
                                else DEFAULT_JSON_TEMPERATURE
                            )
                        ),
                    )

                    response: ChatResponse | None = None
                    with self._tele("attempt", attempt=attempt):
                        try:
                            response = await race_cancellation(
                                self._send(attempt_request, cancel), cancel
                            )
                        except RequestCancelledError:
                            raise
                        except OpenRouterError as e:
                            outcome: Result[Any, OpenRouterError] = Failure(e)
                        else:
                            usage = usage + response.usage
                            cost += response.cost
                            outcome = check_response(response.content, schema)

                    attempt_usage = response.usage if response else Usage()
                    response_text = response.content if response else None

                    if isinstance(outcome, Success):
                        self._history.append(
                            AttemptRecord(
                                attempt, messages, response_text, "ok", None, attempt_usage
                            )
                        )
                        self._state = RetryState.SUCCEEDED
                        self._tele.metric("attempts", attempt + 1)
                        return ValidatedResponse(
                            data=outcome.value,
                            usage=usage,
                            cost=cost,
                            validation_errors=tuple(
                                r.describe() for r in self._history[:-1]
                            ),
                        )

                    error = outcome.error
                    error_class = classify_error(error)
                    self._history.append(
                        AttemptRecord(
                            attempt,
                            messages,
                            response_text,
                            _outcome_text(error),
                            error_class,
                            attempt_usage,
                        )
                    )

                    if not error_class.retryable:
                        self._state = RetryState.FAILED
                        log.error(
                            "Attempt %d: non-retryable %s, stopping retries: %s",
                            attempt + 1,
                            error_class,
                            error.message,
                        )
                        raise error

                    log.warning(
                        "Attempt %d/%d failed (%s): %s",
                        attempt + 1,
                        budget.max_attempts,
                        error_class,
                        _outcome_text(error),
                    )

                    if attempt + 1 >= budget.max_attempts:
                        self._state = RetryState.EXHAUSTED
                        self._tele.metric("attempts", len(self._history))
                        raise error.with_attempts(self.history)

                    previous_errors = feedback_for(error)
                    if error_class.is_rate_limited:
                        delay = budget.rate_limit_delay(attempt, self._rng)
                        log.info("Rate limited (429), waiting %.0fms", delay)
                        await self._pause(delay, cancel)
                    attempt += 1
            except RequestCancelledError:
                self._state = RetryState.CANCELLED
                log.info("Call cancelled after %d attempt(s)", len(self._history))
                raise

    async def _pause(self, delay_ms: float, cancel: CancellationToken | None) -> None:
        self._tele.metric("backoff_ms", delay_ms)
        await race_cancellation(self._sleep(delay_ms / 1000), cancel)
