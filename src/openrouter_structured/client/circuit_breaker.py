"""Circuit breaker guarding calls to a failing upstream"""  # noqa: D415

from collections.abc import Awaitable, Callable
from enum import Enum
import logging
import math
import time

from openrouter_structured.constants import (
    CIRCUIT_FAILURE_THRESHOLD,
    CIRCUIT_RESET_TIMEOUT_MS,
)
from openrouter_structured.exceptions import CircuitOpenError, RequestCancelledError

log = logging.getLogger(__name__)


class CircuitState(str, Enum):
    """Circuit breaker states."""

    CLOSED = "CLOSED"
    OPEN = "OPEN"
    HALF_OPEN = "HALF_OPEN"


class CircuitBreaker:
    """Stops calling an upstream after consecutive failures.

    CLOSED lets calls through and opens after ``failure_threshold`` consecutive
    failures. OPEN rejects calls with ``CircuitOpenError`` until
    ``reset_timeout_ms`` has passed since the last failure, then lets one trial
    call through in HALF_OPEN. A successful trial closes the circuit, a failed
    one opens it again.
    """

    def __init__(
        self,
        name: str,
        failure_threshold: int = CIRCUIT_FAILURE_THRESHOLD,
        reset_timeout_ms: int = CIRCUIT_RESET_TIMEOUT_MS,
        clock: Callable[[], float] = time.monotonic,
    ):
        if failure_threshold < 1:
            raise ValueError("failure_threshold must be at least 1")
        self.name = name
        self.failure_threshold = failure_threshold
        self.reset_timeout_ms = reset_timeout_ms
        self._clock = clock
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._last_failure_at = 0.0

    @property
    def state(self) -> CircuitState:
        return self._state

    @property
    def failure_count(self) -> int:
        return self._failure_count

    async def call[T](self, fn: Callable[[], Awaitable[T]]) -> T:
        """Run ``fn`` under the breaker, re-raising whatever it raises."""
        if self._state is CircuitState.OPEN:
            elapsed_ms = (self._clock() - self._last_failure_at) * 1000
            if elapsed_ms >= self.reset_timeout_ms:
                self._transition(CircuitState.HALF_OPEN)
            else:
                retry_in = math.ceil((self.reset_timeout_ms - elapsed_ms) / 1000)
                raise CircuitOpenError(self.name, retry_in)

        try:
            result = await fn()
        except RequestCancelledError:
            raise
        except Exception:
            self._record_failure()
            raise

        if self._state is CircuitState.HALF_OPEN:
            self._transition(CircuitState.CLOSED)
        self._failure_count = 0
        return result

    def reset(self) -> None:
        """Force the circuit closed and forget past failures."""
        previous = self._state
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._last_failure_at = 0.0
        if previous is not CircuitState.CLOSED:
            log.info(
                "Circuit '%s' changed: %s -> CLOSED (forced reset)",
                self.name,
                previous.value,
            )

    def _record_failure(self) -> None:
        self._failure_count += 1
        self._last_failure_at = self._clock()
        if self._state is CircuitState.HALF_OPEN or (
            self._state is CircuitState.CLOSED
            and self._failure_count >= self.failure_threshold
        ):
            self._transition(CircuitState.OPEN)

    def _transition(self, new_state: CircuitState) -> None:
        if self._state is not new_state:
            log.info(
                "Circuit '%s' changed: %s -> %s",
                self.name,
                self._state.value,
                new_state.value,
            )
            self._state = new_state
