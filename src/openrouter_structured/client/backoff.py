"""Exponential backoff with jitter and the per-call attempt budget."""

from collections.abc import Callable
from dataclasses import dataclass
import random

from openrouter_structured.constants import (
    BACKOFF_JITTER_MS,
    RATE_LIMIT_BASE_DELAY_MS,
    RATE_LIMIT_MAX_DELAY_MS,
    RETRY_BASE_DELAY_MS,
    RETRY_MAX_DELAY_MS,
)

type RandomSource = Callable[[], float]


def compute_backoff(
    attempt: int,
    base_delay_ms: float = RETRY_BASE_DELAY_MS,
    max_delay_ms: float = RETRY_MAX_DELAY_MS,
    jitter_ms: float = BACKOFF_JITTER_MS,
    rng: RandomSource | None = None,
) -> float:
    """Return ``min(max_delay, base_delay * 2**attempt + jitter)`` in ms.

    ``rng`` returns a float in ``[0, 1)``; it defaults to ``random.random``.
    """
    draw = (rng or random.random)()
    return min(base_delay_ms * (2**attempt) + draw * jitter_ms, max_delay_ms)


@dataclass(frozen=True, slots=True)
class RetryBudget:
    """Attempt budget and delay parameters for one controller run.

    ``max_attempts`` counts every attempt including the first, so it is always
    at least one. Attempt 0 never waits.
    """

    max_attempts: int
    base_delay_ms: float = RETRY_BASE_DELAY_MS
    max_delay_ms: float = RETRY_MAX_DELAY_MS
    rate_limit_base_delay_ms: float = RATE_LIMIT_BASE_DELAY_MS
    rate_limit_max_delay_ms: float = RATE_LIMIT_MAX_DELAY_MS
    jitter_ms: float = BACKOFF_JITTER_MS

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay_ms < 0 or self.rate_limit_base_delay_ms < 0:
            raise ValueError("delays must be non-negative")

    @classmethod
    def from_retries(cls, retries: int, **kwargs: float) -> "RetryBudget":
        """Budget allowing ``retries`` attempts after the first."""
        return cls(max_attempts=max(0, retries) + 1, **kwargs)  # type: ignore[arg-type]

    def inter_attempt_delay(self, attempt: int, rng: RandomSource | None = None) -> float:
        """Delay before attempt ``attempt + 1``; zero-based ``attempt``."""
        return compute_backoff(
            attempt, self.base_delay_ms, self.max_delay_ms, self.jitter_ms, rng
        )

    def rate_limit_delay(self, attempt: int, rng: RandomSource | None = None) -> float:
        """Extra wait after a 429 observed on zero-based ``attempt``."""
        return compute_backoff(
            attempt,
            self.rate_limit_base_delay_ms,
            self.rate_limit_max_delay_ms,
            self.jitter_ms,
            rng,
        )
