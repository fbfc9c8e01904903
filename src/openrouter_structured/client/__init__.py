"""Supporting components for OpenRouterClient

The main client lives at ``openrouter_structured.OpenRouterClient``; this
package holds the retry, backoff, transport and circuit-breaker pieces it is
built from.
"""  # noqa: D415

from .backoff import RetryBudget, compute_backoff
from .circuit_breaker import CircuitBreaker, CircuitState
from .error_handler import classify_error, is_retryable
from .retry import RetryController, RetryState, check_response
from .transport import OpenRouterTransport, race_cancellation

__all__ = [  # noqa: RUF022
    # Retry pipeline
    "RetryController",
    "RetryState",
    "RetryBudget",
    "check_response",
    "classify_error",
    "compute_backoff",
    "is_retryable",
    # Transport
    "OpenRouterTransport",
    "race_cancellation",
    # Resilience
    "CircuitBreaker",
    "CircuitState",
]
