"""Exceptions raised across the public client boundary.

Every failure a caller can observe is one of these classes. Expected outcomes
inside the pipeline (no JSON found, schema mismatch) travel as result variants
and only become exceptions once an attempt has definitively failed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from openrouter_structured.core.types import AttemptRecord, FieldViolation

PREVIEW_CHARS = 500


class OpenRouterError(Exception):
    """Base exception for the structured-output client"""  # noqa: D415

    def __init__(self, message: str):  # noqa: D107
        super().__init__(message)
        self.message = message
        self.attempts: tuple[AttemptRecord, ...] = ()

    def with_attempts(self, attempts: tuple[AttemptRecord, ...]) -> OpenRouterError:
        """Attach the ordered attempt history and return self for raising."""
        self.attempts = attempts
        return self

    def __str__(self) -> str:
        if not self.attempts:
            return self.message
        lines = [
            f"{self.message}",
            f"Failed after {len(self.attempts)} attempt(s):",
        ]
        lines.extend(
            f"  [{record.index + 1}] {record.describe()}" for record in self.attempts
        )
        return "\n".join(lines)


class ConfigurationError(OpenRouterError):
    """Raised when client configuration is missing or invalid"""  # noqa: D415


class APIError(OpenRouterError):
    """Raised when the completion endpoint answers with an error status"""  # noqa: D415

    def __init__(self, status_code: int | None, message: str):  # noqa: D107
        super().__init__(message)
        self.status_code = status_code


class NetworkError(APIError):
    """Raised when the request never produced an HTTP response"""  # noqa: D415

    def __init__(self, message: str):  # noqa: D107
        super().__init__(None, message)


class RequestTimeoutError(OpenRouterError):
    """Raised when a request exceeds its timeout"""  # noqa: D415

    def __init__(self, timeout_ms: int, message: str | None = None):  # noqa: D107
        super().__init__(message or f"Request timed out after {timeout_ms}ms")
        self.timeout_ms = timeout_ms


class ExtractionError(OpenRouterError):
    """Raised when no JSON value could be located in a model response"""  # noqa: D415

    def __init__(self, raw_text: str, message: str | None = None):  # noqa: D107
        self.preview = (raw_text or "")[:PREVIEW_CHARS]
        super().__init__(
            message or f"Failed to extract valid JSON from response: {self.preview!r}"
        )


class SchemaValidationError(OpenRouterError):
    """Raised when extracted JSON does not satisfy the caller's schema"""  # noqa: D415

    def __init__(self, violations: tuple[FieldViolation, ...]):  # noqa: D107
        self.violations = tuple(violations)
        details = "; ".join(v.describe() for v in self.violations) or "unknown error"
        super().__init__(f"Schema validation failed: {details}")


class RequestCancelledError(OpenRouterError):
    """Raised when the caller's cancellation token fires mid-call"""  # noqa: D415

    def __init__(self, message: str = "Request cancelled by caller"):  # noqa: D107
        super().__init__(message)


class CircuitOpenError(OpenRouterError):
    """Raised when a circuit breaker rejects a call during its cooldown"""  # noqa: D415

    def __init__(self, circuit_name: str, retry_in_seconds: int):  # noqa: D107
        super().__init__(
            f"Circuit breaker '{circuit_name}' is open. Retry in {retry_in_seconds}s"
        )
        self.circuit_name = circuit_name
        self.retry_in_seconds = retry_in_seconds
