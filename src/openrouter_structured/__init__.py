"""Resilient structured-output client for OpenRouter."""

import importlib.metadata
import logging

from openrouter_structured.client import CircuitBreaker, RetryBudget, RetryController
from openrouter_structured.config import ClientConfig, resolve_config
from openrouter_structured.core.models import Models, estimate_cost, extract_citations
from openrouter_structured.core.types import (
    CancellationToken,
    ChatMessage,
    ChatRequest,
    ChatResponse,
    Citation,
    EmbeddingRequest,
    EmbeddingResponse,
    ExtractionCandidate,
    FieldViolation,
    Invalid,
    JSONResponse,
    NotFound,
    ReasoningOptions,
    Strategy,
    Usage,
    Valid,
    ValidatedResponse,
)
from openrouter_structured.exceptions import (
    APIError,
    CircuitOpenError,
    ConfigurationError,
    ExtractionError,
    NetworkError,
    OpenRouterError,
    RequestCancelledError,
    RequestTimeoutError,
    SchemaValidationError,
)
from openrouter_structured.openrouter_client import OpenRouterClient, create_client
from openrouter_structured.response import extract, repair, scan, validate
from openrouter_structured.telemetry import TelemetryContext, TelemetryReporter

# Version handling
try:
    __version__ = importlib.metadata.version("openrouter-structured")
except importlib.metadata.PackageNotFoundError:
    __version__ = "development"

# Library logging stays silent unless the application configures handlers.
logging.getLogger(__name__).addHandler(logging.NullHandler())

# Public API
__all__ = [  # noqa: RUF022
    # Client
    "OpenRouterClient",
    "create_client",
    "ClientConfig",
    "resolve_config",
    # Requests and responses
    "ChatMessage",
    "ChatRequest",
    "ReasoningOptions",
    "EmbeddingRequest",
    "ChatResponse",
    "JSONResponse",
    "ValidatedResponse",
    "EmbeddingResponse",
    "Usage",
    "Citation",
    "CancellationToken",
    # Pure response processing
    "scan",
    "extract",
    "repair",
    "validate",
    "ExtractionCandidate",
    "NotFound",
    "Strategy",
    "Valid",
    "Invalid",
    "FieldViolation",
    # Resilience
    "RetryController",
    "RetryBudget",
    "CircuitBreaker",
    # Models
    "Models",
    "estimate_cost",
    "extract_citations",
    # Telemetry (extension points)
    "TelemetryContext",
    "TelemetryReporter",
    # Exceptions
    "OpenRouterError",
    "ConfigurationError",
    "APIError",
    "NetworkError",
    "RequestTimeoutError",
    "ExtractionError",
    "SchemaValidationError",
    "RequestCancelledError",
    "CircuitOpenError",
]
