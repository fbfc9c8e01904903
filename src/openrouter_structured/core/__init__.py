"""Core data types and model registry."""

from openrouter_structured.core.models import (
    MODEL_COSTS,
    ModelCost,
    Models,
    estimate_cost,
    extract_citations,
    has_web_search,
    supports_json_mode,
    supports_reasoning,
)
from openrouter_structured.core.types import (
    AttemptRecord,
    Balanced,
    CancellationToken,
    ChatMessage,
    ChatRequest,
    ChatResponse,
    Citation,
    EmbeddingRequest,
    EmbeddingResponse,
    ErrorClass,
    ErrorKind,
    ExtractionCandidate,
    ExtractionResult,
    Failure,
    FieldViolation,
    Invalid,
    JSONResponse,
    NotFound,
    ReasoningOptions,
    Result,
    ScanResult,
    SearchResult,
    Strategy,
    Success,
    Unbalanced,
    Usage,
    Valid,
    ValidatedResponse,
    ValidationOutcome,
)

__all__ = [  # noqa: RUF022
    # Results
    "Success",
    "Failure",
    "Result",
    # Requests / responses
    "ChatMessage",
    "ChatRequest",
    "ReasoningOptions",
    "EmbeddingRequest",
    "Usage",
    "ChatResponse",
    "JSONResponse",
    "ValidatedResponse",
    "EmbeddingResponse",
    "SearchResult",
    "Citation",
    # Extraction / validation
    "Balanced",
    "Unbalanced",
    "ScanResult",
    "Strategy",
    "ExtractionCandidate",
    "NotFound",
    "ExtractionResult",
    "FieldViolation",
    "Valid",
    "Invalid",
    "ValidationOutcome",
    # Retry bookkeeping
    "ErrorKind",
    "ErrorClass",
    "AttemptRecord",
    "CancellationToken",
    # Models
    "Models",
    "ModelCost",
    "MODEL_COSTS",
    "estimate_cost",
    "supports_reasoning",
    "has_web_search",
    "supports_json_mode",
    "extract_citations",
]
