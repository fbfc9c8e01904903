"""Classification of attempt failures into retryable and fatal classes"""  # noqa: D415

from openrouter_structured.core.types import ErrorClass, ErrorKind
from openrouter_structured.exceptions import (
    APIError,
    ExtractionError,
    RequestTimeoutError,
    SchemaValidationError,
)

RATE_LIMIT_STATUS = 429


def classify_error(error: BaseException) -> ErrorClass:
    """Map any failure to exactly one ``ErrorClass``.

    Timeouts, 5xx and network failures, 429, and extraction or validation
    failures are retryable. Every other 4xx, and anything unrecognized, is a
    fatal ``CLIENT_ERROR``.
    """
    if isinstance(error, RequestTimeoutError):
        return ErrorClass(ErrorKind.TIMEOUT)

    if isinstance(error, APIError):
        status = error.status_code
        if status == RATE_LIMIT_STATUS:
            return ErrorClass(ErrorKind.RATE_LIMITED, status)
        if status is None or status >= 500:
            return ErrorClass(ErrorKind.SERVER_ERROR, status)
        return ErrorClass(ErrorKind.CLIENT_ERROR, status)

    if isinstance(error, ExtractionError):
        return ErrorClass(ErrorKind.PARSE_FAILURE)

    if isinstance(error, SchemaValidationError):
        return ErrorClass(ErrorKind.VALIDATION_FAILURE)

    return ErrorClass(ErrorKind.CLIENT_ERROR)


def is_retryable(error: BaseException) -> bool:
    """Return whether another attempt may succeed after ``error``."""
    return classify_error(error).retryable
