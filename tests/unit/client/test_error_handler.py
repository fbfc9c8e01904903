import pytest

from openrouter_structured.client.error_handler import classify_error, is_retryable
from openrouter_structured.core.types import ErrorClass, ErrorKind, FieldViolation
from openrouter_structured.exceptions import (
    APIError,
    CircuitOpenError,
    ExtractionError,
    NetworkError,
    RequestTimeoutError,
    SchemaValidationError,
)

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    ("error", "expected", "retryable"),
    [
        (RequestTimeoutError(45_000), ErrorClass(ErrorKind.TIMEOUT), True),
        (APIError(429, "slow down"), ErrorClass(ErrorKind.RATE_LIMITED, 429), True),
        (APIError(500, "boom"), ErrorClass(ErrorKind.SERVER_ERROR, 500), True),
        (APIError(503, "unavailable"), ErrorClass(ErrorKind.SERVER_ERROR, 503), True),
        (NetworkError("reset"), ErrorClass(ErrorKind.SERVER_ERROR), True),
        (APIError(400, "bad"), ErrorClass(ErrorKind.CLIENT_ERROR, 400), False),
        (APIError(401, "auth"), ErrorClass(ErrorKind.CLIENT_ERROR, 401), False),
        (APIError(404, "missing"), ErrorClass(ErrorKind.CLIENT_ERROR, 404), False),
        (ExtractionError("prose"), ErrorClass(ErrorKind.PARSE_FAILURE), True),
        (
            SchemaValidationError((FieldViolation("a", "required"),)),
            ErrorClass(ErrorKind.VALIDATION_FAILURE),
            True,
        ),
        (CircuitOpenError("openrouter", 12), ErrorClass(ErrorKind.CLIENT_ERROR), False),
        (ValueError("unexpected"), ErrorClass(ErrorKind.CLIENT_ERROR), False),
    ],
)
def test_classification_table(error, expected, retryable):
    assert classify_error(error) == expected
    assert is_retryable(error) is retryable


def test_error_class_renders_status():
    assert str(ErrorClass(ErrorKind.RATE_LIMITED, 429)) == "rate_limited(429)"
    assert str(ErrorClass(ErrorKind.TIMEOUT)) == "timeout"
