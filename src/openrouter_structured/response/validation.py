"""Schema validation of extracted JSON text.

A schema is anything with ``safe_parse(value) -> Valid | Invalid``. Pydantic
models and any other type understood by ``pydantic.TypeAdapter`` are wrapped
in ``PydanticSchema`` automatically, which turns pydantic's error list into
field-level violations with stable, human-readable messages.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol, runtime_checkable

from pydantic import TypeAdapter, ValidationError

from openrouter_structured.core.types import (
    FieldViolation,
    Invalid,
    Valid,
    ValidationOutcome,
)

log = logging.getLogger(__name__)


@runtime_checkable
class Schema(Protocol):
    """Structural contract for caller-supplied schemas."""

    def safe_parse(self, value: Any) -> ValidationOutcome: ...  # noqa: D102


_ENUM_ERRORS = frozenset({"enum", "literal_error", "union_tag_invalid"})
_MIN_BOUNDS = {
    "greater_than": "gt",
    "greater_than_equal": "ge",
    "too_short": "min_length",
    "string_too_short": "min_length",
}
_MAX_BOUNDS = {
    "less_than": "lt",
    "less_than_equal": "le",
    "too_long": "max_length",
    "string_too_long": "max_length",
}
# pydantic type prefixes that name JSON containers differently
_EXPECTED_NAMES = {
    "model": "object",
    "dict": "object",
    "model_attributes": "object",
    "list": "array",
    "tuple": "array",
    "set": "array",
    "int": "integer",
    "float": "number",
    "decimal": "number",
    "bool": "boolean",
    "string": "string",
    "none": "null",
}


def json_type_name(value: Any) -> str:
    """Name of a parsed JSON value's type, in JSON terms."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _expected_type(error_type: str) -> str | None:
    for suffix in ("_type", "_parsing"):
        if error_type.endswith(suffix):
            prefix = error_type.removesuffix(suffix)
            return _EXPECTED_NAMES.get(prefix, prefix)
    return None


def format_pydantic_error(error: dict[str, Any]) -> FieldViolation:
    """Map one pydantic error dict to a ``FieldViolation``."""
    path = ".".join(str(part) for part in error.get("loc", ()))
    error_type = error.get("type", "")
    ctx = error.get("ctx") or {}

    if error_type == "missing":
        return FieldViolation(path, "required")

    if error_type in _ENUM_ERRORS:
        allowed = ctx.get("expected") or ctx.get("expected_tags")
        if allowed:
            return FieldViolation(
                path, f"invalid value, expected one of: {allowed}"
            )
        return FieldViolation(path, "invalid value")

    if error_type in _MIN_BOUNDS:
        bound = ctx.get(_MIN_BOUNDS[error_type])
        return FieldViolation(path, f"too small (minimum: {bound})")

    if error_type in _MAX_BOUNDS:
        bound = ctx.get(_MAX_BOUNDS[error_type])
        return FieldViolation(path, f"too large (maximum: {bound})")

    expected = _expected_type(error_type)
    if expected is not None:
        actual = json_type_name(error.get("input"))
        return FieldViolation(path, f"expected {expected}, got {actual}")

    return FieldViolation(path, error.get("msg", "invalid"))


class PydanticSchema:
    """Adapts a pydantic model (or any ``TypeAdapter`` target) to ``Schema``."""

    def __init__(self, target: Any):  # noqa: D107
        self.target = target
        self._adapter: TypeAdapter[Any] = TypeAdapter(target)

    def safe_parse(self, value: Any) -> ValidationOutcome:
        try:
            return Valid(self._adapter.validate_python(value))
        except ValidationError as e:
            return Invalid(tuple(format_pydantic_error(err) for err in e.errors()))

    def __repr__(self) -> str:
        name = getattr(self.target, "__name__", repr(self.target))
        return f"PydanticSchema({name})"


def as_schema(schema: Any) -> Schema | None:
    """Return ``schema`` as a ``Schema``, wrapping pydantic-compatible types."""
    if schema is None or isinstance(schema, Schema):
        return schema
    return PydanticSchema(schema)


def parse_failure(error: Exception) -> Invalid:
    return Invalid((FieldViolation("", f"JSON parse error: {error}"),))


def validate(text: str, schema: Any = None) -> ValidationOutcome:
    """Parse ``text`` and check it against ``schema``.

    With ``schema=None`` any successfully parsed value is ``Valid``.
    """
    try:
        parsed = json.loads(text)
    except (ValueError, TypeError, RecursionError) as e:
        log.debug("Validation parse failure: %s", e)
        return parse_failure(e)

    resolved = as_schema(schema)
    if resolved is None:
        return Valid(parsed)

    outcome = resolved.safe_parse(parsed)
    if isinstance(outcome, Invalid):
        log.debug(
            "Schema %r rejected value with %d violation(s)",
            resolved,
            len(outcome.violations),
        )
    return outcome
