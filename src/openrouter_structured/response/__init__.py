"""Response processing: locate, repair and validate JSON in model output.

Every function in this package is pure; concurrent callers share no state.
"""

from .extraction import extract, looks_like_json
from .repair import repair
from .scanner import scan
from .validation import PydanticSchema, Schema, as_schema, validate

__all__ = [
    "PydanticSchema",
    "Schema",
    "as_schema",
    "extract",
    "looks_like_json",
    "repair",
    "scan",
    "validate",
]
