"""Prompt blocks appended to JSON requests."""

from .json_output import (
    ERROR_FEEDBACK_TEMPLATE,
    FIRST_ATTEMPT_INSTRUCTION,
    RETRY_INSTRUCTION,
    build_json_messages,
    json_instruction,
)

__all__ = [
    "ERROR_FEEDBACK_TEMPLATE",
    "FIRST_ATTEMPT_INSTRUCTION",
    "RETRY_INSTRUCTION",
    "build_json_messages",
    "json_instruction",
]
