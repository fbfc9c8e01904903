"""Balanced delimiter scanning for JSON embedded in free text."""

from __future__ import annotations

from openrouter_structured.core.types import Balanced, ScanResult, Unbalanced

_UNBALANCED = Unbalanced()


def scan(text: str, open_char: str, close_char: str) -> ScanResult:
    """Return the first structurally balanced value at the start of ``text``.

    ``text`` must start with ``open_char``; the caller picks the offset, this
    function never searches. Delimiters inside string literals are ignored and
    a backslash consumes exactly one following character, so ``\\"`` and
    ``\\\\`` never flip string state incorrectly.

    Returns ``Unbalanced`` when the precondition fails or input ends with
    depth still above zero.
    """
    if not text.startswith(open_char):
        return _UNBALANCED

    depth = 0
    in_string = False
    escaped = False

    for i, char in enumerate(text):
        if escaped:
            escaped = False
            continue
        if char == "\\":
            escaped = True
            continue
        if char == '"':
            in_string = not in_string
            continue
        if in_string:
            continue

        if char == open_char:
            depth += 1
        elif char == close_char:
            depth -= 1
            if depth == 0:
                return Balanced(text[: i + 1])

    return _UNBALANCED


def scan_from(text: str, start: int, open_char: str, close_char: str) -> ScanResult:
    """Scan starting at ``start``; a negative offset means "not present"."""
    if start < 0:
        return _UNBALANCED
    return scan(text[start:], open_char, close_char)
