"""Best-effort repair of malformed or truncated JSON text.

The output is never trusted: callers re-validate whatever ``repair`` returns.
A property truncated right after its colon (``{"a": 1, "b":``) stays broken on
purpose; no value is ever invented for it.
"""

from __future__ import annotations

import re

_TRAILING_COMMA = re.compile(r",(\s*[}\]])")
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_DANGLING_KEY = re.compile(r',\s*"[^"]*":\s*$')
_DANGLING_COMMA = re.compile(r",\s*$")
_CLOSER_AFTER_QUOTE = re.compile(r"^[}\],]")

_CONTROL_ESCAPES = {"\n": "\\n", "\r": "\\r", "\t": "\\t"}


def remove_trailing_commas(text: str) -> str:
    return _TRAILING_COMMA.sub(r"\1", text)


def escape_control_characters(text: str) -> str:
    """Escape newline, carriage return and tab; drop other control characters.

    Applied to the whole text regardless of string context.
    """
    return _CONTROL_CHARS.sub(lambda m: _CONTROL_ESCAPES.get(m.group(0), ""), text)


def _open_counts(text: str) -> tuple[int, int, bool]:
    """Net-open braces, net-open brackets, and whether the scan ends in a string."""
    open_braces = 0
    open_brackets = 0
    in_string = False
    escaped = False

    for char in text:
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

        if char == "{":
            open_braces += 1
        elif char == "}":
            open_braces -= 1
        elif char == "[":
            open_brackets += 1
        elif char == "]":
            open_brackets -= 1

    return open_braces, open_brackets, in_string


def _close_open_string(text: str) -> str:
    # Only close when a value was cut mid-way, not when the quote is followed
    # by structure or nothing at all.
    last_quote = text.rfind('"')
    if last_quote <= 0:
        return text
    after_quote = text[last_quote + 1 :].strip()
    if after_quote and not _CLOSER_AFTER_QUOTE.match(after_quote):
        return text + '"'
    return text


def repair(text: str) -> str:
    """Apply the repair passes in order and return the transformed text."""
    if not isinstance(text, str):
        return ""

    repaired = remove_trailing_commas(text)
    repaired = escape_control_characters(repaired)

    open_braces, open_brackets, in_string = _open_counts(repaired)
    if in_string:
        repaired = _close_open_string(repaired)

    # Brackets close before braces.
    repaired += "]" * max(0, open_brackets)
    repaired += "}" * max(0, open_braces)

    repaired = _DANGLING_KEY.sub("", repaired)
    repaired = _DANGLING_COMMA.sub("", repaired)

    return remove_trailing_commas(repaired)
