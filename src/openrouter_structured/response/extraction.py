"""JSON extraction from noisy model output.

Runs an ordered cascade of strategies over the raw text and returns the first
one that yields a JSON object or array:

  1. Direct parse of the trimmed text
  2. Balanced object when the text starts with ``{``
  3. Balanced array when the text starts with ``[``
  4. First fenced code block (optionally tagged ``json``)
  5. Balanced object from the first ``{``
  6. Balanced array from the first ``[``
  7. Repair of the tail starting at the first ``{``
  8. Repair of the tail starting at the first ``[`` (only with no ``{`` before it)
  9. Greedy slice from the first opener to the last closer, repaired

Object strategies (5, 7) always run before array strategies (6, 8), wherever
the delimiters sit in the text. Strategies are tried in order, not ranked.
"""

from __future__ import annotations

from collections.abc import Callable
import json
import logging
import re
from typing import Any

from openrouter_structured.core.types import (
    Balanced,
    ExtractionCandidate,
    ExtractionResult,
    NotFound,
    Strategy,
)

from .repair import repair
from .scanner import scan, scan_from

log = logging.getLogger(__name__)

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)```")

_EMPTY_INPUT = NotFound("Input was empty or not a string")
_ALL_FAILED = NotFound()


def looks_like_json(text: Any) -> bool:
    """True when ``text`` parses and its root is an object or array."""
    if not text or not isinstance(text, str):
        return False
    try:
        parsed = json.loads(text)
    except (ValueError, RecursionError):
        return False
    return isinstance(parsed, dict | list)


def _balanced_text(result: object) -> str | None:
    return result.text if isinstance(result, Balanced) else None


def _fenced_block(text: str) -> str | None:
    match = _FENCED_BLOCK.search(text)
    if match is None:
        return None
    block = match.group(1).strip()
    if looks_like_json(block):
        return block
    if block.startswith("{"):
        return _balanced_text(scan(block, "{", "}"))
    return None


def _repaired_tail(text: str, start: int) -> str | None:
    if start < 0:
        return None
    return repair(text[start:])


def _greedy(text: str, first_brace: int, first_bracket: int) -> str | None:
    openers = [i for i in (first_brace, first_bracket) if i != -1]
    if not openers:
        return None
    first_open = min(openers)
    last_close = max(text.rfind("}"), text.rfind("]"))
    if last_close <= first_open:
        return None
    return repair(text[first_open : last_close + 1])


def extract(raw: Any) -> ExtractionResult:
    """Locate a JSON object or array in ``raw`` model output.

    Pure and deterministic. Returns ``NotFound`` immediately for empty,
    whitespace-only or non-string input.
    """
    if not raw or not isinstance(raw, str):
        return _EMPTY_INPUT

    trimmed = raw.strip()
    if not trimmed:
        return _EMPTY_INPUT

    first_brace = trimmed.find("{")
    first_bracket = trimmed.find("[")
    array_repair_allowed = first_bracket != -1 and (
        first_brace == -1 or first_bracket < first_brace
    )

    strategies: list[tuple[Strategy, Callable[[], str | None]]] = [
        (Strategy.DIRECT, lambda: trimmed),
        (
            Strategy.BALANCED_OBJECT,
            lambda: _balanced_text(scan(trimmed, "{", "}")),
        ),
        (
            Strategy.BALANCED_ARRAY,
            lambda: _balanced_text(scan(trimmed, "[", "]")),
        ),
        # Fences are searched in the untrimmed text.
        (Strategy.FENCED_BLOCK, lambda: _fenced_block(raw)),
        (
            Strategy.FIRST_BRACE,
            lambda: _balanced_text(scan_from(trimmed, first_brace, "{", "}")),
        ),
        (
            Strategy.FIRST_BRACKET,
            lambda: _balanced_text(scan_from(trimmed, first_bracket, "[", "]")),
        ),
        (Strategy.REPAIR_OBJECT, lambda: _repaired_tail(trimmed, first_brace)),
        (
            Strategy.REPAIR_ARRAY,
            lambda: _repaired_tail(trimmed, first_bracket)
            if array_repair_allowed
            else None,
        ),
        (
            Strategy.GREEDY_REPAIR,
            lambda: _greedy(trimmed, first_brace, first_bracket),
        ),
    ]

    for strategy, attempt in strategies:
        candidate = attempt()
        if candidate is not None and looks_like_json(candidate):
            log.debug("JSON extraction succeeded with strategy %s", strategy.value)
            return ExtractionCandidate(text=candidate, strategy=strategy)

    log.debug("JSON extraction failed: all strategies exhausted")
    return _ALL_FAILED
