"""Extraction cascade over noisy model output.

Each test names the strategy it expects to win, so a change in cascade order
shows up as a strategy mismatch rather than a silent behavior change.
"""

import json

import pytest

from openrouter_structured.core.types import ExtractionCandidate, NotFound, Strategy
from openrouter_structured.response.extraction import extract, looks_like_json

pytestmark = pytest.mark.unit


def _found(raw: str) -> ExtractionCandidate:
    result = extract(raw)
    assert isinstance(result, ExtractionCandidate), f"nothing extracted from {raw!r}"
    return result


class TestLooksLikeJson:
    @pytest.mark.parametrize("text", ['{"a": 1}', "[1, 2]", "{}", "[]"])
    def test_objects_and_arrays(self, text):
        assert looks_like_json(text)

    @pytest.mark.parametrize(
        "text", ["42", '"string"', "true", "null", "{not json}", "", None, 123]
    )
    def test_rejects_primitives_and_garbage(self, text):
        assert not looks_like_json(text)


class TestDirectParse:
    def test_object(self):
        result = _found('{"name": "test", "value": 123}')

        assert result.strategy is Strategy.DIRECT
        assert json.loads(result.text) == {"name": "test", "value": 123}

    def test_trims_surrounding_whitespace(self):
        assert _found('  \n {"a": 1} \n ').text == '{"a": 1}'

    @pytest.mark.parametrize("text", ["42", '"just a string"', "true", "null"])
    def test_primitive_roots_are_not_found(self, text):
        assert isinstance(extract(text), NotFound)

    @pytest.mark.parametrize(
        "value",
        [
            {"a": 1, "b": [1, 2, {"c": None}]},
            [1, "two", {"three": 3.5}],
            {"unicode": "café ✓ 日本", "escaped": 'quote " and \\ slash'},
            {},
            [],
        ],
    )
    def test_serialized_values_extract_unchanged(self, value):
        assert json.loads(_found(json.dumps(value)).text) == value


class TestBalancedStrategies:
    def test_object_with_trailing_text(self):
        result = _found('{"a": 1} explanation follows')

        assert result == ExtractionCandidate('{"a": 1}', Strategy.BALANCED_OBJECT)

    def test_array_with_trailing_text(self):
        result = _found("[1, 2, 3] done")

        assert result == ExtractionCandidate("[1, 2, 3]", Strategy.BALANCED_ARRAY)

    def test_braces_inside_string_values(self):
        assert _found('{"t": "a } b { c"} more').text == '{"t": "a } b { c"}'


class TestFencedBlock:
    def test_json_tagged_fence(self):
        result = _found('Here you go:\n```json\n{"in": "block"}\n```\nThanks')

        assert result == ExtractionCandidate('{"in": "block"}', Strategy.FENCED_BLOCK)

    def test_untagged_fence_with_array(self):
        assert _found("Result:\n```\n[1, 2]\n```").text == "[1, 2]"

    def test_extra_text_inside_fence_uses_balanced_scan(self):
        result = _found('```json\n{"a": 1} extra text inside block\n```')

        assert result == ExtractionCandidate('{"a": 1}', Strategy.FENCED_BLOCK)

    def test_pretty_printed_fenced_object(self):
        raw = (
            "Based on my analysis:\n\n```json\n{\n"
            '  "recommendations": [\n'
            '    {"priority": "high", "action": "Update dependencies"},\n'
            '    {"priority": "medium", "action": "Add error handling"}\n'
            "  ],\n"
            '  "confidence": 0.95\n'
            "}\n```\n\nLet me know."
        )

        parsed = json.loads(_found(raw).text)

        assert len(parsed["recommendations"]) == 2
        assert parsed["confidence"] == 0.95


class TestFirstDelimiter:
    def test_object_after_prose(self):
        result = _found('Here is the JSON: {"data": 123}')

        assert result == ExtractionCandidate('{"data": 123}', Strategy.FIRST_BRACE)

    def test_object_between_prose(self):
        raw = 'Intro {"outer": {"inner": [1, 2]}} end'

        assert _found(raw).text == '{"outer": {"inner": [1, 2]}}'

    def test_array_after_prose(self):
        result = _found("The ids are [4, 5, 6] as requested")

        assert result == ExtractionCandidate("[4, 5, 6]", Strategy.FIRST_BRACKET)

    def test_bracket_noise_before_object(self):
        assert _found('array[0] = {"valid": true} // comment').text == '{"valid": true}'

    def test_object_wins_even_when_array_comes_first(self):
        result = _found('Data [1, 2] then {"a": 1}')

        assert result.strategy is Strategy.FIRST_BRACE
        assert json.loads(result.text) == {"a": 1}

    def test_first_of_several_objects(self):
        assert _found('First {"a": 1} then {"b": 2}').text == '{"a": 1}'


class TestRepairStrategies:
    def test_truncated_object(self):
        result = _found('{"a": 1, "b": 2')

        assert result.strategy is Strategy.REPAIR_OBJECT
        assert json.loads(result.text) == {"a": 1, "b": 2}

    def test_truncated_nested_structure(self):
        assert json.loads(_found('{"outer": {"inner": [1, 2').text) == {
            "outer": {"inner": [1, 2]}
        }

    def test_truncated_object_after_prose(self):
        assert json.loads(_found('Response: {"data": [1, 2').text) == {"data": [1, 2]}

    def test_truncated_array_without_braces(self):
        result = _found("[1, 2, 3")

        assert result.strategy is Strategy.REPAIR_ARRAY
        assert json.loads(result.text) == [1, 2, 3]

    def test_truncated_string_value_is_closed(self):
        assert json.loads(_found('{"a": 1, "b": "partial').text) == {
            "a": 1,
            "b": "partial",
        }

    def test_truncation_right_after_key_is_not_found(self):
        assert isinstance(extract('{"a": 1, "b":'), NotFound)


class TestNotFound:
    @pytest.mark.parametrize("raw", ["", "   \n\t ", None, 42, ["{}"]])
    def test_empty_or_non_string_input(self, raw):
        assert isinstance(extract(raw), NotFound)

    def test_plain_prose(self):
        result = extract("I could not produce the requested data, sorry.")

        assert result == NotFound()

    def test_integer_beyond_conversion_limit(self):
        result = extract('Result: {"n": ' + "1" * 5000 + "}")

        assert isinstance(result, NotFound)


class TestScenarios:
    def test_result_wrapped_in_prose(self):
        raw = (
            'Here is the result:\n\n{"status":"success","data":{"items":'
            '[{"id":1},{"id":2}],"total":2}}\n\nDone.'
        )

        parsed = json.loads(_found(raw).text)

        assert parsed["data"]["total"] == 2
        assert len(parsed["data"]["items"]) == 2

    def test_inner_object_text_is_returned_unchanged(self):
        inner = '{"status": "success", "data": {"items": [{"id": 1, "name": "First"}]}}'

        assert _found(f"I've analyzed your request.\n\n{inner}\n\nDone.").text == inner

    def test_long_payload(self):
        value = {"items": [{"id": i, "text": "x" * 50} for i in range(500)]}

        assert json.loads(_found(f"Output: {json.dumps(value)}").text) == value
