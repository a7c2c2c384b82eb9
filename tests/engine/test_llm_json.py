"""Lenient JSON parsing of model output."""

from __future__ import annotations

import pytest

from citelinker.engine.llm_json import EmptyPayload, JsonPayload, parse_llm_json


def test_strict_json_object():
    parsed = parse_llm_json('{"phrases": ["diabetes rates"]}')
    assert parsed == JsonPayload({"phrases": ["diabetes rates"]})


def test_prose_around_array_is_tolerated():
    parsed = parse_llm_json('Here are the phrases: ["EV charger", "grid load"]. Hope this helps!')
    assert parsed == JsonPayload(["EV charger", "grid load"])


def test_code_fenced_object_is_tolerated():
    text = '```json\n{"phrases": [{"text": "solar tariffs", "score": 4}]}\n```'
    parsed = parse_llm_json(text)
    assert isinstance(parsed, JsonPayload)
    assert parsed.data["phrases"][0]["text"] == "solar tariffs"


def test_object_enclosing_array_wins():
    parsed = parse_llm_json('Sure: {"phrases": ["a", "b"]} done')
    assert parsed == JsonPayload({"phrases": ["a", "b"]})


@pytest.mark.parametrize("text", ["not json", "", "   ", None, "{oops", "{ bad payload }"])
def test_unparsable_text_is_empty(text):
    assert isinstance(parse_llm_json(text), EmptyPayload)


def test_failed_array_span_falls_back_to_object_span():
    parsed = parse_llm_json('Note [1]: {"phrases": ["diabetes rates"]}')
    assert parsed == JsonPayload({"phrases": ["diabetes rates"]})
