"""Phrase extraction and response parsing."""

from __future__ import annotations

import json

import pytest

from citelinker.engine.config import load_config
from citelinker.engine.errors import ExtractionError, UpstreamError
from citelinker.engine.extract import PhraseExtractor, parse_phrase_candidates
from citelinker.engine.types import PhraseCandidate

from .conftest import FakeCompletion


def test_parses_scored_objects_and_bare_strings():
    raw = json.dumps(
        {
            "phrases": [
                {"text": "diabetes rates", "score": 5, "industry": "health"},
                {"text": "  insulin   pricing ", "score": "4"},
                "glucose monitors",
            ]
        }
    )
    assert parse_phrase_candidates(raw, default_score=3) == [
        PhraseCandidate("diabetes rates", 5, "health"),
        PhraseCandidate("insulin pricing", 4),
        PhraseCandidate("glucose monitors", 3),
    ]


def test_scores_are_clamped_and_long_phrases_dropped():
    raw = json.dumps(
        {
            "phrases": [
                {"text": "rising sea levels", "score": 9},
                {"text": "carbon capture", "score": 0},
                {"text": "a phrase that is far too long", "score": 5},
                {"text": "", "score": 5},
                42,
            ]
        }
    )
    assert parse_phrase_candidates(raw) == [
        PhraseCandidate("rising sea levels", 5),
        PhraseCandidate("carbon capture", 1),
    ]


def test_top_level_array_is_accepted():
    assert parse_phrase_candidates('["EV charger"]', default_score=4) == [PhraseCandidate("EV charger", 4)]


def test_not_json_returns_empty_list():
    extractor = PhraseExtractor(FakeCompletion("not json"))
    assert extractor.extract("The WHO reports rising diabetes rates.") == []


def test_missing_top_level_key_returns_empty_list():
    extractor = PhraseExtractor(FakeCompletion('{"keywords": ["diabetes rates"]}'))
    assert extractor.extract("The WHO reports rising diabetes rates.") == []


def test_transport_failure_degrades_to_empty():
    extractor = PhraseExtractor(FakeCompletion(error=UpstreamError("timeout")))
    assert extractor.extract("Some article text.") == []


def test_transport_failure_raises_in_strict_mode():
    extractor = PhraseExtractor(FakeCompletion(error=UpstreamError("timeout")))
    with pytest.raises(ExtractionError):
        extractor.extract("Some article text.", strict=True)


def test_missing_client_raises_in_strict_mode_only():
    extractor = PhraseExtractor(None)
    assert extractor.extract("Some article text.") == []
    with pytest.raises(ExtractionError):
        extractor.extract("Some article text.", strict=True)


def test_blank_text_skips_the_call():
    client = FakeCompletion('{"phrases": ["x"]}')
    assert PhraseExtractor(client).extract("   ") == []
    assert client.calls == []


def test_input_is_truncated_to_word_cap():
    client = FakeCompletion('{"phrases": []}')
    config = load_config(None, {"extract_word_cap": 5})
    PhraseExtractor(client, config).extract("one two three four five six seven eight")
    user_message = client.calls[0][-1]
    assert user_message["role"] == "user"
    assert user_message["content"] == "one two three four five"


def test_requested_count_is_clamped_and_enforced():
    phrases = [f"phrase {index}" for index in range(30)]
    client = FakeCompletion(json.dumps({"phrases": phrases}))
    config = load_config(None, {"max_phrases_requested": 50})
    extractor = PhraseExtractor(client, config)

    candidates = extractor.extract("An article.")

    assert extractor.requested_count == 20
    assert len(candidates) == 20
    assert "at most 20 entries" in client.calls[0][0]["content"]


def test_bracketed_prose_before_payload():
    raw = 'Note [1]: {"phrases": ["diabetes rates"]}'
    assert parse_phrase_candidates(raw) == [PhraseCandidate("diabetes rates", 3)]
