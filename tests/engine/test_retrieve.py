"""Web-search retrieval against a mocked HTTP session."""

from __future__ import annotations

from unittest import mock

import pytest
import requests

from citelinker.engine.errors import SearchError
from citelinker.engine.retrieve import SerperRetriever, parse_organic_results
from citelinker.engine.types import RawResult, SearchQuery

QUERY = SearchQuery(
    phrase="diabetes rates",
    context_terms=("reports",),
    extra_terms=(),
    excluded_domains=("reddit.com",),
)


def response(status=200, payload=None, json_error=None):
    fake = mock.Mock()
    fake.status_code = status
    fake.ok = 200 <= status < 300
    if json_error is not None:
        fake.json.side_effect = json_error
    else:
        fake.json.return_value = payload
    return fake


def retriever(session, **kwargs):
    return SerperRetriever("secret", session=session, **kwargs)


def test_search_posts_query_and_parses_organic_results():
    session = mock.Mock()
    session.post.return_value = response(
        payload={
            "organic": [
                {"title": " WHO ", "link": "https://who.int/x", "snippet": "Facts"},
                {"title": "No link"},
                {"title": "CDC", "link": "https://cdc.gov/y"},
            ]
        }
    )

    results = retriever(session, results_requested=5).search(QUERY)

    assert results == [
        RawResult(title="WHO", url="https://who.int/x", snippet="Facts"),
        RawResult(title="CDC", url="https://cdc.gov/y", snippet=""),
    ]
    _, kwargs = session.post.call_args
    assert kwargs["json"] == {
        "q": "diabetes rates reports -site:reddit.com",
        "gl": "us",
        "hl": "en",
        "num": 5,
    }
    assert kwargs["headers"]["X-API-KEY"] == "secret"
    assert kwargs["timeout"] == 10.0


def test_non_2xx_degrades_to_empty():
    session = mock.Mock()
    session.post.return_value = response(status=503)
    assert retriever(session).search(QUERY) == []


def test_non_2xx_raises_when_strict():
    session = mock.Mock()
    session.post.return_value = response(status=429)
    with pytest.raises(SearchError, match="HTTP 429"):
        retriever(session).search(QUERY, strict=True)


def test_timeout_degrades_or_raises():
    session = mock.Mock()
    session.post.side_effect = requests.Timeout("slow")
    assert retriever(session).search(QUERY) == []
    with pytest.raises(SearchError):
        retriever(session).search(QUERY, strict=True)


def test_non_json_body_is_a_failure():
    session = mock.Mock()
    session.post.return_value = response(json_error=ValueError("bad json"))
    assert retriever(session).search(QUERY) == []


def test_missing_api_key_skips_the_request():
    session = mock.Mock()
    search = SerperRetriever(None, session=session)
    assert search.search(QUERY) == []
    with pytest.raises(SearchError):
        search.search(QUERY, strict=True)
    session.post.assert_not_called()


@pytest.mark.parametrize("payload", [None, [], {"organic": "nope"}, {"organic": [1, "x"]}, {}])
def test_malformed_payloads_yield_nothing(payload):
    assert parse_organic_results(payload, 10) == []


def test_results_are_limited():
    payload = {"organic": [{"link": f"https://site{i}.com"} for i in range(20)]}
    assert len(parse_organic_results(payload, 10)) == 10
