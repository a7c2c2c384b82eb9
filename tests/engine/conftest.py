"""Shared fixtures and fake upstream services for engine tests."""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional, Sequence

import pytest

from citelinker.engine.config import load_config
from citelinker.engine.errors import SearchError
from citelinker.engine.index import build_pipeline
from citelinker.engine.types import RawResult, SearchQuery


@pytest.fixture()
def engine_config():
    """Provide the default engine configuration."""

    return load_config(None)


class FakeCompletion:
    """Completion service returning a canned response or raising."""

    def __init__(self, response: str = "", error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.calls: List[List[Mapping[str, str]]] = []

    def complete(self, messages, *, temperature=0.0, max_tokens=200) -> str:
        self.calls.append(list(messages))
        if self.error is not None:
            raise self.error
        return self.response


class KeywordEmbedder:
    """Deterministic embedder: one dimension per vocabulary word."""

    def __init__(self, vocabulary: Iterable[str], missing: Iterable[str] = ()) -> None:
        self.vocabulary = [word.lower() for word in vocabulary]
        self.missing = set(missing)
        self.calls: List[List[str]] = []

    def embed(self, texts: Sequence[str]) -> List[Optional[List[float]]]:
        self.calls.append(list(texts))
        vectors: List[Optional[List[float]]] = []
        for text in texts:
            if text in self.missing:
                vectors.append(None)
                continue
            lowered = text.lower()
            vectors.append([float(lowered.count(word)) for word in self.vocabulary])
        return vectors


class FakeSearch:
    """Search service keyed by phrase."""

    def __init__(
        self,
        results: Mapping[str, Sequence[RawResult]] | None = None,
        *,
        failing: Iterable[str] = (),
        crashing: Iterable[str] = (),
    ) -> None:
        self.results = dict(results or {})
        self.failing = set(failing)
        self.crashing = set(crashing)
        self.queries: List[SearchQuery] = []

    def search(self, query: SearchQuery, *, strict: bool = False) -> List[RawResult]:
        self.queries.append(query)
        if query.phrase in self.crashing:
            raise RuntimeError(f"boom for {query.phrase}")
        if query.phrase in self.failing:
            if strict:
                raise SearchError("HTTP 503")
            return []
        return list(self.results.get(query.phrase, []))


class FakeAuthority:
    def __init__(self, ranks: Dict[str, float] | None = None) -> None:
        self.ranks = dict(ranks or {})
        self.calls: List[List[str]] = []

    def lookup(self, domains: Sequence[str]) -> Dict[str, float]:
        self.calls.append(list(domains))
        return {domain: self.ranks[domain] for domain in domains if domain in self.ranks}


def result(url: str, title: str = "", snippet: str = "") -> RawResult:
    return RawResult(title=title or url, url=url, snippet=snippet)


def make_pipeline(
    completion=None,
    search=None,
    *,
    embedder=None,
    authority=None,
    config=None,
):
    return build_pipeline(
        completion=completion,
        retriever=search or FakeSearch(),
        embedder=embedder,
        authority=authority,
        config=config or load_config(None),
    )
