"""Typed data structures used by the citation pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Protocol, Sequence, Tuple


@dataclass(frozen=True)
class PhraseCandidate:
    """Phrase proposed by the completion service as worth citing."""

    text: str
    relevance_score: int
    industry: Optional[str] = None

    @property
    def key(self) -> str:
        return " ".join(self.text.lower().split())


@dataclass(frozen=True)
class SearchQuery:
    """Context-rich web query derived from a phrase and its article."""

    phrase: str
    context_terms: Tuple[str, ...]
    extra_terms: Tuple[str, ...]
    excluded_domains: Tuple[str, ...]
    context_window: str = ""

    @property
    def text(self) -> str:
        parts = [self.phrase, *self.context_terms, *self.extra_terms]
        base = " ".join(part for part in parts if part).strip()
        exclusions = " ".join(f"-site:{domain}" for domain in self.excluded_domains)
        return f"{base} {exclusions}".strip()


@dataclass(frozen=True)
class RawResult:
    """Organic search result as returned by the web-search service."""

    title: str
    url: str
    snippet: str = ""


@dataclass(frozen=True)
class ScoredLink:
    """Search result with its composite score and per-signal breakdown."""

    url: str
    title: str
    domain: str
    score: float
    signals: Dict[str, float] = field(default_factory=dict)

    def as_option(self) -> Dict[str, str]:
        return {"url": self.url, "title": self.title}


@dataclass(frozen=True)
class LinkSelection:
    """Top-ranked, domain-unique links proposed for one phrase."""

    phrase: str
    options: Tuple[ScoredLink, ...] = ()


@dataclass(frozen=True)
class Reason:
    """Short citation note explaining what a source offers for a phrase."""

    url: str
    phrase: str
    text: str


Vector = List[float]


class CompletionClient(Protocol):
    """Language-completion service returning the assistant message text."""

    def complete(
        self,
        messages: Sequence[Mapping[str, str]],
        *,
        temperature: float = 0.0,
        max_tokens: int = 200,
    ) -> str:
        ...


class Embedder(Protocol):
    """Embedding service; one entry per input, ``None`` where unavailable."""

    def embed(self, texts: Sequence[str]) -> List[Optional[Vector]]:
        ...


class AuthorityClient(Protocol):
    """Domain-authority lookup returning a 0-10 rank per known domain."""

    def lookup(self, domains: Sequence[str]) -> Dict[str, float]:
        ...


class SearchClient(Protocol):
    def search(self, query: SearchQuery, *, strict: bool = False) -> List[RawResult]:
        ...
