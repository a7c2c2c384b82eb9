"""Scoring, deduplication and selection of search results."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import Dict, List, Optional, Sequence

from .config import EngineConfig, load_config
from .domains import registrable_domain
from .signals import SIGNALS, ResultCandidate, ScoringContext, Signal
from .text import cosine_similarity
from .types import AuthorityClient, Embedder, RawResult, ScoredLink

logger = logging.getLogger(__name__)

MAX_OPTIONS = 3


class LinkScorer:
    """Assign each search result a composite score from independent signals."""

    def __init__(
        self,
        config: EngineConfig | None = None,
        *,
        embedder: Optional[Embedder] = None,
        authority: Optional[AuthorityClient] = None,
        signals: Sequence[tuple[str, Signal]] = SIGNALS,
    ) -> None:
        self.config = config or load_config(None)
        self.embedder = embedder
        self.authority = authority
        self.signals = tuple(signals)

    def score(self, candidate: ResultCandidate, context: ScoringContext) -> ScoredLink:
        breakdown = {name: float(signal(candidate, context)) for name, signal in self.signals}
        return ScoredLink(
            url=candidate.result.url,
            title=candidate.result.title,
            domain=candidate.domain,
            score=sum(breakdown.values()),
            signals=breakdown,
        )

    def score_results(
        self,
        results: Sequence[RawResult],
        phrase: str,
        query_context: str = "",
    ) -> List[ScoredLink]:
        """Drop blacklisted results, resolve lookups, then score what remains."""

        policy = self.config.policy
        candidates: List[ResultCandidate] = []
        for index, result in enumerate(results):
            domain = registrable_domain(result.url)
            if not domain:
                continue
            if policy.is_blacklisted(domain):
                logger.debug("Skipping blacklisted result %s", result.url)
                continue
            candidates.append(ResultCandidate(result=result, rank=index, domain=domain))

        if not candidates:
            return []

        with ThreadPoolExecutor(max_workers=2) as executor:
            ranks_future = executor.submit(self._lookup_authority, candidates)
            similarity_future = executor.submit(self._similarities, candidates, phrase, query_context)
            ranks = ranks_future.result()
            similarities = similarity_future.result()

        context = ScoringContext(phrase=phrase, config=self.config)
        scored: List[ScoredLink] = []
        for index, candidate in enumerate(candidates):
            enriched = replace(
                candidate,
                authority=ranks.get(candidate.domain),
                similarity=similarities[index],
            )
            link = self.score(enriched, context)
            logger.debug("Scored %s for %r: %.2f %s", link.url, phrase, link.score, link.signals)
            scored.append(link)
        return scored

    def _lookup_authority(self, candidates: Sequence[ResultCandidate]) -> Dict[str, float]:
        if self.authority is None:
            return {}
        return self.authority.lookup([candidate.domain for candidate in candidates])

    def _similarities(
        self,
        candidates: Sequence[ResultCandidate],
        phrase: str,
        query_context: str,
    ) -> List[Optional[float]]:
        empty: List[Optional[float]] = [None] * len(candidates)
        if self.embedder is None:
            return empty

        cap = int(self.config.get("embedding_char_cap", 6000))
        anchor_text = f"{phrase} {query_context}".strip()[:cap]
        use_snippet = self.config.get("similarity_source", "title") == "title_snippet"
        texts = [
            f"{c.result.title} {c.result.snippet}".strip() if use_snippet else c.result.title
            for c in candidates
        ]
        vectors = self.embedder.embed([anchor_text, *texts])
        if not vectors or not vectors[0]:
            return empty
        anchor = vectors[0]
        title_vectors = list(vectors[1:])
        similarities: List[Optional[float]] = []
        for index in range(len(candidates)):
            vector = title_vectors[index] if index < len(title_vectors) else None
            similarities.append(cosine_similarity(anchor, vector) if vector else None)
        return similarities


def select_links(scored: Sequence[ScoredLink], limit: int = MAX_OPTIONS) -> List[ScoredLink]:
    """Keep the best link per domain and return the top ``limit`` by score.

    Within a domain, ties go to the earliest link; across domains the sort
    is stable, so equal scores keep their first-appearance order. Fewer
    than ``limit`` domains simply yields a shorter list. ``limit`` never
    exceeds :data:`MAX_OPTIONS`.
    """

    best: Dict[str, ScoredLink] = {}
    for link in scored:
        current = best.get(link.domain)
        if current is None or link.score > current.score:
            best[link.domain] = link
    ordered = sorted(best.values(), key=lambda link: -link.score)
    return ordered[: max(0, min(limit, MAX_OPTIONS))]
