"""Coordinator for the keyword-to-ranked-link pipeline."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Union

from .config import EngineConfig, iter_terms, load_config
from .extract import PhraseExtractor
from .filters import RelevanceFilter
from .query import QueryBuilder
from .rank import LinkScorer, select_links
from .types import AuthorityClient, CompletionClient, Embedder, LinkSelection, ScoredLink, SearchClient

logger = logging.getLogger(__name__)

Terms = Optional[Union[Iterable[str], str]]


@dataclass(frozen=True)
class CitationPipeline:
    """Wires the pipeline stages together for one process.

    Every stage is stateless, so a single instance serves concurrent
    requests.
    """

    extractor: PhraseExtractor
    relevance: RelevanceFilter
    queries: QueryBuilder
    retriever: SearchClient
    scorer: LinkScorer
    config: EngineConfig

    def discover(self, text: str, extra_terms: Terms = None) -> List[LinkSelection]:
        """Return one selection per accepted phrase, in phrase order.

        Raises :class:`~citelinker.engine.errors.ExtractionError` when the
        extraction call itself fails. A phrase whose retrieval or scoring
        fails still appears, with no options.
        """

        candidates = self.extractor.extract(text, strict=True)
        accepted = self.relevance.filter(candidates, text)
        if not accepted:
            logger.info("No citation-worthy phrases found (%d candidates)", len(candidates))
            return []

        terms = iter_terms(extra_terms)
        with ThreadPoolExecutor(max_workers=len(accepted)) as executor:
            futures = [
                executor.submit(self.search_phrase, candidate.text, text, terms)
                for candidate in accepted
            ]
            selections = [
                _collect(candidate.text, future)
                for candidate, future in zip(accepted, futures)
            ]

        logger.info("Discovery finished: %s", summarize(selections))
        return selections

    def search_phrase(
        self,
        phrase: str,
        text: str = "",
        extra_terms: Terms = None,
        *,
        strict: bool = False,
    ) -> List[ScoredLink]:
        """Query, retrieve, score and select links for a single phrase.

        With ``strict`` set, a failed search raises
        :class:`~citelinker.engine.errors.SearchError` instead of yielding
        an empty list.
        """

        query = self.queries.build_query(phrase, text, extra_terms)
        results = self.retriever.search(query, strict=strict)
        if not results:
            return []
        context = query.context_window or text
        scored = self.scorer.score_results(results, query.phrase, context)
        return select_links(scored, int(self.config.get("max_options", 3)))


def _collect(phrase: str, future: "Future[List[ScoredLink]]") -> LinkSelection:
    try:
        options = future.result()
    except Exception:
        logger.exception("Link search for phrase %r failed", phrase)
        options = []
    return LinkSelection(phrase=phrase, options=tuple(options))


def summarize(selections: Sequence[LinkSelection]) -> Dict[str, float]:
    """Return diagnostic metrics for a discovery run."""

    total = len(selections) or 1
    covered = sum(1 for selection in selections if selection.options)
    scores = [link.score for selection in selections for link in selection.options]
    options = [link for selection in selections for link in selection.options]
    authoritative = sum(1 for link in options if link.signals.get("tld", 0.0) > 0)
    return {
        "phrases": float(len(selections)),
        "coverage": covered / total,
        "mean_score_selected": sum(scores) / len(scores) if scores else 0.0,
        "authoritative_rate": authoritative / len(options) if options else 0.0,
    }


def build_pipeline(
    *,
    completion: Optional[CompletionClient],
    retriever: SearchClient,
    embedder: Optional[Embedder] = None,
    authority: Optional[AuthorityClient] = None,
    config: EngineConfig | None = None,
) -> CitationPipeline:
    engine_config = config or load_config(None)
    return CitationPipeline(
        extractor=PhraseExtractor(completion, engine_config),
        relevance=RelevanceFilter(embedder, engine_config),
        queries=QueryBuilder(engine_config),
        retriever=retriever,
        scorer=LinkScorer(engine_config, embedder=embedder, authority=authority),
        config=engine_config,
    )
