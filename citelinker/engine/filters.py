"""Relevance filtering for extracted phrase candidates."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from .config import EngineConfig, load_config
from .text import GENERIC_TERMS, cosine_similarity, tokenize
from .types import Embedder, PhraseCandidate

logger = logging.getLogger(__name__)


class RelevanceFilter:
    """Keep only phrases worth citing, in extraction order."""

    def __init__(self, embedder: Optional[Embedder] = None, config: EngineConfig | None = None) -> None:
        self.embedder = embedder
        self.config = config or load_config(None)
        extra = {str(term).lower() for term in self.config.get("extra_stop_terms") or ()}
        self.stop_terms = GENERIC_TERMS | extra

    def filter(self, candidates: Sequence[PhraseCandidate], article_text: str) -> List[PhraseCandidate]:
        minimum = int(self.config.get("min_relevance_score", 3))
        scored = [candidate for candidate in candidates if candidate.relevance_score >= minimum]
        specific = [candidate for candidate in scored if not self._is_generic(candidate)]
        unique = dedupe_candidates(specific)
        relevant = self._semantic_stage(unique, article_text)
        return cap_candidates(relevant, int(self.config.get("max_phrases", 8)))

    def _is_generic(self, candidate: PhraseCandidate) -> bool:
        return any(token in self.stop_terms for token in tokenize(candidate.text))

    def _semantic_stage(self, candidates: List[PhraseCandidate], article_text: str) -> List[PhraseCandidate]:
        if self.embedder is None or not candidates:
            return candidates

        cap = int(self.config.get("embedding_char_cap", 6000))
        article_vectors = self.embedder.embed([article_text[:cap]])
        article_vector = article_vectors[0] if article_vectors else None
        if not article_vector:
            logger.info("Article embedding unavailable; skipping semantic phrase filter")
            return candidates

        phrase_vectors = self.embedder.embed([candidate.text for candidate in candidates])
        threshold = float(self.config.get("semantic_threshold", 0.22))
        kept: List[PhraseCandidate] = []
        for index, candidate in enumerate(candidates):
            vector = phrase_vectors[index] if index < len(phrase_vectors) else None
            if not vector:
                # Unknown similarity excludes the phrase.
                logger.info("No embedding for phrase %r; excluding it", candidate.text)
                continue
            similarity = cosine_similarity(article_vector, vector)
            if similarity > threshold:
                kept.append(candidate)
            else:
                logger.debug("Phrase %r below similarity threshold (%.3f)", candidate.text, similarity)
        return kept


def dedupe_candidates(candidates: Sequence[PhraseCandidate]) -> List[PhraseCandidate]:
    """Collapse case-insensitive duplicates, keeping the best score at the first position."""

    best: Dict[str, PhraseCandidate] = {}
    order: List[str] = []
    for candidate in candidates:
        key = candidate.key
        if key not in best:
            order.append(key)
            best[key] = candidate
        elif candidate.relevance_score > best[key].relevance_score:
            best[key] = candidate
    return [best[key] for key in order]


def cap_candidates(candidates: Sequence[PhraseCandidate], limit: int) -> List[PhraseCandidate]:
    """Keep the ``limit`` highest-scoring candidates, returned in their original order."""

    if len(candidates) <= limit:
        return list(candidates)
    ranked = sorted(range(len(candidates)), key=lambda index: -candidates[index].relevance_score)
    keep = set(ranked[: max(limit, 0)])
    return [candidate for index, candidate in enumerate(candidates) if index in keep]
