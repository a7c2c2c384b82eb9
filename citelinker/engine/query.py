"""Contextual search-query construction."""

from __future__ import annotations

from typing import Iterable, List

from .config import DomainPolicy, EngineConfig, iter_terms, load_config
from .text import STOPWORDS, letter_tokens, ranked_terms, split_sentences
from .types import SearchQuery

MAX_CONTEXT_TERMS = 3
MIN_TERM_LENGTH = 4


def context_window(phrase: str, article_text: str) -> str:
    """Return the first sentence mentioning ``phrase`` plus its neighbours."""

    needle = phrase.lower().strip()
    if not needle:
        return ""
    sentences = split_sentences(article_text)
    for index, sentence in enumerate(sentences):
        if needle in sentence.lower():
            return " ".join(sentences[max(0, index - 1): index + 2])
    return ""


def context_terms(phrase: str, window: str, limit: int = MAX_CONTEXT_TERMS) -> List[str]:
    lowered_phrase = phrase.lower()
    tokens = [
        token
        for token in letter_tokens(window)
        if len(token) >= MIN_TERM_LENGTH
        and token not in STOPWORDS
        and token not in lowered_phrase
    ]
    return ranked_terms(tokens, limit)


class QueryBuilder:
    """Expand a bare phrase into a deterministic, context-rich query."""

    def __init__(self, config: EngineConfig | None = None, policy: DomainPolicy | None = None) -> None:
        self.config = config or load_config(None)
        self.policy = policy or self.config.policy

    def build_query(
        self,
        phrase: str,
        article_text: str,
        extra_terms: Iterable[str] | str | None = None,
    ) -> SearchQuery:
        phrase = " ".join(phrase.split())
        window = context_window(phrase, article_text or "")
        terms = context_terms(phrase, window)

        present = {phrase.lower(), *terms}
        extras = []
        for term in iter_terms(extra_terms):
            if term.lower() in present:
                continue
            present.add(term.lower())
            extras.append(term)

        return SearchQuery(
            phrase=phrase,
            context_terms=tuple(terms),
            extra_terms=tuple(extras),
            excluded_domains=self.policy.blacklist,
            context_window=window,
        )
