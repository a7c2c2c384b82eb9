"""Shared text utilities for the citation engine."""

from __future__ import annotations

import math
import re
from collections import Counter
from typing import List, Optional, Sequence

_TOKEN_RE = re.compile(r"[\w']+")
_LETTERS_RE = re.compile(r"[^a-zA-Z\s]")
_SENTENCE_RE = re.compile(r"(?<=[.!?])\s+")

# Function words skipped when mining context terms for a query.
STOPWORDS = frozenset(
    {
        "about", "after", "also", "been", "being", "could", "does", "each",
        "from", "have", "here", "into", "just", "like", "more", "most",
        "much", "only", "other", "over", "said", "same", "should", "some",
        "such", "than", "that", "their", "them", "then", "there", "these",
        "they", "this", "those", "through", "very", "were", "what", "when",
        "where", "which", "while", "will", "with", "would", "your",
    }
)

# Generic words that make a phrase useless as a citation target.
GENERIC_TERMS = frozenset(
    {
        "thing", "things", "stuff", "way", "ways", "lot", "lots", "people",
        "someone", "something", "everything", "anything", "good", "great",
        "nice", "amazing", "awesome", "important", "various", "several",
        "example", "examples", "information", "article", "post", "blog",
        "page", "link", "click", "today", "tips", "guide", "ultimate",
        "overview", "introduction",
    }
)


def tokenize(text: str) -> List[str]:
    """Return lower-cased word tokens from the provided text."""

    return [token.lower() for token in _TOKEN_RE.findall(text)]


def letter_tokens(text: str) -> List[str]:
    """Return lower-cased alphabetic tokens, punctuation and digits removed."""

    return _LETTERS_RE.sub(" ", text).lower().split()


def split_sentences(text: str) -> List[str]:
    return [sentence.strip() for sentence in _SENTENCE_RE.split(text) if sentence.strip()]


def truncate_words(text: str, limit: int) -> str:
    words = text.split()
    if len(words) <= limit:
        return text.strip()
    return " ".join(words[:limit])


def ranked_terms(tokens: Sequence[str], limit: int) -> List[str]:
    """Most frequent tokens first; ties keep first-seen order."""

    counts = Counter(tokens)
    ordered = sorted(counts.items(), key=lambda item: -item[1])
    return [term for term, _ in ordered[:limit]]


def cosine_similarity(vector_a: Optional[Sequence[float]], vector_b: Optional[Sequence[float]]) -> float:
    """Cosine similarity between two dense vectors; 0.0 when either is missing."""

    if not vector_a or not vector_b:
        return 0.0
    dot = sum(a * b for a, b in zip(vector_a, vector_b))
    norm_a = math.sqrt(sum(value * value for value in vector_a))
    norm_b = math.sqrt(sum(value * value for value in vector_b))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return dot / (norm_a * norm_b)
