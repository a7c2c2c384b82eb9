"""Phrase extraction through a language-completion service."""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from .config import EngineConfig, load_config
from .errors import ExtractionError, UpstreamError
from .llm_json import EmptyPayload, parse_llm_json
from .text import truncate_words
from .types import CompletionClient, PhraseCandidate

logger = logging.getLogger(__name__)

PHRASES_KEY = "phrases"
MAX_PHRASE_WORDS = 4

_SYSTEM_PROMPT = (
    "You pick phrases in an English article that a careful writer would support "
    "with an outbound citation to an authoritative source. Return ONLY JSON of the "
    'form {{"phrases": [{{"text": "...", "score": 1-5, "industry": "..."}}]}} with at '
    "most {count} entries. Each phrase must appear verbatim in the article and be 1-4 "
    "words long. Score 5 means a citation is essential, 1 means it adds little."
)


class PhraseExtractor:
    """Turn article text into scored phrase candidates."""

    def __init__(self, client: Optional[CompletionClient], config: EngineConfig | None = None) -> None:
        self.client = client
        self.config = config or load_config(None)

    @property
    def requested_count(self) -> int:
        return max(6, min(int(self.config.get("max_phrases_requested", 10)), 20))

    def extract(self, text: str, *, strict: bool = False) -> List[PhraseCandidate]:
        """Return phrase candidates for ``text``.

        Unparsable responses always yield ``[]``. Transport failures yield
        ``[]`` as well unless ``strict`` is set, in which case they raise
        :class:`ExtractionError`.
        """

        if not text or not text.strip():
            return []

        try:
            raw = self._request(text)
        except UpstreamError as exc:
            if strict:
                raise ExtractionError(str(exc)) from exc
            logger.warning("Phrase extraction failed: %s", exc)
            return []

        candidates = parse_phrase_candidates(raw, default_score=int(self.config.get("default_score", 3)))
        return candidates[: self.requested_count]

    def _request(self, text: str) -> str:
        if self.client is None:
            raise UpstreamError("completion service is not configured")
        excerpt = truncate_words(text, int(self.config.get("extract_word_cap", 400)))
        messages = [
            {"role": "system", "content": _SYSTEM_PROMPT.format(count=self.requested_count)},
            {"role": "user", "content": excerpt},
        ]
        return self.client.complete(messages, temperature=0.0, max_tokens=400)


def parse_phrase_candidates(raw: str, *, default_score: int = 3) -> List[PhraseCandidate]:
    """Parse a completion into candidates, returning ``[]`` when nothing usable is found."""

    parsed = parse_llm_json(raw)
    if isinstance(parsed, EmptyPayload):
        logger.warning("Discarding unparsable phrase response: %s", parsed.reason)
        return []

    data = parsed.data
    if isinstance(data, dict):
        if PHRASES_KEY not in data:
            logger.warning("Phrase response is missing the %r key", PHRASES_KEY)
            return []
        data = data[PHRASES_KEY]
    if not isinstance(data, list):
        return []

    candidates: List[PhraseCandidate] = []
    for item in data:
        candidate = _candidate_from_item(item, default_score)
        if candidate is not None:
            candidates.append(candidate)
    return candidates


def _candidate_from_item(item: Any, default_score: int) -> Optional[PhraseCandidate]:
    industry = None
    score: Any = default_score
    if isinstance(item, str):
        text = item
    elif isinstance(item, dict):
        text = item.get("text") or item.get("phrase") or item.get("keyword") or ""
        score = item.get("score", item.get("relevance", default_score))
        industry = item.get("industry") or None
    else:
        return None

    text = " ".join(str(text).split()).strip(" \"'.,;:")
    if not text or len(text.split()) > MAX_PHRASE_WORDS:
        return None
    try:
        score_value = int(round(float(score)))
    except (TypeError, ValueError):
        score_value = default_score
    return PhraseCandidate(
        text=text,
        relevance_score=max(1, min(score_value, 5)),
        industry=str(industry).strip() if industry else None,
    )
