"""Short citation notes for a chosen link."""

from __future__ import annotations

import logging
import re
from typing import Optional

from .config import EngineConfig, load_config
from .domains import registrable_domain
from .errors import UpstreamError
from .types import CompletionClient, Reason

logger = logging.getLogger(__name__)

FALLBACK_REASON = "relevant supporting source"

_SYSTEM_PROMPT = (
    "You write concise parenthetical footnotes (max 18 words) for a blog post. "
    "Style: factual, third-person, declarative. No marketing adjectives, no imperatives, "
    "and never the words link, page, article or click. When the context mentions a "
    "number, year or document type (report, study, regulation), cite it."
)

_EDGE_RE = re.compile(r"^[(\s]+|[)\s]+$")


def clean_reason(text: str, budget: int) -> str:
    """Strip echoed parentheses and hard-truncate to ``budget`` characters."""

    cleaned = _EDGE_RE.sub("", text or "").strip()
    if len(cleaned) > budget:
        cleaned = cleaned[:budget].rstrip()
    return cleaned


class ReasonGenerator:
    """Best-effort footnote writer; never raises to the caller."""

    def __init__(self, client: Optional[CompletionClient], config: EngineConfig | None = None) -> None:
        self.client = client
        self.config = config or load_config(None)

    @property
    def fallback(self) -> str:
        return str(self.config.get("reason_fallback") or FALLBACK_REASON)

    def explain(self, url: str, phrase: str, sentence: str | None = None) -> Reason:
        budget = int(self.config.get("reason_char_budget", 140))
        try:
            raw = self._request(url, phrase, sentence or "")
        except UpstreamError as exc:
            logger.warning("Reason generation for %s failed: %s", url, exc)
            raw = ""
        except Exception:
            logger.exception("Unexpected error generating a reason for %s", url)
            raw = ""
        text = clean_reason(raw, budget) or self.fallback
        return Reason(url=url, phrase=phrase, text=text)

    def _request(self, url: str, phrase: str, sentence: str) -> str:
        if self.client is None:
            raise UpstreamError("completion service is not configured")
        domain = registrable_domain(url) or "source site"
        user = (
            f'Keyword: "{phrase}"\n'
            f'Sentence context: "{sentence[:300]}"\n'
            f"Source domain: {domain}\n"
            f"URL: {url}\n\n"
            "Write an English footnote stating exactly what useful information this "
            "source gives about the keyword."
        )
        messages = [
            {"role": "system", "content": _SYSTEM_PROMPT},
            {"role": "user", "content": user},
        ]
        return self.client.complete(messages, temperature=0.4, max_tokens=40)
