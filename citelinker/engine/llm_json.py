"""Lenient JSON parsing for language-model responses.

Models often wrap the requested JSON in prose or code fences. The parser
tries a strict ``json.loads`` first, then retries on the outermost
``[...]`` and ``{...}`` spans in order of appearance, and finally gives
up with an :class:`EmptyPayload` instead of raising. Callers branch on the variant:

    parsed = parse_llm_json(text)
    if isinstance(parsed, JsonPayload):
        use(parsed.data)
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, List, Optional, Union


@dataclass(frozen=True)
class JsonPayload:
    data: Any


@dataclass(frozen=True)
class EmptyPayload:
    reason: str


ParsedPayload = Union[JsonPayload, EmptyPayload]


def _candidate_spans(text: str) -> List[str]:
    spans = []
    for opener, closer in (("[", "]"), ("{", "}")):
        start = text.find(opener)
        end = text.rfind(closer)
        if start != -1 and end > start:
            spans.append((start, end))
    # The delimiter that opens first most likely encloses the payload.
    return [text[start:end + 1] for start, end in sorted(spans)]


def parse_llm_json(text: str | None) -> ParsedPayload:
    """Parse ``text`` as JSON, tolerating prose around the payload."""

    if not text or not text.strip():
        return EmptyPayload("empty response")

    try:
        return JsonPayload(json.loads(text))
    except ValueError:
        pass

    spans = _candidate_spans(text)
    if not spans:
        return EmptyPayload("no JSON delimiters found")
    error: Optional[ValueError] = None
    for span in spans:
        try:
            return JsonPayload(json.loads(span))
        except ValueError as exc:
            error = error or exc
    return EmptyPayload(f"invalid JSON payload: {error}")
