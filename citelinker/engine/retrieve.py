"""Web-search retrieval for contextual phrase queries."""

from __future__ import annotations

import logging
from typing import Any, List

import requests

from .errors import SearchError
from .types import RawResult, SearchQuery

logger = logging.getLogger(__name__)

SERPER_ENDPOINT = "https://google.serper.dev/search"


class SerperRetriever:
    """Issue one Serper query per phrase and return organic results.

    Failures are per-phrase and recoverable: a non-2xx status, timeout or
    malformed payload yields an empty list unless ``strict`` is requested,
    in which case :class:`SearchError` is raised.
    """

    def __init__(
        self,
        api_key: str | None,
        *,
        results_requested: int = 10,
        timeout: float = 10.0,
        country: str = "us",
        language: str = "en",
        endpoint: str = SERPER_ENDPOINT,
        session: requests.Session | None = None,
    ) -> None:
        self.api_key = api_key
        self.results_requested = results_requested
        self.timeout = timeout
        self.country = country
        self.language = language
        self.endpoint = endpoint
        self.session = session or requests.Session()

    def search(self, query: SearchQuery, *, strict: bool = False) -> List[RawResult]:
        try:
            payload = self._request(query.text)
        except SearchError as exc:
            if strict:
                raise
            logger.warning("Search for %r failed: %s", query.phrase, exc)
            return []
        return parse_organic_results(payload, self.results_requested)

    def _request(self, q: str) -> Any:
        if not self.api_key:
            raise SearchError("search service is not configured")
        try:
            response = self.session.post(
                self.endpoint,
                json={"q": q, "gl": self.country, "hl": self.language, "num": self.results_requested},
                headers={"X-API-KEY": self.api_key, "Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise SearchError(f"search request failed: {exc}") from exc
        if not response.ok:
            raise SearchError(f"search returned HTTP {response.status_code}")
        try:
            return response.json()
        except ValueError as exc:
            raise SearchError("search returned a non-JSON body") from exc


def parse_organic_results(payload: Any, limit: int) -> List[RawResult]:
    """Convert a Serper payload into raw results, skipping entries without a URL."""

    if not isinstance(payload, dict):
        return []
    organic = payload.get("organic")
    if not isinstance(organic, list):
        return []

    results: List[RawResult] = []
    for item in organic:
        if len(results) >= limit:
            break
        if not isinstance(item, dict):
            continue
        url = str(item.get("link") or "").strip()
        if not url:
            continue
        results.append(
            RawResult(
                title=str(item.get("title") or "").strip(),
                url=url,
                snippet=str(item.get("snippet") or "").strip(),
            )
        )
    return results
