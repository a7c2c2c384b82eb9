"""Third-party domain-authority lookups (Open PageRank)."""

from __future__ import annotations

import logging
from typing import Dict, Sequence

import requests

logger = logging.getLogger(__name__)

OPENPAGERANK_ENDPOINT = "https://openpagerank.com/api/v1.0/getPageRank"


class OpenPageRankClient:
    """Batch page-rank lookup; any failure contributes no ranks at all."""

    def __init__(
        self,
        api_key: str | None,
        *,
        timeout: float = 10.0,
        endpoint: str = OPENPAGERANK_ENDPOINT,
        session: requests.Session | None = None,
    ) -> None:
        self.api_key = api_key
        self.timeout = timeout
        self.endpoint = endpoint
        self.session = session or requests.Session()

    def lookup(self, domains: Sequence[str]) -> Dict[str, float]:
        unique = sorted({domain for domain in domains if domain})
        if not unique or not self.api_key:
            return {}

        params = [(f"domains[{index}]", domain) for index, domain in enumerate(unique)]
        try:
            response = self.session.get(
                self.endpoint,
                params=params,
                headers={"API-OPR": self.api_key},
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.warning("Domain authority lookup for %d domains failed: %s", len(unique), exc)
            return {}

        ranks: Dict[str, float] = {}
        for entry in payload.get("response", []) if isinstance(payload, dict) else []:
            if not isinstance(entry, dict):
                continue
            domain = str(entry.get("domain") or "").lower()
            value = entry.get("page_rank_decimal", entry.get("page_rank_integer"))
            try:
                rank = float(value)
            except (TypeError, ValueError):
                continue
            if domain:
                ranks[domain] = max(0.0, min(rank, 10.0))
        return ranks
