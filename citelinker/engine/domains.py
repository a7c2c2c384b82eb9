"""Registrable-domain helpers used for scoring and deduplication."""

from __future__ import annotations

from functools import lru_cache
from urllib.parse import urlparse

import tldextract

# Bundled public-suffix snapshot only; never fetch the list at runtime.
_EXTRACT = tldextract.TLDExtract(suffix_list_urls=(), cache_dir=None)


@lru_cache(maxsize=2048)
def registrable_domain(url: str) -> str:
    """Return the eTLD+1 of ``url`` (``news.example.co.uk`` -> ``example.co.uk``).

    Hosts without a public suffix (IP addresses, ``localhost``) are
    returned unchanged; unparsable input yields an empty string.
    """

    if not url:
        return ""
    candidate = url if "//" in url else f"//{url}"
    try:
        host = (urlparse(candidate).hostname or "").lower()
    except ValueError:
        return ""
    if not host or any(char.isspace() for char in host):
        return ""
    parts = _EXTRACT(host)
    if parts.domain and parts.suffix:
        return f"{parts.domain}.{parts.suffix}"
    return host


def suffix_labels(domain: str) -> tuple[str, ...]:
    """Labels after the registrable name (``nhs.gov.uk`` -> ``('gov', 'uk')``)."""

    labels = domain.lower().strip(".").split(".") if domain else []
    return tuple(labels[1:])
