"""Exceptions raised by the citation pipeline."""

from __future__ import annotations


class UpstreamError(RuntimeError):
    """An external service could not be reached or answered with an error."""


class ExtractionError(UpstreamError):
    """The phrase-extraction call failed; no keyword list can be produced."""


class SearchError(UpstreamError):
    """The web-search call failed for a phrase."""
