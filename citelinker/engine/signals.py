"""Scoring signals for search results.

Each signal is a pure function ``signal(candidate, context) -> float``.
The composite score of a result is the sum over :data:`SIGNALS`; no
signal reads another one's output, so each can be tested on its own.
Network-backed inputs (page rank, embedding similarity) are resolved
beforehand and carried on the candidate.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from .config import EngineConfig, matches_domain
from .domains import suffix_labels
from .types import RawResult


@dataclass(frozen=True)
class ResultCandidate:
    result: RawResult
    rank: int
    domain: str
    authority: Optional[float] = None
    similarity: Optional[float] = None


@dataclass(frozen=True)
class ScoringContext:
    phrase: str
    config: EngineConfig


Signal = Callable[[ResultCandidate, ScoringContext], float]


def _clamp(value: float, minimum: float = 0.0, maximum: float = 1.0) -> float:
    return max(min(value, maximum), minimum)


def rank_signal(candidate: ResultCandidate, context: ScoringContext) -> float:
    """Search-engine order as a prior: ``base_rank - index``."""

    return max(context.config.signal_weight("base_rank") - candidate.rank, 0.0)


def tld_signal(candidate: ResultCandidate, context: ScoringContext) -> float:
    bonuses = [context.config.tld_bonus(label) for label in suffix_labels(candidate.domain)]
    if context.config.policy.is_authoritative(candidate.domain):
        bonuses.append(context.config.signal_weight("authoritative_domain"))
    return max(bonuses, default=0.0)


def authority_signal(candidate: ResultCandidate, context: ScoringContext) -> float:
    if candidate.authority is None:
        return 0.0
    return _clamp(candidate.authority / 10.0) * context.config.signal_weight("authority_max")


def brand_signal(candidate: ResultCandidate, context: ScoringContext) -> float:
    preferred = context.config.policy.preferred_domains(context.phrase)
    if any(matches_domain(candidate.domain, domain) for domain in preferred):
        return context.config.signal_weight("brand")
    return 0.0


def semantic_signal(candidate: ResultCandidate, context: ScoringContext) -> float:
    if candidate.similarity is None:
        return 0.0
    return _clamp(candidate.similarity) * context.config.signal_weight("similarity_max")


SIGNALS: Tuple[Tuple[str, Signal], ...] = (
    ("rank", rank_signal),
    ("tld", tld_signal),
    ("authority", authority_signal),
    ("brand", brand_signal),
    ("semantic", semantic_signal),
)
