"""Configuration helpers for the citation engine."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Tuple

import yaml


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple, set, frozenset)):
        return tuple(_freeze(item) for item in value)
    return value


def matches_domain(domain: str, entry: str) -> bool:
    """Return True when ``domain`` is ``entry`` or one of its subdomains."""

    domain = domain.lower().strip(".")
    entry = entry.lower().strip(".")
    if not domain or not entry:
        return False
    return domain == entry or domain.endswith("." + entry)


@dataclass(frozen=True)
class DomainPolicy:
    """Read-only domain lists shared by every phrase pipeline."""

    authoritative_domains: FrozenSet[str] = frozenset()
    blacklist: Tuple[str, ...] = ()
    brand_priority: Mapping[str, FrozenSet[str]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "DomainPolicy":
        blacklist: list[str] = []
        for entry in raw.get("blacklist") or ():
            cleaned = str(entry).strip().lower()
            if cleaned and cleaned not in blacklist:
                blacklist.append(cleaned)
        brands = {
            " ".join(str(phrase).lower().split()): frozenset(
                str(domain).strip().lower() for domain in (domains or ()) if str(domain).strip()
            )
            for phrase, domains in (raw.get("brand_priority") or {}).items()
        }
        return cls(
            authoritative_domains=frozenset(
                str(entry).strip().lower()
                for entry in raw.get("authoritative_domains") or ()
                if str(entry).strip()
            ),
            blacklist=tuple(blacklist),
            brand_priority=MappingProxyType(brands),
        )

    def is_blacklisted(self, domain: str) -> bool:
        return any(matches_domain(domain, entry) for entry in self.blacklist)

    def is_authoritative(self, domain: str) -> bool:
        return any(matches_domain(domain, entry) for entry in self.authoritative_domains)

    def preferred_domains(self, phrase: str) -> FrozenSet[str]:
        return self.brand_priority.get(" ".join(phrase.lower().split()), frozenset())


@dataclass(frozen=True)
class EngineConfig:
    """Typed, immutable wrapper around the engine configuration dictionary."""

    raw: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    policy: DomainPolicy = field(default_factory=DomainPolicy)

    def get(self, key: str, default: Any = None) -> Any:
        return self.raw.get(key, default)

    def signal_weight(self, name: str) -> float:
        weights = self.raw.get("weights", {})
        return float(weights.get(name, 0.0))

    def tld_bonus(self, tld: str) -> float:
        bonuses = self.raw.get("tld_bonuses", {})
        return float(bonuses.get(tld.lower(), 0.0))


DEFAULTS: Dict[str, Any] = {
    "extract_word_cap": 400,
    "max_phrases_requested": 10,
    "default_score": 3,
    "min_relevance_score": 3,
    "semantic_threshold": 0.22,
    "embedding_char_cap": 6000,
    "max_phrases": 8,
    "results_requested": 10,
    "max_options": 3,
    "similarity_source": "title",
    "reason_char_budget": 140,
    "reason_fallback": "relevant supporting source",
    "extra_stop_terms": [],
    "weights": {
        "base_rank": 100.0,
        "authoritative_domain": 60.0,
        "authority_max": 50.0,
        "brand": 80.0,
        "similarity_max": 80.0,
    },
    "tld_bonuses": {
        "gov": 60.0,
        "edu": 60.0,
        "org": 40.0,
    },
    "authoritative_domains": ["who.int", "un.org"],
    "blacklist": [
        "blogspot.com",
        "medium.com",
        "reddit.com",
        "quora.com",
        "pinterest.com",
        "youtube.com",
        "amazon.com",
        "aliexpress.com",
    ],
    "brand_priority": {},
}


def load_config(
    path: str | Path | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> EngineConfig:
    """Load configuration from YAML and ``overrides``, merging with defaults."""

    data: Dict[str, Any] = copy.deepcopy(DEFAULTS)

    if path is not None and Path(path).exists():
        with Path(path).open("r", encoding="utf-8") as stream:
            user = yaml.safe_load(stream) or {}
        merge_into(data, user)

    if overrides:
        merge_into(data, copy.deepcopy(dict(overrides)))

    return EngineConfig(raw=_freeze(data), policy=DomainPolicy.from_raw(data))


def merge_into(base: Dict[str, Any], override: Mapping[str, Any]) -> None:
    """Recursively merge override into base dict.

    A null override for a mapping section keeps the defaults; a null list
    becomes an empty list.
    """

    for key, value in override.items():
        if value is None and isinstance(base.get(key), dict):
            continue
        if value is None and isinstance(base.get(key), list):
            base[key] = []
            continue
        if isinstance(value, Mapping) and isinstance(base.get(key), dict):
            merge_into(base[key], value)
        else:
            base[key] = value


def iter_terms(value: Iterable[Any] | str | None) -> Tuple[str, ...]:
    """Normalise a list or comma/newline separated string of terms."""

    if not value:
        return ()
    if isinstance(value, str):
        value = value.replace("\n", ",").split(",")
    terms: list[str] = []
    seen: set[str] = set()
    for item in value:
        term = " ".join(str(item).split())
        if term and term.lower() not in seen:
            seen.add(term.lower())
            terms.append(term)
    return tuple(terms)
