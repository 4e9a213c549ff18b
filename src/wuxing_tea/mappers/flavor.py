"""Flavor descriptors to element distributions.

Single descriptors resolve through an ordered cascade (context override,
direct TCM flavor, flavor-wheel note or explicit descriptor, substring
match, heuristic, uniform). Whole profiles first try the signature
patterns and named combinations before falling back to per-descriptor
accumulation with diminishing returns.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping, Sequence

from wuxing_core.config.system import SystemConfig
from wuxing_core.elements import ElementDistribution
from wuxing_core.returns import DEFAULT_DIMINISHING_RETURNS, DiminishingReturns
from wuxing_tea.record import TeaRecord
from wuxing_tea.tables import (
    FlavorTables,
    NamedCombination,
    SignaturePattern,
    load_default_tables,
    normalise_term,
)

__all__ = [
    "FlavorAnalysis",
    "FlavorElementMapper",
    "TermResolution",
]

logger = logging.getLogger(__name__)

_SALTY_WATER_KEYWORDS = (
    "salty",
    "briny",
    "saline",
    "marine",
    "seaweed",
    "oceanic",
    "sea",
    "kelp",
    "algae",
    "iodine",
)
_DOMINANT_SHARE = 0.6
_DOMINANT_MULTIPLE = 3.0
_ABSENT_SECOND = 0.01


@dataclass(frozen=True, slots=True)
class TermResolution:
    """How a single descriptor was resolved."""

    term: str
    elements: ElementDistribution
    source: str
    tcm_flavors: Mapping[str, float] = field(default_factory=lambda: MappingProxyType({}))
    category: str | None = None


@dataclass(frozen=True, slots=True)
class FlavorAnalysis:
    terms: tuple[str, ...]
    tcm_flavor_counts: Mapping[str, float]
    category_counts: Mapping[str, int]
    dominant_tcm_flavor: str | None
    dominant_element: str | None
    pattern: str | None
    elements: ElementDistribution

    def as_dict(self) -> dict[str, Any]:
        return {
            "terms": list(self.terms),
            "tcm_flavor_counts": dict(self.tcm_flavor_counts),
            "category_counts": dict(self.category_counts),
            "dominant_tcm_flavor": self.dominant_tcm_flavor,
            "dominant_element": self.dominant_element,
            "pattern": self.pattern,
            "elements": self.elements.as_dict(),
        }


_Resolver = Callable[[str, frozenset], "TermResolution | None"]


class FlavorElementMapper:
    """Map flavor descriptors onto the five elements."""

    name = "flavor"

    def __init__(
        self,
        tables: FlavorTables | None = None,
        *,
        diminishing: DiminishingReturns | None = None,
    ) -> None:
        self.tables = tables if tables is not None else load_default_tables().flavor
        self.diminishing = diminishing if diminishing is not None else DEFAULT_DIMINISHING_RETURNS
        self._substring_keys = tuple(
            sorted(
                set(self.tables.descriptors) | set(self.tables.notes),
                key=lambda key: (-len(key), key),
            )
        )
        self._resolvers: tuple[tuple[str, _Resolver], ...] = (
            ("context", self._from_context),
            ("direct", self._from_direct),
            ("category", self._from_table),
            ("substring", self._from_substring),
            ("heuristic", self._from_heuristic),
        )

    @classmethod
    def from_config(
        cls, config: SystemConfig, tables: FlavorTables | None = None
    ) -> "FlavorElementMapper":
        return cls(tables, diminishing=config.diminishing_returns)

    # ------------------------------------------------------------------
    # single descriptors
    # ------------------------------------------------------------------
    def resolve_term(self, term: str, context: Iterable[str] = ()) -> TermResolution:
        key = normalise_term(term)
        siblings = frozenset(normalise_term(item) for item in context) - {key}
        if key:
            for _, resolver in self._resolvers:
                resolution = resolver(key, siblings)
                if resolution is not None:
                    return resolution
        return TermResolution(term=key, elements=ElementDistribution.uniform(), source="default")

    def map_term(self, term: str, context: Iterable[str] = ()) -> ElementDistribution:
        return self.resolve_term(term, context).elements

    def _from_context(self, term: str, siblings: frozenset) -> TermResolution | None:
        for override in self.tables.context:
            if override.applies(term, siblings):
                return TermResolution(
                    term=term,
                    elements=override.elements,
                    source="context",
                    tcm_flavors=override.tcm_flavors,
                )
        return None

    def _from_direct(self, term: str, siblings: frozenset) -> TermResolution | None:
        flavor = self.tables.direct_flavors.get(term)
        if flavor is None:
            return None
        return TermResolution(
            term=term,
            elements=self.tables.tcm_flavors[flavor],
            source="direct",
            tcm_flavors=MappingProxyType({flavor: 1.0}),
        )

    def _from_table(self, term: str, siblings: frozenset) -> TermResolution | None:
        category = self.tables.notes.get(term)
        if category is None and term in self.tables.categories:
            category = term
        if category is not None:
            return self._category_resolution(term, category, "category")
        elements = self.tables.descriptors.get(term)
        if elements is not None:
            return TermResolution(term=term, elements=elements, source="descriptor")
        return None

    def _from_substring(self, term: str, siblings: frozenset) -> TermResolution | None:
        for key in self._substring_keys:
            if key in term or (len(term) >= 3 and term in key):
                category = self.tables.notes.get(key)
                if category is not None:
                    return self._category_resolution(term, category, "substring")
                return TermResolution(
                    term=term, elements=self.tables.descriptors[key], source="substring"
                )
        return None

    def _from_heuristic(self, term: str, siblings: frozenset) -> TermResolution | None:
        for heuristic in self.tables.heuristics:
            if heuristic.matches(term):
                return TermResolution(term=term, elements=heuristic.elements, source="heuristic")
        return None

    def _category_resolution(self, term: str, category: str, source: str) -> TermResolution:
        entry = self.tables.categories[category]
        mix = ElementDistribution.zeros()
        for flavor, weight in entry.distribution.items():
            mix = mix.plus(self.tables.tcm_flavors[flavor], weight)
        counts = {entry.primary: 1.0}
        if entry.secondary is not None:
            counts[entry.secondary] = counts.get(entry.secondary, 0.0) + 0.5
        return TermResolution(
            term=term,
            elements=mix.normalised() if mix.total > 0.0 else ElementDistribution.uniform(),
            source=source,
            tcm_flavors=MappingProxyType(counts),
            category=category,
        )

    # ------------------------------------------------------------------
    # whole profiles
    # ------------------------------------------------------------------
    def match_pattern(self, terms: Sequence[str]) -> SignaturePattern | None:
        """Return the first signature pattern matching ``terms``.

        At least two distinct descriptors are required.
        """

        distinct = _distinct(normalise_term(term) for term in terms)
        if len(distinct) < 2:
            return None
        for pattern in self.tables.patterns:
            if pattern.matches(distinct):
                return pattern
        return None

    def match_combination(self, terms: Sequence[str]) -> NamedCombination | None:
        """Return the named combination with the most members present."""

        present = frozenset(normalise_term(term) for term in terms)
        best: NamedCombination | None = None
        best_hits = 1
        for combination in self.tables.combinations:
            hits = len(combination.flavors & present)
            if hits > best_hits:
                best = combination
                best_hits = hits
        return best

    def map_profile(self, terms: Iterable[str] | None) -> ElementDistribution:
        cleaned = [normalise_term(term) for term in terms or ()]
        cleaned = [term for term in cleaned if term]
        if not cleaned:
            return ElementDistribution.uniform()

        pattern = self.match_pattern(cleaned)
        if pattern is not None:
            logger.debug(
                "Flavor profile matched a signature pattern.",
                extra={"event": "flavor.pattern_match", "pattern": pattern.name},
            )
            return pattern.elements

        combination = self.match_combination(cleaned)
        if combination is not None:
            logger.debug(
                "Flavor profile matched a named combination.",
                extra={"event": "flavor.combination_match", "combination": combination.name},
            )
            return combination.elements

        accumulated, tcm_counts, _ = self._accumulate(cleaned)
        if _is_dominant(tcm_counts):
            logger.debug(
                "Dominant TCM flavor; keeping the raw accumulation.",
                extra={"event": "flavor.dominant", "counts": dict(tcm_counts)},
            )
            return accumulated
        return accumulated.normalised()

    def map_record(self, record: TeaRecord) -> ElementDistribution | None:
        if record.flavor_profile is None:
            return None
        return self.map_profile(record.flavor_profile)

    def _accumulate(
        self, terms: Sequence[str]
    ) -> tuple[ElementDistribution, dict[str, float], Counter]:
        context = frozenset(terms)
        occurrences: Counter = Counter()
        categories: Counter = Counter()
        tcm_counts: dict[str, float] = {}
        total = ElementDistribution.zeros()
        for term in terms:
            occurrences[term] += 1
            resolution = self.resolve_term(term, context)
            total = total.plus(resolution.elements, self.diminishing.multiplier(occurrences[term]))
            for flavor, amount in resolution.tcm_flavors.items():
                tcm_counts[flavor] = tcm_counts.get(flavor, 0.0) + amount
            if resolution.category is not None:
                categories[resolution.category] += 1
        return total, tcm_counts, categories

    def analyze_profile(self, terms: Iterable[str] | None) -> FlavorAnalysis:
        cleaned = tuple(term for term in (normalise_term(item) for item in terms or ()) if term)
        _, tcm_counts, categories = self._accumulate(cleaned)
        pattern = self.match_pattern(cleaned)
        elements = self.map_profile(cleaned)
        dominant_flavor = None
        if tcm_counts:
            dominant_flavor = max(tcm_counts.items(), key=lambda item: item[1])[0]
        dominant_element, _ = elements.dominant_pair()
        return FlavorAnalysis(
            terms=cleaned,
            tcm_flavor_counts=MappingProxyType(tcm_counts),
            category_counts=MappingProxyType(dict(categories)),
            dominant_tcm_flavor=dominant_flavor,
            dominant_element=dominant_element,
            pattern=pattern.name if pattern is not None else None,
            elements=elements,
        )

    def is_salty_water_profile(self, terms: Iterable[str] | None) -> bool:
        """Return ``True`` when salty or marine descriptors dominate ``terms``."""

        cleaned = [normalise_term(term) for term in terms or ()]
        cleaned = [term for term in cleaned if term]
        if not cleaned:
            return False
        hits = sum(
            1 for term in cleaned if any(keyword in term for keyword in _SALTY_WATER_KEYWORDS)
        )
        return hits >= 2 or hits / len(cleaned) > 0.3


def _distinct(terms: Iterable[str]) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for term in terms:
        if term:
            seen.setdefault(term, None)
    return tuple(seen)


def _is_dominant(counts: Mapping[str, float]) -> bool:
    values = sorted((value for value in counts.values() if value > 0.0), reverse=True)
    if not values:
        return False
    top = values[0]
    second = values[1] if len(values) > 1 else _ABSENT_SECOND
    return top > _DOMINANT_SHARE * math.fsum(values) or top >= _DOMINANT_MULTIPLE * second
