"""Processing-method tags to element distributions."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Sequence

from wuxing_core.config.system import SystemConfig
from wuxing_core.elements import ElementDistribution
from wuxing_core.numeric import coerce_float
from wuxing_core.returns import DEFAULT_DIMINISHING_RETURNS, DiminishingReturns
from wuxing_tea.record import TeaRecord
from wuxing_tea.tables import (
    ProcessingCombination,
    ProcessingMethod,
    ProcessingTables,
    TeaTypeTables,
    load_default_tables,
    normalise_tag,
)

__all__ = ["ProcessingAnalysis", "ProcessingElementMapper"]

logger = logging.getLogger(__name__)

GENERAL_CATEGORY = "general"


@dataclass(frozen=True, slots=True)
class ProcessingAnalysis:
    tags: tuple[str, ...]
    methods: tuple[ProcessingMethod, ...]
    groups: Mapping[str, tuple[str, ...]]
    combinations: tuple[str, ...]
    nature: str
    elements: ElementDistribution

    def as_dict(self) -> dict[str, Any]:
        return {
            "tags": list(self.tags),
            "methods": [
                {
                    "tag": method.tag,
                    "category": method.category,
                    "description": method.description,
                    "examples": list(method.examples),
                    "elements": method.elements.as_dict(),
                }
                for method in self.methods
            ],
            "groups": {name: list(tags) for name, tags in self.groups.items()},
            "combinations": list(self.combinations),
            "nature": self.nature,
            "elements": self.elements.as_dict(),
        }


class ProcessingElementMapper:
    """Map processing tags, falling back to the tea-type table."""

    name = "processing"

    def __init__(
        self,
        tables: ProcessingTables | None = None,
        tea_types: TeaTypeTables | None = None,
        *,
        diminishing: DiminishingReturns | None = None,
        category_weights: Mapping[str, Any] | None = None,
        combinations: Sequence[ProcessingCombination] | None = None,
    ) -> None:
        defaults = load_default_tables() if tables is None or tea_types is None else None
        self.tables = tables if tables is not None else defaults.processing
        self.tea_types = tea_types if tea_types is not None else defaults.tea_types
        self.diminishing = diminishing if diminishing is not None else DEFAULT_DIMINISHING_RETURNS
        self.category_weights = MappingProxyType(
            {
                str(key): max(0.0, coerce_float(value, 1.0))
                for key, value in (category_weights or {}).items()
            }
        )
        self.combinations = tuple(
            combinations if combinations is not None else self.tables.combinations
        )
        self._substring_keys = tuple(
            sorted(self.tables.methods, key=lambda key: (-len(key), key))
        )

    @classmethod
    def from_config(
        cls,
        config: SystemConfig,
        tables: ProcessingTables | None = None,
        tea_types: TeaTypeTables | None = None,
    ) -> "ProcessingElementMapper":
        weights = config.get("processing.categoryWeights")
        return cls(
            tables,
            tea_types,
            diminishing=config.diminishing_returns,
            category_weights=weights if isinstance(weights, Mapping) else None,
        )

    def resolve_tag(self, tag: str) -> ProcessingMethod:
        key = normalise_tag(tag)
        method = self.tables.methods.get(key)
        if method is not None:
            return method
        if key:
            compact = key.replace("-", "")
            spaced = key.replace("-", " ")
            for candidate in self._substring_keys:
                if (
                    candidate in key
                    or key in candidate
                    or candidate.replace("-", " ") in spaced
                    or candidate.replace("-", "") in compact
                ):
                    return self.tables.methods[candidate]
        return ProcessingMethod(
            tag=key, category=GENERAL_CATEGORY, elements=ElementDistribution.uniform()
        )

    def category_weight(self, category: str) -> float:
        return self.category_weights.get(category, 1.0)

    def map(self, tags: Iterable[str] | None) -> ElementDistribution:
        cleaned = [normalise_tag(tag) for tag in tags or ()]
        cleaned = [tag for tag in cleaned if tag]
        if not cleaned:
            return ElementDistribution.uniform()
        return self._map_cleaned(cleaned)[0]

    def _map_cleaned(
        self, cleaned: list[str]
    ) -> tuple[ElementDistribution, tuple[ProcessingMethod, ...], tuple[str, ...]]:
        methods = tuple(self.resolve_tag(tag) for tag in cleaned)
        per_category: Counter = Counter()
        total = ElementDistribution.zeros()
        for method in methods:
            per_category[method.category] += 1
            factor = self.diminishing.multiplier(per_category[method.category])
            total = total.plus(method.elements, factor * self.category_weight(method.category))

        if total.total <= 0.0:
            total = ElementDistribution.uniform()
        values = total.normalised().as_dict()

        present = frozenset(cleaned)
        applied: list[str] = []
        for combination in self.combinations:
            if combination.matches(present):
                combination.apply(values)
                applied.append(combination.name)
        if applied:
            logger.debug(
                "Applied processing combinations.",
                extra={"event": "processing.combinations", "combinations": applied},
            )
        result = ElementDistribution.from_mapping(values).clamped(0.0).normalised()
        return result, methods, tuple(applied)

    def map_record(self, record: TeaRecord) -> ElementDistribution | None:
        tags = record.processing_methods
        if not tags:
            profile = self.tea_types.resolve(record.tea_type)
            if profile is not None:
                return profile.normalised()
            if tags is None:
                return None
        return self.map(tags)

    def analyze(self, tags: Iterable[str] | None) -> ProcessingAnalysis:
        cleaned = [normalise_tag(tag) for tag in tags or ()]
        cleaned = [tag for tag in cleaned if tag]
        if cleaned:
            elements, methods, applied = self._map_cleaned(cleaned)
        else:
            elements, methods, applied = ElementDistribution.uniform(), (), ()

        resolved = [method.tag for method in methods]
        groups: dict[str, tuple[str, ...]] = {}
        for name, members in self.tables.groups.items():
            hits = tuple(tag for tag in dict.fromkeys(resolved) if tag in members)
            if hits:
                groups[name] = hits

        return ProcessingAnalysis(
            tags=tuple(cleaned),
            methods=methods,
            groups=MappingProxyType(groups),
            combinations=applied,
            nature=_processing_nature(elements),
            elements=elements,
        )


def _processing_nature(elements: ElementDistribution) -> str:
    if elements.fire > 0.35:
        return "Warm to Hot"
    if elements.fire > 0.25:
        return "Warm"
    if elements.water > 0.35 or elements.metal > 0.3:
        return "Cool"
    return "Neutral"
