"""Interpretive effects derived from a combined element analysis.

:class:`EffectsDeriver` is the seam consumed by presentation layers; the
bundled :class:`BasicEffectsDeriver` only reads the packaged effects table
and produces labels, signatures and seasonal scores.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Protocol, runtime_checkable

from wuxing_core.elements import ElementDistribution
from wuxing_tea.combiner import ElementAnalysis
from wuxing_tea.record import TeaRecord
from wuxing_tea.tables import EffectsTables, load_default_tables

__all__ = [
    "BasicEffectsDeriver",
    "CombinationProfile",
    "EffectsDeriver",
    "EffectsProfile",
    "ElementSignature",
    "element_signature",
    "seasonal_scores",
]

_TCM_NATURE: Mapping[str, str] = MappingProxyType(
    {
        "Strongly warming": "Hot",
        "Warming": "Warm",
        "Mildly warming": "Slightly Warm",
        "Neutral": "Neutral",
        "Mildly cooling": "Slightly Cool",
        "Cooling": "Cool",
        "Strongly cooling": "Cold",
    }
)

_TCM_FLAVOR: Mapping[str, str] = MappingProxyType(
    {"wood": "Sour", "fire": "Bitter", "earth": "Sweet", "metal": "Pungent", "water": "Salty"}
)


@runtime_checkable
class EffectsDeriver(Protocol):
    def derive(self, analysis: ElementAnalysis, tea: TeaRecord | None = None) -> "EffectsProfile":  # pragma: no cover - protocol
        ...


@dataclass(frozen=True, slots=True)
class ElementSignature:
    pattern: str
    primary: str
    secondary: str
    tertiary: str
    dominant: bool
    balanced: bool

    def as_dict(self) -> dict[str, Any]:
        return {
            "pattern": self.pattern,
            "primary": self.primary,
            "secondary": self.secondary,
            "tertiary": self.tertiary,
            "dominant": self.dominant,
            "balanced": self.balanced,
        }


@dataclass(frozen=True, slots=True)
class CombinationProfile:
    name: str
    effect: str
    elements: tuple[str, str]

    def as_dict(self) -> dict[str, Any]:
        return {"name": self.name, "effect": self.effect, "elements": list(self.elements)}


@dataclass(frozen=True, slots=True)
class EffectsProfile:
    combination: CombinationProfile | None
    signature: ElementSignature | None
    seasonal_scores: Mapping[str, int]
    peak_season: str | None
    tcm_nature: str | None
    tcm_flavor: str | None
    element_descriptions: Mapping[str, str]

    def as_dict(self) -> dict[str, Any]:
        return {
            "combination": self.combination.as_dict() if self.combination else None,
            "signature": self.signature.as_dict() if self.signature else None,
            "seasonal_scores": dict(self.seasonal_scores),
            "peak_season": self.peak_season,
            "tcm_nature": self.tcm_nature,
            "tcm_flavor": self.tcm_flavor,
            "element_descriptions": dict(self.element_descriptions),
        }


def element_signature(elements: ElementDistribution) -> ElementSignature | None:
    """Summarise the ranking of ``elements``; ``None`` without mass."""

    ranked = elements.ranked()
    primary_score = ranked[0][1]
    if primary_score <= 0.0:
        return None
    secondary_score = ranked[1][1]
    lowest_score = ranked[-1][1]
    return ElementSignature(
        pattern="".join(element[0].upper() for element, _ in ranked[:3]),
        primary=ranked[0][0],
        secondary=ranked[1][0],
        tertiary=ranked[2][0],
        dominant=secondary_score <= 0.0 or primary_score / secondary_score > 1.5,
        balanced=lowest_score > 0.0 and primary_score / lowest_score < 2.5,
    )


def seasonal_scores(elements: ElementDistribution, tables: EffectsTables) -> dict[str, int]:
    """Score every season from 0 to 10 by element/season affinity."""

    total = elements.total
    scores: dict[str, int] = {}
    for season in tables.season_order:
        if total <= 0.0:
            scores[season] = 0
            continue
        affinity = math.fsum(
            value * tables.seasonal_strengths.get(element, {}).get(season, 0.0)
            for element, value in elements.items()
        )
        scores[season] = min(10, round(affinity / total * 10))
    return scores


class BasicEffectsDeriver:
    """Table-driven effects: pair names, signature, seasons and TCM nature."""

    def __init__(self, tables: EffectsTables | None = None) -> None:
        self.tables = tables if tables is not None else load_default_tables().effects

    def combination(self, primary: str, supporting: str) -> CombinationProfile:
        profile = self.tables.pairs.get(frozenset((primary, supporting)))
        if profile is not None:
            return CombinationProfile(profile.name, profile.effect, (primary, supporting))
        first = self._display_name(primary)
        second = self._display_name(supporting)
        return CombinationProfile(
            name=f"{first}-{second} Harmony",
            effect=f"combines the qualities of {first} and {second}",
            elements=(primary, supporting),
        )

    def _display_name(self, element: str) -> str:
        definition = self.tables.elements.get(element)
        return definition.name if definition is not None else element.title()

    def derive(self, analysis: ElementAnalysis, tea: TeaRecord | None = None) -> EffectsProfile:
        elements = analysis.elements
        if analysis.dominant_element is None or analysis.supporting_element is None:
            return EffectsProfile(
                combination=None,
                signature=None,
                seasonal_scores=MappingProxyType(seasonal_scores(elements, self.tables)),
                peak_season=None,
                tcm_nature=None,
                tcm_flavor=None,
                element_descriptions=MappingProxyType({}),
            )

        scores = seasonal_scores(elements, self.tables)
        peak = max(scores.items(), key=lambda item: item[1])[0] if scores else None
        thermal_label = (
            analysis.thermal_analysis.thermal_property
            if analysis.thermal_analysis is not None
            else "Neutral"
        )
        descriptions = {
            element: definition.description
            for element, definition in self.tables.elements.items()
            if element in (analysis.dominant_element, analysis.supporting_element)
        }
        return EffectsProfile(
            combination=self.combination(analysis.dominant_element, analysis.supporting_element),
            signature=element_signature(elements),
            seasonal_scores=MappingProxyType(scores),
            peak_season=peak,
            tcm_nature=_TCM_NATURE.get(thermal_label, "Neutral"),
            tcm_flavor=_TCM_FLAVOR.get(analysis.dominant_element),
            element_descriptions=MappingProxyType(descriptions),
        )
