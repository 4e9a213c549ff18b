"""Tea-level orchestration: combine, derive effects, compare teas."""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping as MappingABC
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence

from wuxing_core.config.loader import get_params
from wuxing_core.config.system import SystemConfig
from wuxing_core.elements import ELEMENTS, ElementDistribution
from wuxing_tea.combiner import ElementAnalysis, ElementsCalculator
from wuxing_tea.effects import BasicEffectsDeriver, EffectsDeriver, EffectsProfile
from wuxing_tea.mappers import (
    CompoundAnalysis,
    CompoundElementMapper,
    FlavorAnalysis,
    FlavorElementMapper,
    GeographyAnalysis,
    GeographyElementMapper,
    ProcessingAnalysis,
    ProcessingElementMapper,
)
from wuxing_tea.record import TeaRecord
from wuxing_tea.tables import TeaTables, load_default_tables

__all__ = [
    "ElementMatch",
    "SimilarTea",
    "TeaAnalyzer",
    "TeaProfile",
    "element_similarity",
    "seasonal_similarity",
]

logger = logging.getLogger(__name__)

_MAX_DISTANCE = math.sqrt(len(ELEMENTS))


def element_similarity(first: ElementDistribution, second: ElementDistribution) -> float:
    """Return ``1 - d / sqrt(5)`` for the Euclidean distance ``d``."""

    return 1.0 - first.distance(second) / _MAX_DISTANCE


def seasonal_similarity(first: Mapping[str, int], second: Mapping[str, int]) -> float:
    seasons = list(dict.fromkeys([*first, *second]))
    if not seasons:
        return 0.0
    squared = math.fsum(
        (first.get(season, 0) / 10.0 - second.get(season, 0) / 10.0) ** 2 for season in seasons
    )
    return 1.0 - math.sqrt(squared) / math.sqrt(len(seasons))


@dataclass(frozen=True, slots=True)
class TeaProfile:
    """Everything computed for a single tea."""

    record: TeaRecord
    analysis: ElementAnalysis
    effects: EffectsProfile
    flavor: FlavorAnalysis | None = None
    compounds: CompoundAnalysis | None = None
    processing: ProcessingAnalysis | None = None
    geography: GeographyAnalysis | None = None

    @property
    def name(self) -> str | None:
        return self.record.name

    @property
    def elements(self) -> ElementDistribution:
        return self.analysis.elements

    def as_dict(self) -> dict[str, Any]:
        return {
            "tea": self.record.as_dict(),
            "analysis": self.analysis.as_dict(),
            "effects": self.effects.as_dict(),
            "flavor": self.flavor.as_dict() if self.flavor is not None else None,
            "compounds": self.compounds.as_dict() if self.compounds is not None else None,
            "processing": self.processing.as_dict() if self.processing is not None else None,
            "geography": self.geography.as_dict() if self.geography is not None else None,
        }


@dataclass(frozen=True, slots=True)
class ElementMatch:
    role: str
    strength: str
    element: str | None = None
    season: str | None = None

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"role": self.role, "strength": self.strength}
        if self.element is not None:
            payload["element"] = self.element
        if self.season is not None:
            payload["season"] = self.season
        return payload


@dataclass(frozen=True, slots=True)
class SimilarTea:
    profile: TeaProfile
    similarity: float
    seasonal_similarity: float
    matches: tuple[ElementMatch, ...]

    def as_dict(self) -> dict[str, Any]:
        return {
            "name": self.profile.name,
            "similarity": self.similarity,
            "seasonal_similarity": self.seasonal_similarity,
            "matching_elements": [match.as_dict() for match in self.matches],
            "elements": self.profile.elements.as_dict(),
        }


def _matching_elements(target: TeaProfile, other: TeaProfile) -> tuple[ElementMatch, ...]:
    first, second = target.analysis, other.analysis
    matches: list[ElementMatch] = []
    if first.dominant_element is not None:
        if first.dominant_element == second.dominant_element:
            matches.append(ElementMatch("dominant", "strong", element=first.dominant_element))
        elif first.dominant_element == second.supporting_element:
            matches.append(ElementMatch("cross-match", "moderate", element=first.dominant_element))
    supporting = first.supporting_element
    if supporting is not None and supporting != first.dominant_element:
        if supporting == second.supporting_element:
            matches.append(ElementMatch("supporting", "moderate", element=supporting))
        elif supporting == second.dominant_element:
            matches.append(ElementMatch("cross-match", "moderate", element=supporting))
    peak = target.effects.peak_season
    if peak is not None and peak == other.effects.peak_season:
        matches.append(ElementMatch("seasonal-match", "strong", season=peak))
    return tuple(matches)


class TeaAnalyzer:
    """Run the engine over tea records and compare the results.

    ``overrides`` is a system configuration mapping whose ``defaults``,
    ``tea_types`` and ``origins`` sections are merged per tea before the
    calculation, so a tea type can carry its own weights or strengths.
    """

    def __init__(
        self,
        config: SystemConfig | None = None,
        *,
        tables: TeaTables | None = None,
        deriver: EffectsDeriver | None = None,
        overrides: Mapping[str, Any] | None = None,
    ) -> None:
        self.config = config if config is not None else SystemConfig()
        self.tables = tables if tables is not None else load_default_tables()
        self.deriver = deriver if deriver is not None else BasicEffectsDeriver(self.tables.effects)
        self.overrides = overrides or {}
        self.calculator = ElementsCalculator(self.config, tables=self.tables)

    def _calculator_for(self, record: TeaRecord) -> ElementsCalculator:
        params = get_params(self.overrides, tea_type=record.tea_type, origin=record.origin)
        if not params:
            return self.calculator
        logger.debug(
            "Applying per-tea configuration overrides.",
            extra={"event": "analyzer.overrides", "tea": record.name, "keys": sorted(params)},
        )
        return ElementsCalculator(self.config.derive(params), tables=self.tables)

    def analyze_tea(self, tea: TeaRecord | Mapping[str, Any]) -> TeaProfile:
        record = TeaRecord.from_mapping(tea) if isinstance(tea, MappingABC) else tea
        calculator = self._calculator_for(record)
        analysis = calculator.combine(record)
        effects = self.deriver.derive(analysis, record)

        flavor = compounds = processing = geography = None
        mappers = calculator.mappers
        flavor_mapper = mappers.get("flavor")
        if record.flavor_profile is not None and isinstance(flavor_mapper, FlavorElementMapper):
            flavor = flavor_mapper.analyze_profile(record.flavor_profile)
        compound_mapper = mappers.get("compounds")
        if record.has_compounds and isinstance(compound_mapper, CompoundElementMapper):
            compounds = compound_mapper.analyze(record.caffeine_level, record.l_theanine_level)
        processing_mapper = mappers.get("processing")
        if record.processing_methods and isinstance(processing_mapper, ProcessingElementMapper):
            processing = processing_mapper.analyze(record.processing_methods)
        geography_mapper = mappers.get("geography")
        if record.geography is not None and isinstance(geography_mapper, GeographyElementMapper):
            geography = geography_mapper.analyze(record.geography)

        return TeaProfile(
            record=record,
            analysis=analysis,
            effects=effects,
            flavor=flavor,
            compounds=compounds,
            processing=processing,
            geography=geography,
        )

    def analyze_teas(self, teas: Iterable[TeaRecord | Mapping[str, Any]]) -> list[TeaProfile]:
        return [self.analyze_tea(tea) for tea in teas]

    def find_similar_teas(
        self,
        target: TeaRecord | Mapping[str, Any],
        candidates: Sequence[TeaRecord | Mapping[str, Any]],
        *,
        limit: int = 5,
    ) -> list[SimilarTea]:
        """Rank ``candidates`` by element similarity to ``target``.

        Candidates sharing the target's name and tea type are skipped.
        """

        target_profile = self.analyze_tea(target)
        target_key = (target_profile.record.name, target_profile.record.tea_type)
        results: list[SimilarTea] = []
        for candidate in candidates:
            profile = self.analyze_tea(candidate)
            if (profile.record.name, profile.record.tea_type) == target_key:
                continue
            results.append(
                SimilarTea(
                    profile=profile,
                    similarity=element_similarity(target_profile.elements, profile.elements),
                    seasonal_similarity=seasonal_similarity(
                        target_profile.effects.seasonal_scores, profile.effects.seasonal_scores
                    ),
                    matches=_matching_elements(target_profile, profile),
                )
            )
        results.sort(key=lambda item: item.similarity, reverse=True)
        return results[: max(0, limit)]
