"""Weighted combination of the attribute mappers into a final distribution."""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping as MappingABC
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Sequence

from wuxing_core.config.system import ATTRIBUTE_CLASSES, SystemConfig
from wuxing_core.elements import ElementDistribution
from wuxing_core.interactions import DEFAULT_INTERACTION_GRAPH, InteractionGraph, apply_interactions
from wuxing_tea.mappers import (
    AttributeMapper,
    CompoundElementMapper,
    FlavorElementMapper,
    GeographyElementMapper,
    ProcessingElementMapper,
)
from wuxing_tea.record import TeaRecord
from wuxing_tea.tables import TeaTables, load_default_tables
from wuxing_tea.thermal import ThermalAnalysis, ThermalEngine

__all__ = [
    "INSUFFICIENT_DATA_MESSAGE",
    "STATUS_INSUFFICIENT_DATA",
    "STATUS_OK",
    "DistributionMetrics",
    "ElementAnalysis",
    "ElementsCalculator",
    "WeightResolution",
    "distribution_metrics",
]

logger = logging.getLogger(__name__)

STATUS_OK = "ok"
STATUS_INSUFFICIENT_DATA = "insufficient_data"
INSUFFICIENT_DATA_MESSAGE = (
    "No flavor, compound, processing or geography data was supplied; "
    "the element distribution cannot be computed."
)


@dataclass(frozen=True, slots=True)
class WeightResolution:
    weights: Mapping[str, float]
    exclusive: str | None = None


@dataclass(frozen=True, slots=True)
class DistributionMetrics:
    balanced: bool
    dominant: bool
    even: bool
    entropy: float

    def as_dict(self) -> dict[str, Any]:
        return {
            "balanced": self.balanced,
            "dominant": self.dominant,
            "even": self.even,
            "entropy": self.entropy,
        }


def distribution_metrics(distribution: ElementDistribution) -> DistributionMetrics:
    """Describe how concentrated ``distribution`` is."""

    ranked = [value for _, value in distribution.ranked()]
    top, second, lowest = ranked[0], ranked[1], ranked[-1]
    if top <= 0.0:
        return DistributionMetrics(balanced=False, dominant=False, even=False, entropy=0.0)
    balanced = lowest > 0.0 and top / lowest < 3.0
    dominant = second <= 0.0 or top / second > 1.8
    return DistributionMetrics(
        balanced=balanced,
        dominant=dominant,
        even=top < 0.3,
        entropy=distribution.entropy(),
    )


@dataclass(frozen=True, slots=True)
class ElementAnalysis:
    """Result of :meth:`ElementsCalculator.combine`."""

    elements: ElementDistribution
    dominant_element: str | None
    supporting_element: str | None
    component_scores: Mapping[str, ElementDistribution]
    thermal_analysis: ThermalAnalysis | None
    raw_elements: ElementDistribution
    thermal_adjusted: ElementDistribution
    weights: Mapping[str, float]
    contributions: Mapping[str, Mapping[str, Any]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    metrics: DistributionMetrics | None = None
    status: str = STATUS_OK
    message: str | None = None
    exclusive: str | None = None

    @property
    def element_pair(self) -> str | None:
        if self.dominant_element is None or self.supporting_element is None:
            return None
        return f"{self.dominant_element}+{self.supporting_element}"

    @property
    def is_sufficient(self) -> bool:
        return self.status == STATUS_OK

    def as_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "message": self.message,
            "elements": self.elements.as_dict(),
            "dominant_element": self.dominant_element,
            "supporting_element": self.supporting_element,
            "element_pair": self.element_pair,
            "component_scores": {
                name: scores.as_dict() for name, scores in self.component_scores.items()
            },
            "thermal_analysis": (
                self.thermal_analysis.as_dict() if self.thermal_analysis is not None else None
            ),
            "raw_elements": self.raw_elements.as_dict(),
            "thermal_adjusted": self.thermal_adjusted.as_dict(),
            "weights": dict(self.weights),
            "exclusive": self.exclusive,
            "contributions": {name: dict(values) for name, values in self.contributions.items()},
            "metrics": self.metrics.as_dict() if self.metrics is not None else None,
        }


class ElementsCalculator:
    """Combine the four attribute mappers into one element distribution.

    The calculator keeps no per-call state: :meth:`combine` is a pure
    function of the record, the injected mappers and the configuration.
    """

    def __init__(
        self,
        config: SystemConfig | None = None,
        *,
        tables: TeaTables | None = None,
        mappers: Sequence[AttributeMapper] | None = None,
        thermal: ThermalEngine | None = None,
        graph: InteractionGraph = DEFAULT_INTERACTION_GRAPH,
    ) -> None:
        self.config = config if config is not None else SystemConfig()
        self.tables = tables if tables is not None else load_default_tables()
        if mappers is None:
            mappers = (
                FlavorElementMapper.from_config(self.config, self.tables.flavor),
                CompoundElementMapper.from_config(self.config, self.tables.compounds),
                ProcessingElementMapper.from_config(
                    self.config, self.tables.processing, self.tables.tea_types
                ),
                GeographyElementMapper(self.tables.geography),
            )
        self.mappers: Mapping[str, AttributeMapper] = MappingProxyType(
            {mapper.name: mapper for mapper in mappers}
        )
        self.thermal = (
            thermal
            if thermal is not None
            else ThermalEngine.from_config(self.config, self.tables.thermal, self.tables.flavor)
        )
        self.graph = graph

    def resolve_weights(self, present: Sequence[str]) -> WeightResolution:
        """Resolve class weights over the classes in ``present``.

        A present class configured at ``1.0`` or more takes all of the
        weight. Otherwise the configured weights of the present classes are
        rescaled to sum to one; if they are all zero the classes share
        equally.
        """

        configured = self.config.element_weights()
        for name in ATTRIBUTE_CLASSES:
            if name in present and configured.get(name, 0.0) >= 1.0:
                weights = {other: 0.0 for other in ATTRIBUTE_CLASSES}
                weights[name] = 1.0
                return WeightResolution(MappingProxyType(weights), exclusive=name)

        weights = {
            name: configured.get(name, 0.0) if name in present else 0.0
            for name in ATTRIBUTE_CLASSES
        }
        total = math.fsum(weights.values())
        if total <= 0.0:
            if present:
                logger.debug(
                    "Configured weights of the present classes are zero; sharing equally.",
                    extra={"event": "combiner.equal_weights", "present": list(present)},
                )
            share = 1.0 / len(present) if present else 0.0
            weights = {name: share if name in present else 0.0 for name in ATTRIBUTE_CLASSES}
        else:
            weights = {name: value / total for name, value in weights.items()}
        return WeightResolution(MappingProxyType(weights))

    def combine(self, tea: TeaRecord | Mapping[str, Any]) -> ElementAnalysis:
        record = TeaRecord.from_mapping(tea) if isinstance(tea, MappingABC) else tea

        scores: dict[str, ElementDistribution | None] = {}
        for name in ATTRIBUTE_CLASSES:
            mapper = self.mappers.get(name)
            scores[name] = mapper.map_record(record) if mapper is not None else None
        present = [name for name in ATTRIBUTE_CLASSES if scores[name] is not None]
        component_scores = MappingProxyType(
            {
                name: score if score is not None else ElementDistribution.zeros()
                for name, score in scores.items()
            }
        )

        resolution = self.resolve_weights(present)

        if not present:
            logger.info(
                "Insufficient data to compute elements.",
                extra={"event": "combiner.insufficient_data", "tea": record.name},
            )
            zeros = ElementDistribution.zeros()
            return ElementAnalysis(
                elements=zeros,
                dominant_element=None,
                supporting_element=None,
                component_scores=component_scores,
                thermal_analysis=None,
                raw_elements=zeros,
                thermal_adjusted=zeros,
                weights=resolution.weights,
                metrics=distribution_metrics(zeros),
                status=STATUS_INSUFFICIENT_DATA,
                message=INSUFFICIENT_DATA_MESSAGE,
            )

        combined = ElementDistribution.zeros()
        for name in present:
            combined = combined.plus(component_scores[name], resolution.weights[name])
        raw = combined.normalised()

        thermal_analysis = self.thermal.analyze(record, only=resolution.exclusive)
        if resolution.exclusive is not None:
            adjusted = raw
            final = raw
        else:
            adjusted = self.thermal.adjust(raw, thermal_analysis.total_thermal)
            final = adjusted
            if self.config.interactions_enabled:
                final = apply_interactions(
                    adjusted,
                    generating_strength=self.config.generating_strength,
                    controlling_strength=self.config.controlling_strength,
                    graph=self.graph,
                )

        dominant, supporting = final.dominant_pair()
        logger.debug(
            "Combined tea elements.",
            extra={
                "event": "combiner.combined",
                "tea": record.name,
                "present": present,
                "exclusive": resolution.exclusive,
                "dominant": dominant,
            },
        )
        return ElementAnalysis(
            elements=final,
            dominant_element=dominant,
            supporting_element=supporting,
            component_scores=component_scores,
            thermal_analysis=thermal_analysis,
            raw_elements=raw,
            thermal_adjusted=adjusted,
            weights=resolution.weights,
            contributions=_contributions(component_scores, resolution.weights, combined),
            metrics=distribution_metrics(final),
            exclusive=resolution.exclusive,
        )


def _contributions(
    scores: Mapping[str, ElementDistribution],
    weights: Mapping[str, float],
    combined: ElementDistribution,
) -> Mapping[str, Mapping[str, Any]]:
    dominant, _ = combined.dominant_pair()
    if dominant is None:
        return MappingProxyType({})
    target = combined[dominant]
    contributions: dict[str, Mapping[str, Any]] = {}
    for name in ATTRIBUTE_CLASSES:
        value = scores[name][dominant]
        raw = value * weights.get(name, 0.0)
        contributions[name] = MappingProxyType(
            {
                "element": dominant,
                "element_value": value,
                "weight": weights.get(name, 0.0),
                "raw_contribution": raw,
                "share": raw / target if target > 0.0 else 0.0,
            }
        )
    return MappingProxyType(contributions)
