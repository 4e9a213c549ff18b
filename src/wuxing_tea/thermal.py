"""Thermal (warming/cooling) scalar per attribute class and its element shift."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from wuxing_core.config.system import ATTRIBUTE_CLASSES, SystemConfig
from wuxing_core.elements import ElementDistribution
from wuxing_core.numeric import clamp, coerce_float
from wuxing_tea.mappers.compound import normalise_level
from wuxing_tea.record import GeographyProfile, TeaRecord
from wuxing_tea.tables import (
    FlavorTables,
    ThermalBand,
    ThermalTables,
    load_default_tables,
    normalise_tag,
    normalise_term,
)

__all__ = ["DEFAULT_THERMAL_WEIGHTS", "ThermalAnalysis", "ThermalComponent", "ThermalEngine"]

logger = logging.getLogger(__name__)

DEFAULT_THERMAL_WEIGHTS: Mapping[str, float] = MappingProxyType(
    {"flavor": 0.35, "processing": 0.25, "compounds": 0.25, "geography": 0.15}
)


@dataclass(frozen=True, slots=True)
class ThermalComponent:
    value: float
    weight: float
    contribution: float
    included: bool

    def as_dict(self) -> dict[str, Any]:
        return {
            "value": self.value,
            "weight": self.weight,
            "contribution": self.contribution,
            "included": self.included,
        }


@dataclass(frozen=True, slots=True)
class ThermalAnalysis:
    total_thermal: float
    thermal_property: str
    components: Mapping[str, ThermalComponent]

    def as_dict(self) -> dict[str, Any]:
        return {
            "total_thermal": self.total_thermal,
            "thermal_property": self.thermal_property,
            "components": {name: item.as_dict() for name, item in self.components.items()},
        }


def _banded(bands: Iterable[ThermalBand], value: float) -> float:
    last = 0.0
    for band in bands:
        last = band.value
        if band.below is None or value < band.below:
            return band.value
    return last


class ThermalEngine:
    """Compute thermal scalars in ``[-1, 1]`` and shift distributions by them.

    A component whose value is exactly ``0.0`` counts as absent and is left
    out of both the numerator and the weight sum of the aggregate.
    """

    def __init__(
        self,
        tables: ThermalTables | None = None,
        flavor_tables: FlavorTables | None = None,
        *,
        weights: Mapping[str, float] | None = None,
        adjustment_strength: float = 1.0,
    ) -> None:
        defaults = load_default_tables() if tables is None or flavor_tables is None else None
        self.tables = tables if tables is not None else defaults.thermal
        self.flavor_tables = flavor_tables if flavor_tables is not None else defaults.flavor
        source = weights if weights is not None else DEFAULT_THERMAL_WEIGHTS
        self.weights = MappingProxyType(
            {
                name: max(0.0, coerce_float(source.get(name), DEFAULT_THERMAL_WEIGHTS[name]))
                for name in ATTRIBUTE_CLASSES
            }
        )
        self.adjustment_strength = max(0.0, adjustment_strength)

    @classmethod
    def from_config(
        cls,
        config: SystemConfig,
        tables: ThermalTables | None = None,
        flavor_tables: FlavorTables | None = None,
    ) -> "ThermalEngine":
        return cls(
            tables,
            flavor_tables,
            weights=config.thermal_weights(),
            adjustment_strength=config.thermal_adjustment_strength,
        )

    # ------------------------------------------------------------------
    # component scalars
    # ------------------------------------------------------------------
    def _flavor_term(self, term: str) -> float | None:
        table = self.tables.flavor
        if term in table:
            return table[term]
        category = self.flavor_tables.notes.get(term) or self.flavor_tables.direct_flavors.get(term)
        if category is not None and category in table:
            return table[category]
        for key, value in table.items():
            if key in term or term in key:
                return value
        return None

    def flavor_thermal(self, terms: Iterable[str] | None) -> float:
        values = []
        for raw in terms or ():
            term = normalise_term(raw)
            if not term:
                continue
            value = self._flavor_term(term)
            if value is not None:
                values.append(value)
        if not values:
            return 0.0
        return clamp(math.fsum(values) / len(values), -1.0, 1.0)

    def _processing_tag(self, tag: str) -> float | None:
        table = self.tables.processing
        if tag in table:
            return table[tag]
        for key, value in table.items():
            if key in tag or tag in key:
                return value
        return None

    def processing_thermal(self, tags: Iterable[str] | None) -> float:
        values = []
        for raw in tags or ():
            tag = normalise_tag(raw)
            if not tag:
                continue
            value = self._processing_tag(tag)
            if value is not None:
                values.append(value)
        if not values:
            return 0.0
        return clamp(math.fsum(values) / len(values), -1.0, 1.0)

    def compound_thermal(self, caffeine: Any, l_theanine: Any) -> float:
        if caffeine is None or l_theanine is None:
            return 0.0
        return clamp(
            normalise_level(caffeine) * 0.1 - normalise_level(l_theanine) * 0.07, -1.0, 1.0
        )

    def geography_thermal(
        self, geography: GeographyProfile | None, origin: str | None = None
    ) -> float:
        values: list[float] = []
        if geography is not None:
            for field_name in ("altitude", "temperature", "humidity"):
                reading = geography.value_of(field_name)
                bands = self.tables.geography.get(field_name)
                if reading is not None and bands:
                    values.append(_banded(bands, reading))
            if geography.climate is not None:
                climate = self.tables.climate.get(normalise_tag(geography.climate))
                if climate is not None:
                    values.append(climate)
        region_name = geography.region if geography is not None and geography.region else origin
        if region_name:
            region = self.tables.region.get(normalise_tag(region_name))
            if region is not None:
                values.append(region)
        if not values:
            return 0.0
        return clamp(math.fsum(values) / len(values), -1.0, 1.0)

    def component_values(self, record: TeaRecord) -> dict[str, float]:
        return {
            "flavor": self.flavor_thermal(record.flavor_profile),
            "processing": self.processing_thermal(record.processing_methods),
            "compounds": self.compound_thermal(record.caffeine_level, record.l_theanine_level),
            "geography": self.geography_thermal(record.geography, record.origin),
        }

    # ------------------------------------------------------------------
    # aggregate
    # ------------------------------------------------------------------
    def aggregate(self, values: Mapping[str, float]) -> ThermalAnalysis:
        included = {
            name: value
            for name, value in values.items()
            if value != 0.0 and self.weights.get(name, 0.0) > 0.0
        }
        weight_sum = math.fsum(self.weights[name] for name in included)
        components: dict[str, ThermalComponent] = {}
        total = 0.0
        for name, value in values.items():
            weight = self.weights.get(name, 0.0)
            contribution = value * weight / weight_sum if name in included else 0.0
            total += contribution
            components[name] = ThermalComponent(
                value=value, weight=weight, contribution=contribution, included=name in included
            )
        total = clamp(total, -1.0, 1.0) if included else 0.0
        return ThermalAnalysis(
            total_thermal=total,
            thermal_property=self.classify(total),
            components=MappingProxyType(components),
        )

    def analyze(self, record: TeaRecord, *, only: str | None = None) -> ThermalAnalysis:
        """Aggregate the thermal components of ``record``.

        ``only`` restricts the aggregate to a single attribute class; the
        other components are reported as zero.
        """

        values = self.component_values(record)
        if only is not None:
            values = {name: (value if name == only else 0.0) for name, value in values.items()}
        return self.aggregate(values)

    def classify(self, value: float) -> str:
        return self.tables.label_for(value)

    # ------------------------------------------------------------------
    # distribution shift
    # ------------------------------------------------------------------
    def adjust(self, distribution: ElementDistribution, thermal: float) -> ElementDistribution:
        """Shift mass between fire, water, earth and metal by ``thermal``."""

        strength = self.adjustment_strength
        magnitude = abs(thermal)
        values = distribution.as_dict()

        if thermal < -0.5:
            values["fire"] = max(0.0, values["fire"] * (1.0 - magnitude * 0.3 * strength))
            values["water"] += magnitude * 0.1 * strength
            values["metal"] += magnitude * 0.05 * strength
        elif thermal < -0.2:
            values["fire"] = max(0.0, values["fire"] * (1.0 - magnitude * 0.2 * strength))
            values["water"] += magnitude * 0.07 * strength
            values["metal"] += magnitude * 0.03 * strength
        elif thermal > 0.5:
            values["fire"] += magnitude * 0.1 * strength
            values["earth"] += magnitude * 0.05 * strength
            values["water"] = max(0.0, values["water"] * (1.0 - magnitude * 0.3 * strength))
        elif thermal > 0.2:
            values["fire"] += magnitude * 0.07 * strength
            values["earth"] += magnitude * 0.03 * strength
            values["water"] = max(0.0, values["water"] * (1.0 - magnitude * 0.2 * strength))
        else:
            values["earth"] += 0.03 * strength

        adjusted = ElementDistribution.from_mapping(values).clamped(0.0)
        if adjusted.total <= 0.0:
            logger.debug(
                "Thermal adjustment left no mass to renormalise.",
                extra={"event": "thermal.empty", "thermal": thermal},
            )
            return adjusted
        return adjusted.normalised()
