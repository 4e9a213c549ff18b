"""Growing conditions to element distributions via banded factor tables."""

from __future__ import annotations

import math
from collections.abc import Mapping as MappingABC
from dataclasses import dataclass
from typing import Any, Mapping

from wuxing_core.elements import ElementDistribution
from wuxing_tea.record import GeographyProfile, TeaRecord
from wuxing_tea.tables import GeographyTables, load_default_tables

__all__ = ["FactorReading", "GeographyAnalysis", "GeographyElementMapper"]


@dataclass(frozen=True, slots=True)
class FactorReading:
    factor: str
    value: float
    band: str
    unit: str
    weight: float

    def as_dict(self) -> dict[str, Any]:
        return {
            "factor": self.factor,
            "value": self.value,
            "band": self.band,
            "unit": self.unit,
            "weight": self.weight,
        }


@dataclass(frozen=True, slots=True)
class GeographyAnalysis:
    readings: tuple[FactorReading, ...]
    terrain_character: str
    terrain_description: str
    dominant_element: str | None
    elements: ElementDistribution

    def as_dict(self) -> dict[str, Any]:
        return {
            "readings": [reading.as_dict() for reading in self.readings],
            "terrain_character": self.terrain_character,
            "terrain_description": self.terrain_description,
            "dominant_element": self.dominant_element,
            "elements": self.elements.as_dict(),
        }


def _as_profile(geography: GeographyProfile | Mapping[str, Any] | None) -> GeographyProfile | None:
    if geography is None or isinstance(geography, GeographyProfile):
        return geography
    if isinstance(geography, MappingABC):
        return GeographyProfile.from_mapping(geography)
    return None


class GeographyElementMapper:
    name = "geography"

    def __init__(self, tables: GeographyTables | None = None) -> None:
        self.tables = tables if tables is not None else load_default_tables().geography

    def readings(self, geography: GeographyProfile | Mapping[str, Any] | None) -> tuple[FactorReading, ...]:
        profile = _as_profile(geography)
        if profile is None:
            return ()
        readings: list[FactorReading] = []
        for factor in self.tables.factors:
            value = profile.value_of(factor.field)
            if value is None:
                continue
            readings.append(
                FactorReading(
                    factor=factor.name,
                    value=value,
                    band=factor.band_for(value).label,
                    unit=factor.unit,
                    weight=factor.weight,
                )
            )
        return tuple(readings)

    def map(self, geography: GeographyProfile | Mapping[str, Any] | None) -> ElementDistribution:
        profile = _as_profile(geography)
        if profile is None:
            return ElementDistribution.uniform()

        total = ElementDistribution.zeros()
        weights: list[float] = []
        for factor in self.tables.factors:
            value = profile.value_of(factor.field)
            if value is None:
                continue
            total = total.plus(factor.band_for(value).elements, factor.weight)
            weights.append(factor.weight)

        weight_sum = math.fsum(weights)
        if weight_sum <= 0.0:
            return ElementDistribution.uniform()
        return total.scaled(1.0 / weight_sum).clamped(0.0, 1.0)

    def map_record(self, record: TeaRecord) -> ElementDistribution | None:
        if record.geography is None:
            return None
        return self.map(record.geography)

    def analyze(self, geography: GeographyProfile | Mapping[str, Any] | None) -> GeographyAnalysis:
        profile = _as_profile(geography) or GeographyProfile()
        elements = self.map(profile)
        dominant, _ = elements.dominant_pair()
        character = _terrain_character(profile)
        if character is None:
            character = self.tables.terrain.get(dominant or "", "Balanced Terrain")
        return GeographyAnalysis(
            readings=self.readings(profile),
            terrain_character=character,
            terrain_description=self.tables.terrain_descriptions.get(dominant or "", ""),
            dominant_element=dominant,
            elements=elements,
        )


def _terrain_character(profile: GeographyProfile) -> str | None:
    altitude = profile.value_of("altitude")
    humidity = profile.value_of("humidity")
    temperature = profile.value_of("temperature")
    if altitude is not None and altitude > 1800:
        return "High Mountain"
    if humidity is not None and temperature is not None and humidity > 85 and temperature > 25:
        return "Tropical Rainforest"
    if humidity is not None and humidity < 40:
        return "Arid"
    return None
