"""Input records describing a tea and its growing conditions."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from wuxing_core.numeric import coerce_optional_float

__all__ = ["GeographyProfile", "TeaRecord"]


def _pick(payload: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in payload:
            return payload[key]
    return None


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _optional_terms(value: Any) -> tuple[str, ...] | None:
    if value is None:
        return None
    if isinstance(value, str):
        return tuple(part.strip() for part in value.split(",") if part.strip())
    if isinstance(value, Iterable):
        return tuple(str(item) for item in value if item is not None)
    return None


@dataclass(frozen=True, slots=True)
class GeographyProfile:
    """Growing conditions; every field is optional."""

    altitude: float | None = None
    humidity: float | None = None
    temperature: float | None = None
    solar_radiation: float | None = None
    latitude: float | None = None
    climate: str | None = None
    region: str | None = None

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "GeographyProfile":
        return cls(
            altitude=coerce_optional_float(_pick(payload, "altitude")),
            humidity=coerce_optional_float(_pick(payload, "humidity")),
            temperature=coerce_optional_float(_pick(payload, "temperature")),
            solar_radiation=coerce_optional_float(
                _pick(payload, "solar_radiation", "solarRadiation")
            ),
            latitude=coerce_optional_float(_pick(payload, "latitude")),
            climate=_optional_text(_pick(payload, "climate")),
            region=_optional_text(_pick(payload, "region")),
        )

    def value_of(self, field_name: str) -> float | None:
        """Return a numeric reading as a finite float, ``None`` when absent."""

        return coerce_optional_float(getattr(self, field_name, None))


@dataclass(frozen=True, slots=True)
class TeaRecord:
    """Raw tea attributes.

    ``None`` marks an attribute as absent; an empty tuple or an empty
    :class:`GeographyProfile` means the attribute was supplied without
    content. The distinction drives weight exclusion in the combiner.
    """

    name: str | None = None
    tea_type: str | None = None
    origin: str | None = None
    flavor_profile: tuple[str, ...] | None = None
    caffeine_level: float | None = None
    l_theanine_level: float | None = None
    processing_methods: tuple[str, ...] | None = None
    geography: GeographyProfile | None = None

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "TeaRecord":
        """Build a record from camelCase or snake_case keys."""

        geography_payload = _pick(payload, "geography")
        geography = (
            GeographyProfile.from_mapping(geography_payload)
            if isinstance(geography_payload, MappingABC)
            else None
        )
        return cls(
            name=_optional_text(_pick(payload, "name")),
            tea_type=_optional_text(_pick(payload, "tea_type", "teaType", "type")),
            origin=_optional_text(_pick(payload, "origin")),
            flavor_profile=_optional_terms(_pick(payload, "flavor_profile", "flavorProfile")),
            caffeine_level=coerce_optional_float(_pick(payload, "caffeine_level", "caffeineLevel")),
            l_theanine_level=coerce_optional_float(
                _pick(payload, "l_theanine_level", "lTheanineLevel")
            ),
            processing_methods=_optional_terms(
                _pick(payload, "processing_methods", "processingMethods")
            ),
            geography=geography,
        )

    @property
    def has_compounds(self) -> bool:
        return self.caffeine_level is not None or self.l_theanine_level is not None

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "name": self.name,
            "tea_type": self.tea_type,
            "origin": self.origin,
            "flavor_profile": list(self.flavor_profile) if self.flavor_profile is not None else None,
            "caffeine_level": self.caffeine_level,
            "l_theanine_level": self.l_theanine_level,
            "processing_methods": (
                list(self.processing_methods) if self.processing_methods is not None else None
            ),
            "geography": None,
        }
        if self.geography is not None:
            payload["geography"] = {
                "altitude": self.geography.altitude,
                "humidity": self.geography.humidity,
                "temperature": self.geography.temperature,
                "solar_radiation": self.geography.solar_radiation,
                "latitude": self.geography.latitude,
                "climate": self.geography.climate,
                "region": self.geography.region,
            }
        return payload
