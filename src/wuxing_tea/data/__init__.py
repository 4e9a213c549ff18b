"""Embedded lookup tables consumed by the mappers and engines."""

from __future__ import annotations

from importlib import resources

__all__ = [
    "COMPOUNDS_RESOURCE",
    "EFFECTS_RESOURCE",
    "FLAVOR_PATTERNS_RESOURCE",
    "FLAVOR_RESOURCE",
    "GEOGRAPHY_RESOURCE",
    "PROCESSING_RESOURCE",
    "TEA_TYPES_RESOURCE",
    "THERMAL_RESOURCE",
]


def _resource(name: str):
    return resources.files(__name__).joinpath(name)


FLAVOR_RESOURCE = _resource("flavor.toml")
FLAVOR_PATTERNS_RESOURCE = _resource("flavor_patterns.toml")
COMPOUNDS_RESOURCE = _resource("compounds.toml")
PROCESSING_RESOURCE = _resource("processing.toml")
TEA_TYPES_RESOURCE = _resource("tea_types.toml")
GEOGRAPHY_RESOURCE = _resource("geography.toml")
THERMAL_RESOURCE = _resource("thermal.toml")
EFFECTS_RESOURCE = _resource("effects.toml")
