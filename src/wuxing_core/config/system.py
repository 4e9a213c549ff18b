"""Typed system configuration for the scoring engine."""

from __future__ import annotations

import copy
import json
import logging
from collections.abc import Mapping as MappingABC
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from wuxing_core.config.loader import (
    deep_copy_mapping,
    load_default_system_config,
    load_system_config,
    merge_overrides,
)
from wuxing_core.numeric import coerce_float, normalise_weights
from wuxing_core.returns import DiminishingReturns, resolve_diminishing_returns

__all__ = ["ATTRIBUTE_CLASSES", "SystemConfig"]

logger = logging.getLogger(__name__)

ATTRIBUTE_CLASSES: tuple[str, ...] = ("flavor", "compounds", "processing", "geography")

_FALLBACK_ELEMENT_WEIGHTS: Mapping[str, float] = MappingProxyType(
    {"flavor": 0.4, "compounds": 0.3, "processing": 0.2, "geography": 0.1}
)
_FALLBACK_THERMAL_WEIGHTS: Mapping[str, float] = MappingProxyType(
    {"flavor": 0.35, "processing": 0.25, "compounds": 0.25, "geography": 0.15}
)


class SystemConfig:
    """Key-path configuration store with typed accessors.

    ``get``/``set`` address nested values with dotted paths such as
    ``"elementWeights.flavor"``. :meth:`update` deep-merges a mapping and
    renormalises ``elementWeights`` afterwards; :meth:`set` stores the raw
    value, which is how exclusive weighting (a class at ``1.0``) is
    configured without the other classes being rescaled.
    """

    def __init__(
        self,
        overrides: Mapping[str, Any] | None = None,
        *,
        defaults: Mapping[str, Any] | None = None,
    ) -> None:
        base = defaults if defaults is not None else load_default_system_config()
        self._defaults = deep_copy_mapping(base)
        self._values = deep_copy_mapping(self._defaults)
        if overrides:
            self.update(overrides)

    @classmethod
    def from_file(
        cls, path: str | Path, *, defaults: Mapping[str, Any] | None = None
    ) -> "SystemConfig":
        return cls(load_system_config(path), defaults=defaults)

    @classmethod
    def from_json(cls, payload: str, *, defaults: Mapping[str, Any] | None = None) -> "SystemConfig":
        data = json.loads(payload)
        if not isinstance(data, MappingABC):
            raise TypeError("Configuration JSON must decode to an object")
        return cls(data, defaults=defaults)

    def derive(self, overrides: Mapping[str, Any] | None) -> "SystemConfig":
        """Return an independent copy with ``overrides`` merged in."""

        derived = SystemConfig(defaults=self._defaults)
        derived._values = deep_copy_mapping(self._values)
        if overrides:
            derived.update(overrides)
        return derived

    # ------------------------------------------------------------------
    # key-path access
    # ------------------------------------------------------------------
    def get(self, path: str, default: Any = None) -> Any:
        node: Any = self._values
        for part in _split_path(path):
            if not isinstance(node, MappingABC) or part not in node:
                return default
            node = node[part]
        if isinstance(node, MappingABC):
            return MappingProxyType(deep_copy_mapping(node))
        return copy.deepcopy(node)

    def set(self, path: str, value: Any) -> None:
        parts = _split_path(path)
        if not parts:
            raise KeyError("Configuration path must not be empty")
        node = self._values
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[parts[-1]] = deep_copy_mapping(value) if isinstance(value, MappingABC) else value

    def update(self, overrides: Mapping[str, Any]) -> None:
        self._values = merge_overrides(self._values, overrides)
        self._renormalise_element_weights()

    def reset(self) -> None:
        self._values = deep_copy_mapping(self._defaults)

    def as_dict(self) -> dict[str, Any]:
        return deep_copy_mapping(self._values)

    def to_json(self, *, indent: int | None = 2) -> str:
        return json.dumps(self._values, indent=indent, sort_keys=True)

    # ------------------------------------------------------------------
    # typed accessors
    # ------------------------------------------------------------------
    def element_weights(self) -> Mapping[str, float]:
        raw = self.get("elementWeights")
        weights: dict[str, float] = {}
        for name in ATTRIBUTE_CLASSES:
            value = raw.get(name) if isinstance(raw, MappingABC) else None
            weights[name] = max(0.0, coerce_float(value, 0.0))
        return MappingProxyType(weights)

    @property
    def interactions_enabled(self) -> bool:
        return bool(self.get("elementInteractions.enabled", True))

    @property
    def generating_strength(self) -> float:
        return max(0.0, coerce_float(self.get("elementInteractions.generatingStrength"), 0.05))

    @property
    def controlling_strength(self) -> float:
        return max(0.0, coerce_float(self.get("elementInteractions.controllingStrength"), 0.03))

    @property
    def diminishing_returns(self) -> DiminishingReturns:
        return resolve_diminishing_returns(self.get("diminishingReturns"))

    @property
    def compound_weight(self) -> float:
        value = coerce_float(self.get("compounds.weight"), 0.3)
        return value if value > 0.0 else 0.3

    @property
    def ideal_theanine_caffeine_ratio(self) -> float:
        value = coerce_float(self.get("compounds.idealLTheanineCaffeineRatio"), 2.0)
        return value if value > 0.0 else 2.0

    @property
    def high_caffeine_threshold(self) -> float:
        return coerce_float(self.get("compounds.highCaffeineThreshold"), 6.5)

    @property
    def high_theanine_threshold(self) -> float:
        return coerce_float(self.get("compounds.highLTheanineThreshold"), 7.0)

    @property
    def thermal_adjustment_strength(self) -> float:
        return max(0.0, coerce_float(self.get("thermal.adjustmentStrength"), 1.0))

    def thermal_weights(self) -> Mapping[str, float]:
        raw = self.get("thermal.weights")
        weights: dict[str, float] = {}
        for name in ATTRIBUTE_CLASSES:
            fallback = _FALLBACK_THERMAL_WEIGHTS[name]
            value = raw.get(name) if isinstance(raw, MappingABC) else None
            weights[name] = max(0.0, coerce_float(value, fallback))
        return MappingProxyType(weights)

    def processing_category_weight(self, category: str) -> float:
        value = self.get(f"processing.categoryWeights.{category}")
        return max(0.0, coerce_float(value, 1.0))

    # ------------------------------------------------------------------
    def _renormalise_element_weights(self) -> None:
        raw = self._values.get("elementWeights")
        if not isinstance(raw, MappingABC):
            raw = {}
        current = {
            name: max(0.0, coerce_float(raw.get(name), 0.0)) for name in ATTRIBUTE_CLASSES
        }
        if sum(current.values()) <= 0.0:
            defaults = self._defaults.get("elementWeights")
            if not isinstance(defaults, MappingABC):
                defaults = _FALLBACK_ELEMENT_WEIGHTS
            logger.warning(
                "Element weights sum to zero; restoring defaults.",
                extra={"event": "config.weights_reset"},
            )
            current = {
                name: max(0.0, coerce_float(defaults.get(name), _FALLBACK_ELEMENT_WEIGHTS[name]))
                for name in ATTRIBUTE_CLASSES
            }
        normalised = normalise_weights(current)
        merged = dict(raw)
        merged.update(normalised)
        self._values["elementWeights"] = merged

    def __repr__(self) -> str:
        return f"SystemConfig(elementWeights={dict(self.element_weights())!r})"


def _split_path(path: str) -> list[str]:
    return [part for part in str(path).split(".") if part]
