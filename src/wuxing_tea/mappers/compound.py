"""Caffeine and L-theanine levels to a pre-scaled element contribution."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from wuxing_core.config.system import SystemConfig
from wuxing_core.elements import ElementDistribution
from wuxing_core.numeric import clamp, coerce_float
from wuxing_tea.record import TeaRecord
from wuxing_tea.tables import CompoundTables, load_default_tables

__all__ = [
    "CompoundAnalysis",
    "CompoundElementMapper",
    "normalise_level",
]

logger = logging.getLogger(__name__)

MIN_LEVEL = 1.0
MAX_LEVEL = 10.0
DEFAULT_LEVEL = 5.0


def normalise_level(value: Any) -> float:
    """Clamp a compound level to ``[1, 10]``; missing, zero or junk gives 5."""

    level = coerce_float(value, 0.0)
    if level == 0.0:
        return DEFAULT_LEVEL
    return clamp(level, MIN_LEVEL, MAX_LEVEL)


_Rule = tuple[Callable[[float, float], bool], str]

_PRIMARY_NATURE: tuple[_Rule, ...] = (
    (lambda c, t: t >= 8 and c <= 3, "Yin dominant"),
    (lambda c, t: c >= 8 and t <= 3, "Yang dominant"),
    (lambda c, t: t > c + 2, "Yin leaning"),
    (lambda c, t: c > t + 2, "Yang leaning"),
)

_HARMONY_NATURE: tuple[_Rule, ...] = (
    (lambda c, t: t >= 7 and 3 <= c <= 6, "Harmonizing (Shade-grown character)"),
    (lambda c, t: t >= 6 and 5 <= c <= 7, "Harmonizing"),
    (lambda c, t: t >= 8 and c <= 3, "Deeply calming"),
    (lambda c, t: c >= 8 and t <= 3, "Strongly activating"),
)

_EFFECTS: tuple[_Rule, ...] = (
    (
        lambda c, t: t >= 8 and 3 <= c <= 6,
        "Creates focused calm with heightened sensory awareness and uplifting clarity",
    ),
    (
        lambda c, t: t >= 8 and c <= 3,
        "Promotes tranquility and introspection with minimal stimulation",
    ),
    (
        lambda c, t: t >= 7 and 3 <= c <= 5,
        "Creates calm alertness with focus and minimal excitation",
    ),
    (
        lambda c, t: 6 <= t <= 8 and 4 <= c <= 6,
        "Provides balanced energy with rich umami character and focused alertness",
    ),
    (
        lambda c, t: 6 <= c <= 8 and 3 <= t <= 5,
        "Energizing with more stimulation than calming effect",
    ),
    (
        lambda c, t: c >= 8 and t <= 3,
        "Highly stimulating with minimal calming influence",
    ),
)

_DEFAULT_EFFECT = "Balanced energetic effect with moderate stimulation and calming properties"

_THERMAL_QUALITIES: tuple[tuple[float, str], ...] = (
    (3.0, "Strongly"),
    (1.5, ""),
    (0.5, "Mildly"),
)


def _first(rules: tuple[_Rule, ...], caffeine: float, theanine: float) -> str | None:
    for predicate, label in rules:
        if predicate(caffeine, theanine):
            return label
    return None


def _thermal_quality(balance: float) -> str:
    magnitude = abs(balance)
    direction = "warming" if balance > 0 else "cooling"
    for threshold, prefix in _THERMAL_QUALITIES:
        if magnitude > threshold:
            return f"{prefix} {direction}" if prefix else direction.capitalize()
    return "Neutral"


@dataclass(frozen=True, slots=True)
class CompoundAnalysis:
    caffeine: float
    l_theanine: float
    ratio: float
    ratio_band: str
    ideal_ratio: float
    ratio_deviation: float
    primary_nature: str
    secondary_nature: tuple[str, ...]
    thermal_balance: float
    thermal_quality: str
    effect_description: str
    high_caffeine: bool
    high_l_theanine: bool

    def as_dict(self) -> dict[str, Any]:
        return {
            "caffeine": self.caffeine,
            "l_theanine": self.l_theanine,
            "ratio": self.ratio,
            "ratio_band": self.ratio_band,
            "ideal_ratio": self.ideal_ratio,
            "ratio_deviation": self.ratio_deviation,
            "primary_nature": self.primary_nature,
            "secondary_nature": list(self.secondary_nature),
            "thermal_balance": self.thermal_balance,
            "thermal_quality": self.thermal_quality,
            "effect_description": self.effect_description,
            "high_caffeine": self.high_caffeine,
            "high_l_theanine": self.high_l_theanine,
        }


class CompoundElementMapper:
    """Turn compound levels into a distribution summing to ``weight``."""

    name = "compounds"

    def __init__(
        self,
        tables: CompoundTables | None = None,
        *,
        weight: float = 0.3,
        ideal_ratio: float = 2.0,
        high_caffeine_threshold: float = 6.5,
        high_theanine_threshold: float = 7.0,
    ) -> None:
        self.tables = tables if tables is not None else load_default_tables().compounds
        self.weight = weight if weight > 0.0 else 0.3
        self.ideal_ratio = ideal_ratio
        self.high_caffeine_threshold = high_caffeine_threshold
        self.high_theanine_threshold = high_theanine_threshold

    @classmethod
    def from_config(
        cls, config: SystemConfig, tables: CompoundTables | None = None
    ) -> "CompoundElementMapper":
        return cls(
            tables,
            weight=config.compound_weight,
            ideal_ratio=config.ideal_theanine_caffeine_ratio,
            high_caffeine_threshold=config.high_caffeine_threshold,
            high_theanine_threshold=config.high_theanine_threshold,
        )

    def _contribution(self, shares: ElementDistribution, level: float) -> ElementDistribution:
        contribution = shares.normalised().scaled(level / MAX_LEVEL * self.weight)
        cap = self.weight / 2.0
        if contribution.total > cap:
            contribution = contribution.normalised(cap)
        return contribution

    def map(self, caffeine: Any, l_theanine: Any) -> ElementDistribution:
        caffeine_level = normalise_level(caffeine)
        theanine_level = normalise_level(l_theanine)

        combined = self._contribution(self.tables.caffeine_shares, caffeine_level).plus(
            self._contribution(self.tables.theanine_shares, theanine_level)
        )

        band = self.tables.band_for(theanine_level / caffeine_level)
        combined = combined.with_values(
            **{element: combined[element] + delta for element, delta in band.deltas.items()}
        )
        combined = combined.clamped(0.0)
        if combined.total <= 0.0:
            logger.debug(
                "Compound deltas removed all mass; using the raw shares.",
                extra={"event": "compounds.empty", "band": band.name},
            )
            combined = self.tables.caffeine_shares.plus(self.tables.theanine_shares)
        return combined.normalised(self.weight)

    def map_record(self, record: TeaRecord) -> ElementDistribution | None:
        if not record.has_compounds:
            return None
        return self.map(record.caffeine_level, record.l_theanine_level)

    def analyze(self, caffeine: Any, l_theanine: Any) -> CompoundAnalysis:
        c = normalise_level(caffeine)
        t = normalise_level(l_theanine)
        ratio = t / c
        balance = c * 0.8 - t * 0.7
        quality = _thermal_quality(balance)

        secondary = [quality]
        if t >= 7:
            secondary.append("Calming")
        if t <= 3:
            secondary.append("Light")
        harmony = _first(_HARMONY_NATURE, c, t)
        if harmony is not None:
            secondary.append(harmony)

        return CompoundAnalysis(
            caffeine=c,
            l_theanine=t,
            ratio=ratio,
            ratio_band=self.tables.band_for(ratio).name,
            ideal_ratio=self.ideal_ratio,
            ratio_deviation=abs(ratio - self.ideal_ratio),
            primary_nature=_first(_PRIMARY_NATURE, c, t) or "Balanced",
            secondary_nature=tuple(secondary),
            thermal_balance=balance,
            thermal_quality=quality,
            effect_description=_first(_EFFECTS, c, t) or _DEFAULT_EFFECT,
            high_caffeine=c >= self.high_caffeine_threshold,
            high_l_theanine=t >= self.high_theanine_threshold,
        )
