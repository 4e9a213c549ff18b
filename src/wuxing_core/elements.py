"""Immutable five-element distribution value type.

Every transformation returns a new :class:`ElementDistribution`; instances
are never mutated after construction, so distributions held in lookup
tables are shared freely between callers.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Any, Iterable, Iterator, Mapping

import numpy as np

from wuxing_core.numeric import coerce_float, normalised_entropy

__all__ = ["ELEMENTS", "ElementDistribution", "normalise_element_name"]


ELEMENTS: tuple[str, ...] = ("wood", "fire", "earth", "metal", "water")

_ELEMENT_SET = frozenset(ELEMENTS)


def normalise_element_name(value: object) -> str | None:
    """Return the canonical element key for ``value`` or ``None``."""

    if value is None:
        return None
    text = str(value).strip().lower()
    if text in _ELEMENT_SET:
        return text
    return None


@dataclass(frozen=True, slots=True)
class ElementDistribution:
    """Non-negative weights over wood, fire, earth, metal and water."""

    wood: float = 0.0
    fire: float = 0.0
    earth: float = 0.0
    metal: float = 0.0
    water: float = 0.0

    @classmethod
    def zeros(cls) -> "ElementDistribution":
        return cls()

    @classmethod
    def uniform(cls, value: float = 0.2) -> "ElementDistribution":
        return cls(value, value, value, value, value)

    @classmethod
    def from_mapping(
        cls, payload: Mapping[str, Any] | None, *, strict: bool = False
    ) -> "ElementDistribution":
        """Build a distribution from ``payload``.

        Missing elements default to ``0.0``. Unknown keys are ignored unless
        ``strict`` is set, in which case they raise :class:`KeyError`.
        Non-finite and non-numeric values are treated as ``0.0``.
        """

        if not payload:
            return cls()
        values = dict.fromkeys(ELEMENTS, 0.0)
        for key, raw in payload.items():
            element = normalise_element_name(key)
            if element is None:
                if strict:
                    raise KeyError(f"Unknown element {key!r}")
                continue
            values[element] = coerce_float(raw)
        return cls(**values)

    @classmethod
    def from_values(cls, values: Iterable[Any]) -> "ElementDistribution":
        """Build a distribution from five values in canonical order."""

        items = [coerce_float(value) for value in values]
        if len(items) != len(ELEMENTS):
            raise ValueError(
                f"Expected {len(ELEMENTS)} element values, received {len(items)}"
            )
        return cls(*items)

    def __getitem__(self, element: str) -> float:
        key = normalise_element_name(element)
        if key is None:
            raise KeyError(element)
        return getattr(self, key)

    def __iter__(self) -> Iterator[float]:
        for element in ELEMENTS:
            yield getattr(self, element)

    def items(self) -> list[tuple[str, float]]:
        return [(element, getattr(self, element)) for element in ELEMENTS]

    @property
    def total(self) -> float:
        return math.fsum(self)

    def as_dict(self) -> dict[str, float]:
        return {element: getattr(self, element) for element in ELEMENTS}

    def as_array(self) -> np.ndarray:
        return np.fromiter(self, dtype=float, count=len(ELEMENTS))

    def with_values(self, **changes: float) -> "ElementDistribution":
        return replace(self, **changes)

    def scaled(self, factor: float) -> "ElementDistribution":
        return ElementDistribution(*(value * factor for value in self))

    def plus(self, other: "ElementDistribution", weight: float = 1.0) -> "ElementDistribution":
        """Return ``self + other * weight`` element-wise."""

        return ElementDistribution(
            *(mine + theirs * weight for mine, theirs in zip(self, other))
        )

    def clamped(self, lower: float = 0.0, upper: float | None = None) -> "ElementDistribution":
        values = []
        for value in self:
            bounded = max(lower, value)
            if upper is not None:
                bounded = min(upper, bounded)
            values.append(bounded)
        return ElementDistribution(*values)

    def normalised(self, target: float = 1.0) -> "ElementDistribution":
        """Rescale so the values sum to ``target``.

        A distribution with no positive mass cannot be rescaled and is
        returned unchanged.
        """

        total = self.total
        if total <= 0.0 or not math.isfinite(total):
            return self
        factor = target / total
        return ElementDistribution(*(value * factor for value in self))

    def ranked(self) -> list[tuple[str, float]]:
        """Return ``(element, value)`` pairs sorted by descending value.

        Ties keep the canonical wood, fire, earth, metal, water order.
        """

        return sorted(self.items(), key=lambda item: -item[1])

    def dominant_pair(self) -> tuple[str | None, str | None]:
        """Return the top two elements, or ``(None, None)`` without mass."""

        ranked = self.ranked()
        if ranked[0][1] <= 0.0:
            return None, None
        return ranked[0][0], ranked[1][0]

    def distance(self, other: "ElementDistribution") -> float:
        return float(np.linalg.norm(self.as_array() - other.as_array()))

    def entropy(self) -> float:
        return normalised_entropy(self)

    def is_close(self, other: "ElementDistribution", *, abs_tol: float = 1e-9) -> bool:
        return all(
            math.isclose(mine, theirs, rel_tol=0.0, abs_tol=abs_tol)
            for mine, theirs in zip(self, other)
        )

    def rounded(self, digits: int = 4) -> dict[str, float]:
        return {element: round(value, digits) for element, value in self.items()}
