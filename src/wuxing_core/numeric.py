"""Shared numeric helpers for the five-element core."""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from typing import Any

import numpy as np

__all__ = [
    "clamp",
    "coerce_float",
    "coerce_optional_float",
    "normalise_weights",
    "normalised_entropy",
]


def coerce_float(value: Any, default: float = 0.0) -> float:
    """Return ``value`` as a finite float or ``default`` when impossible."""

    if isinstance(value, bool):
        return default
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(numeric):
        return default
    return numeric


def coerce_optional_float(value: Any) -> float | None:
    """Return a finite float for ``value`` or ``None`` when it is unusable."""

    if value is None or isinstance(value, bool):
        return None
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(numeric):
        return None
    return numeric


def clamp(value: float, lower: float, upper: float) -> float:
    if value < lower:
        return lower
    if value > upper:
        return upper
    return value


def normalise_weights(weights: Mapping[str, Any]) -> dict[str, float]:
    """Scale non-negative ``weights`` so they sum to one.

    Negative or non-numeric entries count as zero. An all-zero mapping is
    returned unchanged (every key mapped to ``0.0``).
    """

    cleaned = {str(key): max(0.0, coerce_float(value)) for key, value in weights.items()}
    total = math.fsum(cleaned.values())
    if total <= 0.0:
        return {key: 0.0 for key in cleaned}
    return {key: value / total for key, value in cleaned.items()}


def normalised_entropy(values: Iterable[Any]) -> float:
    """Return the Shannon entropy of ``values`` scaled to ``[0, 1]``.

    Only finite, strictly positive entries take part. The maximum entropy is
    taken over the number of entries supplied, so a perfectly even
    five-element distribution scores ``1.0`` and a single spike ``0.0``.
    """

    array = np.asarray([coerce_float(value) for value in values], dtype=float)
    if array.size <= 1:
        return 0.0
    positive = array[array > 0.0]
    total = float(positive.sum())
    if positive.size <= 1 or total <= 0.0:
        return 0.0
    probabilities = positive / total
    entropy = float(-(probabilities * np.log(probabilities)).sum())
    max_entropy = math.log(array.size)
    if max_entropy <= 0.0 or not math.isfinite(entropy):
        return 0.0
    return clamp(entropy / max_entropy, 0.0, 1.0)
