"""Diminishing-returns strategies for repeated descriptors.

Strategies are selected by tag from configuration rather than by evaluating
formula strings:

``power_law``
    ``count ** exponent`` with a negative exponent (default ``-0.3``).
``inverse_sqrt``
    ``1 / sqrt(count)``.
``none``
    Always ``1.0``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Mapping, Protocol, runtime_checkable

from wuxing_core.numeric import coerce_float

__all__ = [
    "DEFAULT_DIMINISHING_RETURNS",
    "DiminishingReturns",
    "InverseSqrt",
    "NoDiminishing",
    "PowerLaw",
    "resolve_diminishing_returns",
]

logger = logging.getLogger(__name__)


@runtime_checkable
class DiminishingReturns(Protocol):
    """Maps an occurrence count to a contribution multiplier."""

    tag: str

    def multiplier(self, count: int) -> float:  # pragma: no cover - protocol
        ...


@dataclass(frozen=True, slots=True)
class PowerLaw:
    exponent: float = -0.3
    tag: str = "power_law"

    def __post_init__(self) -> None:
        if not math.isfinite(self.exponent) or self.exponent >= 0.0:
            raise ValueError(f"PowerLaw exponent must be negative, got {self.exponent!r}")

    def multiplier(self, count: int) -> float:
        if count <= 1:
            return 1.0
        return float(count) ** self.exponent


@dataclass(frozen=True, slots=True)
class InverseSqrt:
    tag: str = "inverse_sqrt"

    def multiplier(self, count: int) -> float:
        if count <= 1:
            return 1.0
        return 1.0 / math.sqrt(count)


@dataclass(frozen=True, slots=True)
class NoDiminishing:
    tag: str = "none"

    def multiplier(self, count: int) -> float:
        return 1.0


DEFAULT_DIMINISHING_RETURNS = PowerLaw()


def _normalise_tag(value: object) -> str:
    return str(value).strip().lower().replace("-", "_").replace(" ", "_")


def resolve_diminishing_returns(setting: Any) -> DiminishingReturns:
    """Return the strategy described by ``setting``.

    ``setting`` may be a strategy instance, a tag string or a mapping with a
    ``strategy`` key and optional ``exponent``. Unknown or invalid settings log
    a warning and fall back to :data:`DEFAULT_DIMINISHING_RETURNS`.
    """

    if isinstance(setting, (PowerLaw, InverseSqrt, NoDiminishing)):
        return setting
    if setting is None:
        return DEFAULT_DIMINISHING_RETURNS

    exponent: Any = None
    if isinstance(setting, Mapping):
        tag = _normalise_tag(setting.get("strategy", "power_law"))
        exponent = setting.get("exponent")
    else:
        tag = _normalise_tag(setting)

    if tag in {"power_law", "powerlaw", "power"}:
        if exponent is None:
            return DEFAULT_DIMINISHING_RETURNS
        try:
            return PowerLaw(exponent=coerce_float(exponent, DEFAULT_DIMINISHING_RETURNS.exponent))
        except ValueError:
            logger.warning(
                "Invalid diminishing-returns exponent; using the default.",
                extra={"event": "config.diminishing_returns_invalid", "exponent": exponent},
            )
            return DEFAULT_DIMINISHING_RETURNS
    if tag in {"inverse_sqrt", "inversesqrt", "sqrt"}:
        return InverseSqrt()
    if tag in {"none", "off", "disabled"}:
        return NoDiminishing()

    logger.warning(
        "Unknown diminishing-returns strategy; using the default.",
        extra={"event": "config.diminishing_returns_unknown", "strategy": tag},
    )
    return DEFAULT_DIMINISHING_RETURNS
