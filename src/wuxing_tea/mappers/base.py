"""Shared interface of the attribute mappers."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from wuxing_core.elements import ElementDistribution
from wuxing_tea.record import TeaRecord

__all__ = ["AttributeMapper"]


@runtime_checkable
class AttributeMapper(Protocol):
    """Turns one attribute class of a :class:`TeaRecord` into a distribution.

    ``map_record`` returns ``None`` when the record carries no input for the
    mapper's class, which the combiner uses to exclude the class from
    weighting.
    """

    name: str

    def map_record(self, record: TeaRecord) -> ElementDistribution | None:  # pragma: no cover - protocol
        ...
