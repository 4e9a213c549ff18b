"""Generating and controlling cycles between the five elements."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Sequence

from wuxing_core.elements import ELEMENTS, ElementDistribution

__all__ = [
    "DEFAULT_INTERACTION_GRAPH",
    "InteractionGraph",
    "apply_interactions",
]

logger = logging.getLogger(__name__)


def _freeze_cycle(edges: Mapping[str, str], label: str) -> Mapping[str, str]:
    frozen: dict[str, str] = {}
    for source, target in edges.items():
        source_key = str(source).lower()
        target_key = str(target).lower()
        if source_key not in ELEMENTS or target_key not in ELEMENTS:
            raise ValueError(f"{label} edge {source!r} -> {target!r} uses an unknown element")
        frozen[source_key] = target_key
    missing = [element for element in ELEMENTS if element not in frozen]
    if missing:
        raise ValueError(f"{label} cycle has no edge for: {', '.join(missing)}")
    if sorted(frozen.values()) != sorted(ELEMENTS):
        raise ValueError(f"{label} cycle must reach every element exactly once")
    return MappingProxyType(frozen)


@dataclass(frozen=True, slots=True)
class InteractionGraph:
    """Fixed 5-node graph with a generating and a controlling edge per node."""

    generating: Mapping[str, str]
    controlling: Mapping[str, str]

    def __post_init__(self) -> None:
        object.__setattr__(self, "generating", _freeze_cycle(self.generating, "generating"))
        object.__setattr__(self, "controlling", _freeze_cycle(self.controlling, "controlling"))

    @classmethod
    def from_generating_order(cls, order: Sequence[str]) -> "InteractionGraph":
        """Build the graph where each node controls the node two steps ahead."""

        sequence = [str(item).lower() for item in order]
        size = len(sequence)
        generating = {sequence[index]: sequence[(index + 1) % size] for index in range(size)}
        controlling = {sequence[index]: sequence[(index + 2) % size] for index in range(size)}
        return cls(generating=generating, controlling=controlling)

    def generates(self, element: str) -> str:
        return self.generating[element]

    def controls(self, element: str) -> str:
        return self.controlling[element]

    def generated_by(self, element: str) -> str:
        for source, target in self.generating.items():
            if target == element:
                return source
        raise KeyError(element)

    def controlled_by(self, element: str) -> str:
        for source, target in self.controlling.items():
            if target == element:
                return source
        raise KeyError(element)

    def relationship(self, source: str, target: str) -> str:
        """Describe how ``source`` relates to ``target``."""

        if source == target:
            return "same"
        if self.generating.get(source) == target:
            return "generates"
        if self.generating.get(target) == source:
            return "generated_by"
        if self.controlling.get(source) == target:
            return "controls"
        if self.controlling.get(target) == source:
            return "controlled_by"
        return "unrelated"


DEFAULT_INTERACTION_GRAPH = InteractionGraph.from_generating_order(ELEMENTS)


def apply_interactions(
    distribution: ElementDistribution,
    *,
    generating_strength: float = 0.05,
    controlling_strength: float = 0.03,
    graph: InteractionGraph = DEFAULT_INTERACTION_GRAPH,
) -> ElementDistribution:
    """Apply one generating/controlling pass and renormalise to ``1.0``.

    Every increment and decrement is computed from the values *before* the
    pass, so the result does not depend on element iteration order. Values
    are floored at zero after each controlling step.
    """

    source = distribution.as_dict()
    adjusted = dict(source)

    for generator in ELEMENTS:
        adjusted[graph.generates(generator)] += source[generator] * generating_strength

    for controller in ELEMENTS:
        target = graph.controls(controller)
        adjusted[target] = max(0.0, adjusted[target] - source[controller] * controlling_strength)

    result = ElementDistribution.from_mapping(adjusted)
    if result.total <= 0.0:
        logger.debug(
            "Interaction pass left no mass to renormalise.",
            extra={"event": "interactions.empty"},
        )
        return result
    return result.normalised()
