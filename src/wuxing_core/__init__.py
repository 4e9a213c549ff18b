"""Numeric core of the five-element scoring engine.

The core knows nothing about tea: it provides the element distribution
value type, the generating/controlling interaction graph, diminishing
returns strategies and the configuration layer shared by the mappers in
:mod:`wuxing_tea`.
"""

from wuxing_core.config import ATTRIBUTE_CLASSES, SystemConfig, get_params, load_system_config
from wuxing_core.elements import ELEMENTS, ElementDistribution, normalise_element_name
from wuxing_core.interactions import (
    DEFAULT_INTERACTION_GRAPH,
    InteractionGraph,
    apply_interactions,
)
from wuxing_core.numeric import clamp, coerce_float, normalise_weights, normalised_entropy
from wuxing_core.returns import (
    DiminishingReturns,
    InverseSqrt,
    NoDiminishing,
    PowerLaw,
    resolve_diminishing_returns,
)

__all__ = [
    "ATTRIBUTE_CLASSES",
    "DEFAULT_INTERACTION_GRAPH",
    "ELEMENTS",
    "DiminishingReturns",
    "ElementDistribution",
    "InteractionGraph",
    "InverseSqrt",
    "NoDiminishing",
    "PowerLaw",
    "SystemConfig",
    "apply_interactions",
    "clamp",
    "coerce_float",
    "get_params",
    "load_system_config",
    "normalise_element_name",
    "normalise_weights",
    "normalised_entropy",
    "resolve_diminishing_returns",
]
