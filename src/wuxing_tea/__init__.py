"""Five-element (Wu Xing) profiles for teas.

Four attribute mappers (flavor, compounds, processing, geography) turn raw
tea attributes into element distributions; :class:`ElementsCalculator`
weights and combines them, applies the thermal shift and the
generating/controlling interactions, and :class:`TeaAnalyzer` adds
effects and similarity search on top.
"""

from wuxing_core.config.system import SystemConfig
from wuxing_core.elements import ELEMENTS, ElementDistribution

from ._version import __version__
from .analyzer import SimilarTea, TeaAnalyzer, TeaProfile
from .combiner import ElementAnalysis, ElementsCalculator
from .effects import BasicEffectsDeriver, EffectsDeriver, EffectsProfile
from .mappers import (
    CompoundElementMapper,
    FlavorElementMapper,
    GeographyElementMapper,
    ProcessingElementMapper,
)
from .record import GeographyProfile, TeaRecord
from .tables import TeaTables, load_default_tables
from .thermal import ThermalAnalysis, ThermalEngine

__all__ = [
    "ELEMENTS",
    "BasicEffectsDeriver",
    "CompoundElementMapper",
    "EffectsDeriver",
    "EffectsProfile",
    "ElementAnalysis",
    "ElementDistribution",
    "ElementsCalculator",
    "FlavorElementMapper",
    "GeographyElementMapper",
    "GeographyProfile",
    "ProcessingElementMapper",
    "SimilarTea",
    "SystemConfig",
    "TeaAnalyzer",
    "TeaProfile",
    "TeaRecord",
    "TeaTables",
    "ThermalAnalysis",
    "ThermalEngine",
    "__version__",
    "load_default_tables",
]
