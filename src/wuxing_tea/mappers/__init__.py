"""Attribute mappers turning one class of tea attributes into elements."""

from wuxing_tea.mappers.base import AttributeMapper
from wuxing_tea.mappers.compound import CompoundAnalysis, CompoundElementMapper, normalise_level
from wuxing_tea.mappers.flavor import FlavorAnalysis, FlavorElementMapper, TermResolution
from wuxing_tea.mappers.geography import GeographyAnalysis, GeographyElementMapper
from wuxing_tea.mappers.processing import ProcessingAnalysis, ProcessingElementMapper

__all__ = [
    "AttributeMapper",
    "CompoundAnalysis",
    "CompoundElementMapper",
    "FlavorAnalysis",
    "FlavorElementMapper",
    "GeographyAnalysis",
    "GeographyElementMapper",
    "ProcessingAnalysis",
    "ProcessingElementMapper",
    "TermResolution",
    "normalise_level",
]
