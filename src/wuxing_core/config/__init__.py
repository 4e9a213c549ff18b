"""Configuration helpers for the five-element core."""

from wuxing_core.config.loader import get_params, load_system_config, merge_overrides
from wuxing_core.config.system import ATTRIBUTE_CLASSES, SystemConfig

__all__ = [
    "ATTRIBUTE_CLASSES",
    "SystemConfig",
    "get_params",
    "load_system_config",
    "merge_overrides",
]
