"""Logging utilities for the wuxing-tea tools."""

from wuxing_tea.logging.config import JsonFormatter, setup_logging

__all__ = ["JsonFormatter", "setup_logging"]
