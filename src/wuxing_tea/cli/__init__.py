"""Command line interface for the five-element tea engine."""

from wuxing_tea.cli.app import main, run_cli
from wuxing_tea.cli.errors import CliError

__all__ = ["CliError", "main", "run_cli"]
