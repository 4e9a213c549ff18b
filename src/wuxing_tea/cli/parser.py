"""Argument parsing for the ``wuxing-tea`` CLI."""

from __future__ import annotations

import argparse
from collections.abc import Mapping as MappingABC
from pathlib import Path
from typing import Any, Mapping, Optional

from wuxing_tea._version import __version__
from wuxing_tea.cli.workflows import _handle_analyze, _handle_config, _handle_similar

_DEFAULT_LIMIT = 5


def _section(config: Mapping[str, Any], key: str) -> dict[str, Any]:
    raw = config.get(key, {})
    return dict(raw) if isinstance(raw, MappingABC) else {}


def _default_limit(config: Mapping[str, Any]) -> int:
    try:
        return int(_section(config, "similar").get("limit", _DEFAULT_LIMIT))
    except (TypeError, ValueError):
        return _DEFAULT_LIMIT


def _add_common_arguments(parser: argparse.ArgumentParser, config: Mapping[str, Any]) -> None:
    parser.add_argument(
        "--system",
        dest="system",
        type=Path,
        default=config.get("system"),
        help="YAML file overriding the engine configuration (default: packaged defaults).",
    )
    parser.add_argument(
        "--compact",
        action="store_true",
        help="Emit single-line JSON instead of indented output.",
    )


def build_parser(config: Optional[Mapping[str, Any]] = None) -> argparse.ArgumentParser:
    config = dict(config or {})
    logging_cfg = _section(config, "logging")

    parser = argparse.ArgumentParser(
        prog="wuxing-tea",
        description="Five-element (Wu Xing) profiles for teas.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config",
        dest="config_path",
        type=Path,
        default=None,
        help="Path to a pyproject.toml (or its directory) with a [tool.wuxing_tea] table.",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        default=logging_cfg.get("level", "info"),
        help="Logging level (e.g. debug, info, warning).",
    )
    parser.add_argument(
        "--log-output",
        dest="log_output",
        default=logging_cfg.get("output", "stderr"),
        help="Logging destination (stdout, stderr or a file path).",
    )
    parser.add_argument(
        "--log-format",
        dest="log_format",
        choices=("json", "text"),
        default=logging_cfg.get("format", "json"),
        help="Logging formatter (json or text).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Compute element distributions, thermal nature and effects for teas.",
    )
    analyze_parser.add_argument(
        "tea_file", type=Path, help="JSON, YAML or TOML file with one tea or a list of teas."
    )
    _add_common_arguments(analyze_parser, config)
    analyze_parser.set_defaults(handler=_handle_analyze)

    similar_parser = subparsers.add_parser(
        "similar",
        help="Rank the teas of a file by element similarity to one of them.",
    )
    similar_parser.add_argument("tea_file", type=Path, help="File holding the candidate teas.")
    similar_parser.add_argument(
        "--target",
        required=True,
        help="Name of the reference tea (matched case-insensitively).",
    )
    similar_parser.add_argument(
        "--limit",
        type=int,
        default=_default_limit(config),
        help=f"Number of results to return (default: {_DEFAULT_LIMIT}).",
    )
    _add_common_arguments(similar_parser, config)
    similar_parser.set_defaults(handler=_handle_similar)

    config_parser = subparsers.add_parser(
        "config",
        help="Print the effective engine configuration as JSON.",
    )
    _add_common_arguments(config_parser, config)
    config_parser.set_defaults(handler=_handle_config)

    return parser


__all__ = ["build_parser"]
