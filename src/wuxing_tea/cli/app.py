"""Command line entry point for ``wuxing-tea``."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Sequence

from wuxing_tea.cli.errors import CliError, log_cli_error
from wuxing_tea.cli.io import load_cli_config
from wuxing_tea.cli.parser import build_parser
from wuxing_tea.logging.config import setup_logging

CommandHandler = Callable[..., str]


def _write(message: str) -> None:
    sys.stdout.write(message)
    if not message.endswith("\n"):
        sys.stdout.write("\n")


def _preliminary_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument("--config", dest="config_path", type=Path, default=None)
    parser.add_argument("--log-level", dest="log_level", default=None)
    parser.add_argument("--log-output", dest="log_output", default=None)
    parser.add_argument("--log-format", dest="log_format", choices=("json", "text"), default=None)
    return parser


def _logging_config(config: Mapping[str, Any], preliminary: argparse.Namespace) -> dict[str, Any]:
    logging_config = dict(config.get("logging", {}))
    for key in ("level", "output", "format"):
        value = getattr(preliminary, f"log_{key}")
        if value is not None:
            logging_config[key] = value
    logging_config.setdefault("level", "info")
    logging_config.setdefault("output", "stderr")
    logging_config.setdefault("format", "json")
    return logging_config


def _fail(exc: CliError) -> None:
    if not exc.logged:
        log_cli_error(exc.payload, exc_info=exc)
        exc.logged = True
    _write(exc.payload.to_json())
    raise SystemExit(exc.status_code) from exc


def run_cli(args: Optional[Sequence[str]] = None) -> str:
    """Execute the ``wuxing-tea`` command line interface.

    Logging options and ``--config`` are parsed first so that logging is
    configured before any command runs. A :class:`CliError` is logged,
    written to stdout as a JSON error object and turned into
    ``SystemExit`` with its status code.
    """

    preliminary, remaining = _preliminary_parser().parse_known_args(args)

    try:
        config = load_cli_config(preliminary.config_path)
    except CliError as exc:
        _fail(exc)
    config["logging"] = _logging_config(config, preliminary)
    setup_logging(config)

    parser = build_parser(config)
    parser.set_defaults(
        config_path=preliminary.config_path,
        log_level=config["logging"]["level"],
        log_output=config["logging"]["output"],
        log_format=config["logging"]["format"],
    )
    namespace = parser.parse_args(list(remaining), namespace=preliminary)
    namespace.config = config

    handler: Optional[CommandHandler] = getattr(namespace, "handler", None)
    try:
        if handler is None:
            raise CliError(
                f"Unknown command '{getattr(namespace, 'command', None)}'.",
                category="usage",
                context={"command": getattr(namespace, "command", None)},
            )
        result = handler(namespace, config=config)
    except CliError as exc:
        _fail(exc)
    if result:
        _write(result)
    return result


def main() -> None:  # pragma: no cover - thin wrapper
    run_cli()


if __name__ == "__main__":  # pragma: no cover - CLI invocation guard
    main()
