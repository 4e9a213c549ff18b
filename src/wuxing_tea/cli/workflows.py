"""Command handlers for the ``wuxing-tea`` CLI."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Mapping, Optional

from wuxing_tea.analyzer import TeaAnalyzer
from wuxing_tea.cli.errors import CliError
from wuxing_tea.cli.io import load_system_overrides, load_teas

logger = logging.getLogger(__name__)


def _render(payload: Any, namespace: argparse.Namespace) -> str:
    indent = None if getattr(namespace, "compact", False) else 2
    return json.dumps(payload, indent=indent, sort_keys=False, ensure_ascii=False)


def _system_path(namespace: argparse.Namespace) -> Optional[Path]:
    raw = getattr(namespace, "system", None)
    return Path(raw) if raw else None


def _build_analyzer(namespace: argparse.Namespace) -> TeaAnalyzer:
    system_config, overrides = load_system_overrides(_system_path(namespace))
    return TeaAnalyzer(system_config, overrides=overrides)


def _handle_analyze(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    teas = load_teas(Path(namespace.tea_file))
    analyzer = _build_analyzer(namespace)
    profiles = analyzer.analyze_teas(teas)
    insufficient = [profile.name for profile in profiles if not profile.analysis.is_sufficient]
    logger.info(
        "Analyzed teas.",
        extra={
            "event": "cli.analyze",
            "count": len(profiles),
            "insufficient": insufficient,
            "source": str(namespace.tea_file),
        },
    )
    return _render({"teas": [profile.as_dict() for profile in profiles]}, namespace)


def _handle_similar(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    teas = load_teas(Path(namespace.tea_file))
    target_name = str(namespace.target).strip().lower()
    target = next(
        (tea for tea in teas if tea.name is not None and tea.name.lower() == target_name),
        None,
    )
    if target is None:
        raise CliError(
            f"Tea '{namespace.target}' not found in {namespace.tea_file}.",
            category="not_found",
            context={"target": namespace.target, "path": namespace.tea_file},
        )
    if namespace.limit < 1:
        raise CliError(
            "--limit must be a positive integer.",
            category="usage",
            context={"limit": namespace.limit},
        )

    analyzer = _build_analyzer(namespace)
    matches = analyzer.find_similar_teas(target, teas, limit=namespace.limit)
    logger.info(
        "Ranked similar teas.",
        extra={"event": "cli.similar", "target": target.name, "results": len(matches)},
    )
    return _render(
        {"target": target.name, "similar": [match.as_dict() for match in matches]},
        namespace,
    )


def _handle_config(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    system_config, overrides = load_system_overrides(_system_path(namespace))
    payload: dict[str, Any] = {"system": system_config.as_dict()}
    if overrides:
        payload["overrides"] = dict(overrides)
    payload["config_path"] = config.get("_config_path")
    return _render(payload, namespace)
