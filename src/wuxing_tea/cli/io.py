"""Configuration and tea-file helpers for the ``wuxing-tea`` CLI."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping as MappingABC
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - Python < 3.11 fallback
    import tomli as tomllib  # type: ignore

from wuxing_core.config.loader import load_system_config
from wuxing_core.config.system import SystemConfig
from wuxing_tea.cli.errors import CliError
from wuxing_tea.configuration import iter_unique_paths, load_project_config, resolve_pyproject_path
from wuxing_tea.record import TeaRecord

__all__ = [
    "CONFIG_ENV_VAR",
    "OVERRIDE_SECTIONS",
    "load_cli_config",
    "load_system_overrides",
    "load_teas",
]

CONFIG_ENV_VAR = "WUXING_TEA_CONFIG"

# Sections of a system file consumed by ``get_params`` rather than SystemConfig.
OVERRIDE_SECTIONS: Tuple[str, ...] = ("defaults", "tea_types", "origins")

_TEA_LIST_KEYS = ("teas", "tea")


def _normalise_cli_config(payload: Mapping[str, Any], source: Path) -> Dict[str, Any]:
    data = {str(key): value for key, value in payload.items()}
    logging_cfg = data.get("logging")
    data["logging"] = dict(logging_cfg) if isinstance(logging_cfg, MappingABC) else {}
    data["_config_path"] = str(source.expanduser().resolve())
    return data


def _candidates(base: Path) -> List[Path]:
    resolved = resolve_pyproject_path(base)
    return [resolved] if resolved is not None else []


def load_cli_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load CLI defaults from ``[tool.wuxing_tea]`` in ``pyproject.toml``.

    An explicit ``path`` wins, then ``$WUXING_TEA_CONFIG``, then the current
    working directory.
    """

    env_config = os.environ.get(CONFIG_ENV_VAR)
    bases: List[Path] = []
    if path is not None:
        bases.append(path)
    if env_config:
        bases.append(Path(env_config))
    bases.append(Path.cwd())

    for base in bases:
        for candidate in iter_unique_paths(_candidates(base)):
            try:
                loaded = load_project_config(candidate)
            except ValueError as exc:
                raise CliError(
                    str(exc), category="invalid_input", context={"path": candidate}
                ) from exc
            if not loaded:
                continue
            payload, resolved = loaded
            return _normalise_cli_config(payload, resolved)

    return {"_config_path": None, "logging": {}}


def load_system_overrides(
    path: Optional[Path],
) -> Tuple[SystemConfig, Mapping[str, Any]]:
    """Split a system YAML file into a :class:`SystemConfig` and override sections.

    Without ``path`` the packaged defaults are used and no per-tea overrides
    apply.
    """

    if path is None:
        return SystemConfig(), {}
    try:
        payload = load_system_config(path)
    except FileNotFoundError as exc:
        raise CliError(
            f"System configuration file not found: {path}",
            category="not_found",
            context={"path": path},
        ) from exc
    except (TypeError, ValueError) as exc:
        raise CliError(str(exc), category="invalid_input", context={"path": path}) from exc

    settings = {key: value for key, value in payload.items() if key not in OVERRIDE_SECTIONS}
    overrides = {key: value for key, value in payload.items() if key in OVERRIDE_SECTIONS}
    return SystemConfig(settings), overrides


def _parse_tea_file(path: Path) -> Any:
    suffix = path.suffix.lower()
    if suffix == ".toml":
        with path.open("rb") as handle:
            return tomllib.load(handle)
    text = path.read_text(encoding="utf-8")
    if suffix in {".yaml", ".yml"}:
        return yaml.safe_load(text)
    return json.loads(text)


def load_teas(path: Path) -> List[TeaRecord]:
    """Read tea records from a JSON, YAML or TOML file.

    The document is either a list of tea mappings, a single tea mapping, or
    a mapping with a ``teas`` list (``[[teas]]`` in TOML).
    """

    if not path.is_file():
        raise CliError(
            f"Tea file not found: {path}", category="not_found", context={"path": path}
        )
    try:
        document = _parse_tea_file(path)
    except OSError as exc:
        raise CliError.from_exception(
            f"Unable to read tea file: {path}", exc, category="io", context={"path": path}
        ) from exc
    except (json.JSONDecodeError, yaml.YAMLError, tomllib.TOMLDecodeError) as exc:
        raise CliError(
            f"Tea file {path} is not valid {path.suffix.lstrip('.') or 'JSON'}: {exc}",
            category="invalid_input",
            context={"path": path},
        ) from exc

    if isinstance(document, MappingABC):
        for key in _TEA_LIST_KEYS:
            if isinstance(document.get(key), list):
                document = document[key]
                break
        else:
            document = [document]

    if not isinstance(document, list):
        raise CliError(
            f"Tea file {path} must contain a tea mapping or a list of teas.",
            category="invalid_input",
            context={"path": path},
        )

    teas: List[TeaRecord] = []
    for index, entry in enumerate(document):
        if not isinstance(entry, MappingABC):
            raise CliError(
                f"Entry {index} in {path} is not a mapping.",
                category="invalid_input",
                context={"path": path, "index": index},
            )
        teas.append(TeaRecord.from_mapping(entry))
    return teas
