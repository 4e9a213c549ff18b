"""``[tool.wuxing_tea]`` settings stored in ``pyproject.toml``."""

from __future__ import annotations

from collections.abc import Iterable, Mapping as ABCMapping
from pathlib import Path
from typing import Any

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - Python < 3.11 fallback
    import tomli as tomllib  # type: ignore

from wuxing_core.config.loader import deep_copy_mapping

PYPROJECT_NAME = "pyproject.toml"
TOOL_KEY = "wuxing_tea"


def resolve_pyproject_path(candidate: Path) -> Path | None:
    """Map a directory or ``pyproject.toml`` path onto the file to read.

    Paths naming any other file are rejected with ``None``.
    """

    candidate = candidate.expanduser()
    if candidate.name == PYPROJECT_NAME:
        return candidate
    return None if candidate.suffix else candidate / PYPROJECT_NAME


def iter_unique_paths(paths: Iterable[Path]) -> list[Path]:
    """Resolve ``paths`` and drop repeats, keeping first-seen order."""

    unique: dict[Path, None] = {}
    for path in paths:
        unique.setdefault(path.expanduser().resolve(strict=False), None)
    return list(unique)


def _read_toml(path: Path) -> ABCMapping[str, Any] | None:
    if not path.is_file():
        return None
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Invalid TOML in {path}") from exc


def _tool_section(document: ABCMapping[str, Any]) -> ABCMapping[str, Any] | None:
    tool = document.get("tool")
    if not isinstance(tool, ABCMapping):
        return None
    section = tool.get(TOOL_KEY)
    return section if isinstance(section, ABCMapping) else None


def load_project_config(path: Path) -> tuple[dict[str, Any], Path] | None:
    """Return ``([tool.wuxing_tea], pyproject path)`` or ``None``.

    ``path`` is a project directory or a ``pyproject.toml``. A relative
    ``system`` entry (the engine's YAML override file) is made absolute
    against the directory holding ``pyproject.toml``. Invalid TOML raises
    :class:`ValueError`.
    """

    target = resolve_pyproject_path(path)
    if target is None:
        return None
    target = target.resolve(strict=False)

    document = _read_toml(target)
    section = _tool_section(document) if document else None
    if section is None:
        return None

    config = deep_copy_mapping(section)
    system = config.get("system")
    if isinstance(system, str) and system:
        system_path = Path(system).expanduser()
        if not system_path.is_absolute():
            system_path = target.parent / system_path
        config["system"] = str(system_path)
    return config, target


__all__ = [
    "PYPROJECT_NAME",
    "TOOL_KEY",
    "iter_unique_paths",
    "load_project_config",
    "resolve_pyproject_path",
]
