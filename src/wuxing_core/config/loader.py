"""Resolve system configuration files and per-tea parameter overrides."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping as MappingABC
from functools import lru_cache
from importlib import resources
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import yaml

__all__ = [
    "deep_copy_mapping",
    "get_params",
    "load_default_system_config",
    "load_system_config",
    "merge_overrides",
]


_SYSTEM_RESOURCE_PACKAGE = "wuxing_tea.resources.config"
_SYSTEM_RESOURCE_NAME = "system.yaml"
_DEFAULT_SECTION_KEYS = ("__default__", "*")


def get_params(
    config: Mapping[str, Any],
    *,
    tea_type: str | None = None,
    origin: str | None = None,
) -> Mapping[str, Any]:
    """Merge parameter overrides for the requested tea metadata.

    The layers are applied in order: ``defaults``, ``tea_types.__default__``,
    ``tea_types.<tea_type>``, ``origins.__default__`` and
    ``origins.<origin>``. Identifiers match case-insensitively and ignore
    punctuation, so ``"Pu-erh"`` selects a ``puerh`` section.
    """

    layers: list[Any] = [config.get("defaults")]
    for table_key, identifier in (("tea_types", tea_type), ("origins", origin)):
        table = config.get(table_key)
        layers.extend(_lookup_section(table, key) for key in _DEFAULT_SECTION_KEYS)
        layers.append(_lookup_section(table, identifier))

    result: dict[str, Any] = {}
    for layer in layers:
        if isinstance(layer, MappingABC):
            _deep_merge(result, layer)
    return MappingProxyType(result)


def merge_overrides(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    """Return a deep copy of ``base`` with ``overrides`` merged on top."""

    merged = deep_copy_mapping(base)
    _deep_merge(merged, overrides)
    return merged


def _search_candidates(search_paths: Iterable[str | Path]) -> Iterable[Path]:
    for entry in search_paths:
        location = Path(entry).expanduser()
        yield location / _SYSTEM_RESOURCE_NAME if location.is_dir() else location


def load_system_config(
    path: str | Path | None = None,
    *,
    search_paths: Iterable[str | Path] | None = None,
) -> Mapping[str, Any]:
    """Read a system configuration mapping from YAML.

    An explicit ``path`` must exist (:class:`FileNotFoundError` otherwise).
    Without one, ``search_paths`` are tried in order, directories standing
    for the ``system.yaml`` inside them, and the packaged defaults are
    returned when none of them exists. Invalid YAML raises
    :class:`ValueError`; a document that is not a mapping raises
    :class:`TypeError`.
    """

    if path is not None:
        explicit = Path(path).expanduser()
        if not explicit.is_file():
            raise FileNotFoundError(explicit)
        return _load_payload(explicit)

    found = next(
        (candidate for candidate in _search_candidates(search_paths or ()) if candidate.is_file()),
        None,
    )
    if found is not None:
        return _load_payload(found)
    return load_default_system_config()


@lru_cache(maxsize=1)
def load_default_system_config() -> Mapping[str, Any]:
    """Return the packaged ``system.yaml`` defaults."""

    resource = resources.files(_SYSTEM_RESOURCE_PACKAGE).joinpath(_SYSTEM_RESOURCE_NAME)
    payload = resource.read_text(encoding="utf-8")
    return _load_from_text(payload, source=str(resource))


def _copy_value(value: Any) -> Any:
    if isinstance(value, MappingABC):
        return deep_copy_mapping(value)
    if isinstance(value, list):
        return [_copy_value(item) for item in value]
    return value


def deep_copy_mapping(source: Mapping[str, Any]) -> dict[str, Any]:
    """Copy nested mappings into plain ``dict`` objects with string keys."""

    return {str(key): _copy_value(value) for key, value in source.items()}


def _deep_merge(target: dict[str, Any], source: Mapping[str, Any]) -> None:
    for raw_key, value in source.items():
        key = str(raw_key)
        current = target.get(key)
        if isinstance(value, MappingABC) and isinstance(current, MappingABC):
            nested = dict(current)
            _deep_merge(nested, value)
            target[key] = nested
        else:
            target[key] = _copy_value(value)


def _load_payload(path: Path) -> Mapping[str, Any]:
    return _load_from_text(path.read_text(encoding="utf-8"), source=str(path))


def _load_from_text(payload: str, *, source: str) -> Mapping[str, Any]:
    try:
        data = yaml.safe_load(payload)
    except yaml.YAMLError as exc:
        raise ValueError(f"{source} is not valid YAML") from exc

    if data is None:
        return MappingProxyType({})
    if not isinstance(data, MappingABC):
        raise TypeError(f"{source} must contain a mapping at the top level")
    return MappingProxyType(deep_copy_mapping(data))


def _lookup_section(
    table: Mapping[str, Any] | None, key: str | None
) -> Mapping[str, Any] | None:
    if not isinstance(table, MappingABC) or key is None:
        return None
    direct = table.get(key)
    if isinstance(direct, MappingABC):
        return direct
    wanted = _normalise_identifier(key)
    if wanted is None:
        return None
    return next(
        (
            section
            for name, section in table.items()
            if isinstance(section, MappingABC) and _normalise_identifier(name) == wanted
        ),
        None,
    )


_IDENTIFIER_NOISE = re.compile(r"[^0-9a-z_]+")


def _normalise_identifier(value: str | None) -> str | None:
    if value is None:
        return None
    return _IDENTIFIER_NOISE.sub("", str(value).lower()).strip("_") or None
