from __future__ import annotations

from pathlib import Path

import pytest

from wuxing_tea.configuration import (
    iter_unique_paths,
    load_project_config,
    resolve_pyproject_path,
)

from tests.conftest import write_pyproject


def test_load_project_config_reads_tool_section(tmp_path: Path) -> None:
    pyproject = write_pyproject(
        tmp_path,
        """
        [tool.wuxing_tea]
        system = "system.yaml"

        [tool.wuxing_tea.logging]
        format = "text"
        """,
    )

    loaded = load_project_config(tmp_path)

    assert loaded is not None
    config, path = loaded
    assert path == pyproject.resolve()
    assert config["system"] == str(pyproject.resolve().parent / "system.yaml")
    assert config["logging"] == {"format": "text"}


def test_load_project_config_keeps_absolute_system(tmp_path: Path) -> None:
    absolute = (tmp_path / "elsewhere" / "system.yaml").resolve()
    write_pyproject(
        tmp_path,
        f"""
        [tool.wuxing_tea]
        system = "{absolute.as_posix()}"
        """,
    )

    config, _ = load_project_config(tmp_path / "pyproject.toml")

    assert Path(config["system"]) == absolute


def test_load_project_config_without_section(tmp_path: Path) -> None:
    write_pyproject(
        tmp_path,
        """
        [tool.other]
        value = 1
        """,
    )

    assert load_project_config(tmp_path) is None
    assert load_project_config(tmp_path / "missing") is None


def test_load_project_config_invalid_toml(tmp_path: Path) -> None:
    write_pyproject(tmp_path, "[tool.wuxing_tea\n")

    with pytest.raises(ValueError):
        load_project_config(tmp_path)


def test_resolve_pyproject_path(tmp_path: Path) -> None:
    assert resolve_pyproject_path(tmp_path) == tmp_path / "pyproject.toml"
    assert resolve_pyproject_path(tmp_path / "pyproject.toml") == tmp_path / "pyproject.toml"
    assert resolve_pyproject_path(tmp_path / "settings.cfg") is None


def test_iter_unique_paths_deduplicates(tmp_path: Path) -> None:
    first = tmp_path / "pyproject.toml"
    same = tmp_path / "sub" / ".." / "pyproject.toml"

    assert iter_unique_paths([first, same]) == [first.resolve()]
