from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterator

import pytest
import yaml

from wuxing_tea.cli import CliError, run_cli
from wuxing_tea.cli.io import CONFIG_ENV_VAR

from tests.conftest import write_pyproject


@pytest.fixture(autouse=True)
def _isolated_cli(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


def _log_args(tmp_path: Path) -> list[str]:
    return ["--log-output", str(tmp_path / "cli.log")]


def _write_teas(path: Path, teas: list[dict[str, Any]]) -> Path:
    path.write_text(json.dumps(teas), encoding="utf8")
    return path


def test_analyze_outputs_profiles(
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
    sencha: dict[str, Any],
    assam: dict[str, Any],
) -> None:
    tea_file = _write_teas(tmp_path / "teas.json", [sencha, assam])

    output = run_cli([*_log_args(tmp_path), "analyze", str(tea_file)])

    payload = json.loads(output)
    assert [entry["tea"]["name"] for entry in payload["teas"]] == ["Sencha", "Assam"]
    assam_payload = payload["teas"][1]
    assert assam_payload["analysis"]["dominant_element"] == "fire"
    assert assam_payload["effects"]["tcm_flavor"] == "Bitter"
    assert json.loads(capsys.readouterr().out) == payload


def test_analyze_reads_yaml_and_compact_output(
    tmp_path: Path, shou_puerh: dict[str, Any]
) -> None:
    tea_file = tmp_path / "teas.yaml"
    tea_file.write_text(yaml.safe_dump({"teas": [shou_puerh]}), encoding="utf8")

    output = run_cli([*_log_args(tmp_path), "analyze", str(tea_file), "--compact"])

    assert "\n" not in output
    assert json.loads(output)["teas"][0]["tea"]["tea_type"] == "puerh"


def test_analyze_reports_insufficient_data(tmp_path: Path) -> None:
    tea_file = _write_teas(tmp_path / "teas.json", [{"name": "Mystery"}])

    output = run_cli([*_log_args(tmp_path), "analyze", str(tea_file)])

    analysis = json.loads(output)["teas"][0]["analysis"]
    assert analysis["status"] == "insufficient_data"
    assert analysis["dominant_element"] is None


def test_analyze_missing_file_exits_not_found(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    with pytest.raises(SystemExit) as excinfo:
        run_cli([*_log_args(tmp_path), "analyze", str(tmp_path / "missing.json")])

    assert excinfo.value.code == 4
    error = json.loads(capsys.readouterr().out)["error"]
    assert error["category"] == "not_found"
    assert error["context"]["path"].endswith("missing.json")
    assert isinstance(excinfo.value.__cause__, CliError)


def test_analyze_invalid_document_exits_invalid_input(tmp_path: Path) -> None:
    tea_file = tmp_path / "teas.json"
    tea_file.write_text("{not json", encoding="utf8")

    with pytest.raises(SystemExit) as excinfo:
        run_cli([*_log_args(tmp_path), "analyze", str(tea_file)])

    assert excinfo.value.code == 5


def test_similar_ranks_candidates(
    tmp_path: Path,
    sencha: dict[str, Any],
    assam: dict[str, Any],
    shou_puerh: dict[str, Any],
) -> None:
    gyokuro = dict(sencha, name="Gyokuro", flavorProfile=["umami", "marine", "vegetal"])
    tea_file = _write_teas(tmp_path / "teas.json", [sencha, assam, shou_puerh, gyokuro])

    output = run_cli(
        [*_log_args(tmp_path), "similar", str(tea_file), "--target", "sencha", "--limit", "2"]
    )

    payload = json.loads(output)
    assert payload["target"] == "Sencha"
    assert len(payload["similar"]) == 2
    assert payload["similar"][0]["name"] == "Gyokuro"


def test_similar_unknown_target(tmp_path: Path, sencha: dict[str, Any]) -> None:
    tea_file = _write_teas(tmp_path / "teas.json", [sencha])

    with pytest.raises(SystemExit) as excinfo:
        run_cli([*_log_args(tmp_path), "similar", str(tea_file), "--target", "Oolong"])

    assert excinfo.value.code == 4


def test_similar_rejects_non_positive_limit(tmp_path: Path, sencha: dict[str, Any]) -> None:
    tea_file = _write_teas(tmp_path / "teas.json", [sencha])

    with pytest.raises(SystemExit) as excinfo:
        run_cli(
            [
                *_log_args(tmp_path),
                "similar",
                str(tea_file),
                "--target",
                "Sencha",
                "--limit",
                "0",
            ]
        )

    assert excinfo.value.code == 2


def test_config_command_applies_system_file(tmp_path: Path) -> None:
    system_file = tmp_path / "system.yaml"
    system_file.write_text(
        yaml.safe_dump(
            {
                "elementInteractions": {"enabled": False},
                "tea_types": {"puerh": {"thermal": {"adjustmentStrength": 0.5}}},
            }
        ),
        encoding="utf8",
    )

    output = run_cli([*_log_args(tmp_path), "config", "--system", str(system_file)])

    payload = json.loads(output)
    assert payload["system"]["elementInteractions"]["enabled"] is False
    assert payload["overrides"]["tea_types"]["puerh"]["thermal"]["adjustmentStrength"] == 0.5
    assert payload["config_path"] is None


def test_config_command_missing_system_file(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        run_cli([*_log_args(tmp_path), "config", "--system", str(tmp_path / "nope.yaml")])

    assert excinfo.value.code == 4


def test_run_cli_reads_pyproject_defaults(tmp_path: Path) -> None:
    (tmp_path / "engine.yaml").write_text(
        yaml.safe_dump({"thermal": {"adjustmentStrength": 0.25}}), encoding="utf8"
    )
    log_file = tmp_path / "logs" / "tea.log"
    pyproject = write_pyproject(
        tmp_path,
        f"""
        [tool.wuxing_tea]
        system = "engine.yaml"

        [tool.wuxing_tea.logging]
        level = "debug"
        output = "{log_file.as_posix()}"
        format = "json"
        """,
    )

    output = run_cli(["config"])

    payload = json.loads(output)
    assert payload["config_path"] == str(pyproject.resolve())
    assert payload["system"]["thermal"]["adjustmentStrength"] == 0.25
    assert log_file.parent.is_dir()


def test_run_cli_invalid_pyproject(tmp_path: Path) -> None:
    write_pyproject(tmp_path, "[tool.wuxing_tea\n")

    with pytest.raises(SystemExit) as excinfo:
        run_cli(["config"])

    assert excinfo.value.code == 5


def test_analyze_logs_structured_event(tmp_path: Path, sencha: dict[str, Any]) -> None:
    tea_file = _write_teas(tmp_path / "teas.json", [sencha])
    log_file = tmp_path / "cli.log"

    run_cli(["--log-output", str(log_file), "analyze", str(tea_file)])
    for handler in logging.getLogger().handlers:
        handler.flush()

    events = [json.loads(line) for line in log_file.read_text(encoding="utf8").splitlines()]
    analyze = [entry for entry in events if entry.get("event") == "cli.analyze"]
    assert analyze and analyze[0]["count"] == 1
