from __future__ import annotations

import sys
from pathlib import Path
from textwrap import dedent
from typing import Any

import pytest


ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from wuxing_core.config.system import SystemConfig  # noqa: E402
from wuxing_tea.combiner import ElementsCalculator  # noqa: E402
from wuxing_tea.tables import TeaTables, load_default_tables  # noqa: E402


def write_pyproject(directory: Path, contents: str) -> Path:
    """Persist a ``pyproject.toml`` under ``directory`` and return its path."""

    payload = dedent(contents).lstrip()
    target = directory / "pyproject.toml"
    target.write_text(payload, encoding="utf8")
    return target


@pytest.fixture(scope="session")
def tables() -> TeaTables:
    return load_default_tables()


@pytest.fixture()
def config() -> SystemConfig:
    return SystemConfig()


@pytest.fixture()
def calculator(config: SystemConfig, tables: TeaTables) -> ElementsCalculator:
    return ElementsCalculator(config, tables=tables)


@pytest.fixture()
def sencha() -> dict[str, Any]:
    return {
        "name": "Sencha",
        "type": "green",
        "origin": "Japan",
        "flavorProfile": ["grassy", "umami", "marine"],
        "caffeineLevel": 6,
        "lTheanineLevel": 8,
        "processingMethods": ["steamed", "rolled", "non-oxidized"],
        "geography": {
            "altitude": 300,
            "humidity": 80,
            "temperature": 16,
            "latitude": 34.9,
            "solarRadiation": 3.8,
            "region": "japan",
        },
    }


@pytest.fixture()
def assam() -> dict[str, Any]:
    return {
        "name": "Assam",
        "type": "black",
        "origin": "India",
        "flavorProfile": ["malty", "roasted", "caramel"],
        "caffeineLevel": 9,
        "lTheanineLevel": 3,
        "processingMethods": ["fully-oxidized", "ctc"],
        "geography": {
            "altitude": 100,
            "humidity": 88,
            "temperature": 29,
            "latitude": 26.2,
            "region": "india-assam",
        },
    }


@pytest.fixture()
def shou_puerh() -> dict[str, Any]:
    return {
        "name": "Shou Puerh",
        "type": "puerh",
        "origin": "China",
        "flavorProfile": ["earthy", "woody", "sweet"],
        "caffeineLevel": 5,
        "lTheanineLevel": 4,
        "processingMethods": ["wet-piling", "fermented", "compressed", "aged"],
    }
