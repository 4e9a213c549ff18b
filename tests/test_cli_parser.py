from __future__ import annotations

from pathlib import Path

import pytest

from wuxing_tea.cli.parser import build_parser
from wuxing_tea.cli.workflows import _handle_analyze, _handle_config, _handle_similar


def test_build_parser_registers_commands() -> None:
    parser = build_parser({})

    analyze = parser.parse_args(["analyze", "teas.json"])
    similar = parser.parse_args(["similar", "teas.json", "--target", "Sencha"])
    config = parser.parse_args(["config", "--compact"])

    assert analyze.handler is _handle_analyze
    assert analyze.tea_file == Path("teas.json")
    assert analyze.system is None
    assert similar.handler is _handle_similar
    assert similar.limit == 5
    assert config.handler is _handle_config
    assert config.compact is True


def test_build_parser_uses_configured_defaults() -> None:
    parser = build_parser(
        {
            "system": "/etc/wuxing/system.yaml",
            "similar": {"limit": 8},
            "logging": {"level": "debug", "format": "text"},
        }
    )

    namespace = parser.parse_args(["similar", "teas.json", "--target", "Assam"])

    assert namespace.limit == 8
    assert str(namespace.system) == "/etc/wuxing/system.yaml"
    assert namespace.log_level == "debug"
    assert namespace.log_format == "text"


def test_build_parser_ignores_malformed_limit() -> None:
    parser = build_parser({"similar": {"limit": "many"}})

    namespace = parser.parse_args(["similar", "teas.json", "--target", "Assam"])

    assert namespace.limit == 5


def test_similar_requires_target() -> None:
    parser = build_parser({})

    with pytest.raises(SystemExit):
        parser.parse_args(["similar", "teas.json"])


def test_command_is_required() -> None:
    with pytest.raises(SystemExit):
        build_parser({}).parse_args([])
