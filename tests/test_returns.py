from __future__ import annotations

import logging

import pytest

from wuxing_core.numeric import clamp, coerce_float, coerce_optional_float, normalise_weights
from wuxing_core.returns import (
    DEFAULT_DIMINISHING_RETURNS,
    InverseSqrt,
    NoDiminishing,
    PowerLaw,
    resolve_diminishing_returns,
)


def test_power_law_multiplier() -> None:
    strategy = PowerLaw(exponent=-0.3)

    assert strategy.multiplier(1) == 1.0
    assert strategy.multiplier(2) == pytest.approx(2 ** -0.3)
    assert strategy.multiplier(3) < strategy.multiplier(2)


def test_power_law_rejects_non_negative_exponent() -> None:
    with pytest.raises(ValueError):
        PowerLaw(exponent=0.5)


def test_inverse_sqrt_and_none() -> None:
    assert InverseSqrt().multiplier(4) == pytest.approx(0.5)
    assert NoDiminishing().multiplier(10) == 1.0


@pytest.mark.parametrize(
    "setting, expected_type",
    [
        (None, PowerLaw),
        ("inverse-sqrt", InverseSqrt),
        ("none", NoDiminishing),
        ({"strategy": "power_law", "exponent": -0.5}, PowerLaw),
        (InverseSqrt(), InverseSqrt),
    ],
)
def test_resolve_diminishing_returns(setting: object, expected_type: type) -> None:
    assert isinstance(resolve_diminishing_returns(setting), expected_type)


def test_resolve_uses_exponent_from_mapping() -> None:
    strategy = resolve_diminishing_returns({"strategy": "power_law", "exponent": -0.5})

    assert strategy.multiplier(4) == pytest.approx(0.5)


def test_unknown_strategy_warns_and_falls_back(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="wuxing_core.returns"):
        strategy = resolve_diminishing_returns("exponential")

    assert strategy is DEFAULT_DIMINISHING_RETURNS
    assert any(
        getattr(record, "event", None) == "config.diminishing_returns_unknown"
        for record in caplog.records
    )


def test_invalid_exponent_falls_back() -> None:
    assert resolve_diminishing_returns({"exponent": 0.2}) is DEFAULT_DIMINISHING_RETURNS


def test_numeric_helpers() -> None:
    assert coerce_float("1.5") == 1.5
    assert coerce_float(True, 3.0) == 3.0
    assert coerce_float(float("inf"), 2.0) == 2.0
    assert coerce_optional_float("x") is None
    assert clamp(12.0, 1.0, 10.0) == 10.0
    assert normalise_weights({"a": 1, "b": 3, "c": -2}) == {"a": 0.25, "b": 0.75, "c": 0.0}
    assert normalise_weights({"a": 0}) == {"a": 0.0}
