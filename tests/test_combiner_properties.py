"""Property checks for the combiner over generated tea records."""

from __future__ import annotations

import math
from typing import Any

import pytest

pytest.importorskip("hypothesis")
from hypothesis import given, settings
from hypothesis import strategies as st

from wuxing_tea.combiner import ElementsCalculator

_DESCRIPTORS = [
    "grassy",
    "umami",
    "marine",
    "malty",
    "roasted",
    "floral",
    "honey",
    "earthy",
    "mineral",
    "citrus",
    "smoky",
    "xyzzy",
]
_TAGS = ["steamed", "rolled", "withered", "fully-oxidized", "aged", "fermented", "roasted", "ctc"]

_levels = st.one_of(st.none(), st.floats(min_value=-5, max_value=20, allow_nan=False))

_records = st.fixed_dictionaries(
    {},
    optional={
        "flavorProfile": st.lists(st.sampled_from(_DESCRIPTORS), max_size=6),
        "caffeineLevel": _levels,
        "lTheanineLevel": _levels,
        "processingMethods": st.lists(st.sampled_from(_TAGS), max_size=4),
        "geography": st.fixed_dictionaries(
            {},
            optional={
                "altitude": st.floats(min_value=0, max_value=3000),
                "humidity": st.floats(min_value=0, max_value=100),
                "temperature": st.floats(min_value=-5, max_value=40),
                "latitude": st.floats(min_value=-60, max_value=60),
            },
        ),
    },
)

_CALCULATOR = ElementsCalculator()


@settings(max_examples=60, deadline=None)
@given(_records)
def test_final_distribution_is_normalised(record: dict[str, Any]) -> None:
    analysis = _CALCULATOR.combine(record)

    values = list(analysis.elements.as_dict().values())
    assert all(value >= 0.0 for value in values)
    if analysis.is_sufficient:
        assert math.isclose(sum(values), 1.0, abs_tol=1e-9)
        assert math.isclose(math.fsum(analysis.weights.values()), 1.0, abs_tol=1e-9)
    else:
        assert analysis.dominant_element is None


@settings(max_examples=30, deadline=None)
@given(_records)
def test_combine_is_deterministic(record: dict[str, Any]) -> None:
    assert _CALCULATOR.combine(record) == _CALCULATOR.combine(record)
