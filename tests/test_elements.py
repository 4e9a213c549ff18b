from __future__ import annotations

import math

import numpy as np
import pytest

from wuxing_core.elements import ELEMENTS, ElementDistribution, normalise_element_name


def test_elements_are_in_generating_order() -> None:
    assert ELEMENTS == ("wood", "fire", "earth", "metal", "water")


@pytest.mark.parametrize(
    "value, expected",
    [("Wood", "wood"), (" WATER ", "water"), ("steel", None), (None, None)],
)
def test_normalise_element_name(value: object, expected: str | None) -> None:
    assert normalise_element_name(value) == expected


def test_from_mapping_defaults_missing_and_junk_to_zero() -> None:
    distribution = ElementDistribution.from_mapping(
        {"Fire": "0.4", "water": float("nan"), "earth": "junk", "aether": 1.0}
    )

    assert distribution.as_dict() == {
        "wood": 0.0,
        "fire": 0.4,
        "earth": 0.0,
        "metal": 0.0,
        "water": 0.0,
    }


def test_from_mapping_strict_rejects_unknown_keys() -> None:
    with pytest.raises(KeyError):
        ElementDistribution.from_mapping({"aether": 1.0}, strict=True)


def test_from_values_requires_five_entries() -> None:
    assert ElementDistribution.from_values([1, 2, 3, 4, 5]).water == 5.0
    with pytest.raises(ValueError):
        ElementDistribution.from_values([1, 2])


def test_normalised_sums_to_target_and_keeps_zero_mass() -> None:
    distribution = ElementDistribution(wood=2.0, fire=1.0, water=1.0)

    assert math.isclose(distribution.normalised().total, 1.0)
    assert math.isclose(distribution.normalised(0.3).total, 0.3)
    assert ElementDistribution.zeros().normalised() == ElementDistribution.zeros()


def test_plus_scaled_and_clamped() -> None:
    base = ElementDistribution(wood=0.5, fire=-0.2)
    other = ElementDistribution(fire=1.0, metal=2.0)

    combined = base.plus(other, 0.5)

    assert combined.fire == pytest.approx(0.3)
    assert combined.metal == pytest.approx(1.0)
    assert base.clamped(0.0).fire == 0.0
    assert other.clamped(0.0, 1.0).metal == 1.0
    assert base.scaled(2.0).wood == 1.0


def test_ranked_breaks_ties_in_canonical_order() -> None:
    distribution = ElementDistribution(wood=0.2, fire=0.4, earth=0.4, metal=0.0, water=0.0)

    assert [element for element, _ in distribution.ranked()][:3] == ["fire", "earth", "wood"]
    assert distribution.dominant_pair() == ("fire", "earth")


def test_dominant_pair_without_mass_is_none() -> None:
    assert ElementDistribution.zeros().dominant_pair() == (None, None)


def test_distance_and_array_view() -> None:
    first = ElementDistribution(wood=1.0)
    second = ElementDistribution(water=1.0)

    assert first.distance(second) == pytest.approx(math.sqrt(2.0))
    np.testing.assert_allclose(first.as_array(), [1.0, 0.0, 0.0, 0.0, 0.0])


def test_entropy_bounds() -> None:
    assert ElementDistribution.uniform().entropy() == pytest.approx(1.0)
    assert ElementDistribution(fire=1.0).entropy() == 0.0


def test_distribution_is_immutable() -> None:
    distribution = ElementDistribution.uniform()
    with pytest.raises(AttributeError):
        distribution.wood = 1.0  # type: ignore[misc]
    assert distribution.with_values(wood=1.0).wood == 1.0
    assert distribution.wood == 0.2
