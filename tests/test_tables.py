from __future__ import annotations

import math

import pytest

from wuxing_core.elements import ELEMENTS
from wuxing_tea.tables import (
    CompoundTables,
    ElementAdjustment,
    FlavorTables,
    ProcessingTables,
    TableError,
    TeaTables,
    TeaTypeTables,
    ThermalTables,
    load_default_tables,
    normalise_tag,
    normalise_term,
)


def test_normalisers() -> None:
    assert normalise_term("  Green Bean ") == "green bean"
    assert normalise_tag(" Pan  Fired ") == "pan-fired"


def test_default_tables_are_cached() -> None:
    assert load_default_tables() is load_default_tables()


def test_flavor_tables_cross_references(tables: TeaTables) -> None:
    flavor = tables.flavor

    assert set(flavor.tcm_flavors) == {"sour", "bitter", "sweet", "pungent", "salty"}
    assert flavor.direct_flavors["briny"] == "salty"
    assert flavor.notes["seaweed"] == "marine"
    assert all(category in flavor.categories for category in flavor.notes.values())
    assert [pattern.name for pattern in flavor.patterns][:2] == ["gyokuro", "sencha"]
    assert len(flavor.patterns) == 27


def test_every_table_distribution_is_non_negative(tables: TeaTables) -> None:
    distributions = [
        *tables.flavor.tcm_flavors.values(),
        *tables.flavor.descriptors.values(),
        *(method.elements for method in tables.processing.methods.values()),
        *tables.tea_types.profiles.values(),
    ]
    for distribution in distributions:
        assert min(distribution) >= 0.0
        assert distribution.total > 0.0


def test_geography_bands_cover_the_number_line(tables: TeaTables) -> None:
    for factor in tables.geography.factors:
        assert factor.bands[-1].below is None
        for band in factor.bands:
            assert math.isclose(band.elements.total, 1.0, abs_tol=1e-9)


def test_tea_type_aliases_resolve(tables: TeaTables) -> None:
    assert tables.tea_types.resolve("Red") == tables.tea_types.resolve("black")
    assert tables.tea_types.resolve("unknown") is None
    assert tables.tea_types.resolve(None) is None


def test_thermal_labels(tables: TeaTables) -> None:
    thermal = tables.thermal

    assert thermal.label_for(0.61) == "Strongly warming"
    assert thermal.label_for(0.6) == "Warming"
    assert thermal.label_for(0.05) == "Neutral"
    assert thermal.label_for(-0.2) == "Mildly cooling"
    assert thermal.label_for(-0.7) == "Strongly cooling"


@pytest.mark.parametrize(
    "ratio, expected",
    [
        (2.5, "theanine_dominant"),
        (2.0, "calm_focus"),
        (1.5, "calm_focus"),
        (1.0, "balanced"),
        (0.5, "caffeine_dominant"),
    ],
)
def test_compound_ratio_bands(tables: TeaTables, ratio: float, expected: str) -> None:
    assert tables.compounds.band_for(ratio).name == expected


def test_effects_pairs_are_symmetric(tables: TeaTables) -> None:
    effects = tables.effects

    assert effects.pairs[frozenset({"wood", "fire"})].name == "Dynamic Vitality"
    assert set(effects.elements) == set(ELEMENTS)
    assert effects.season_order[0] == "spring"


def test_flavor_tables_reject_unknown_element() -> None:
    payload = {"tcm_flavors": {"sour": {"wood": 1.0, "aether": 0.1}}}

    with pytest.raises(TableError):
        FlavorTables.from_mapping(payload)


def test_flavor_tables_reject_negative_weights() -> None:
    with pytest.raises(TableError):
        FlavorTables.from_mapping({"tcm_flavors": {"sour": {"wood": -1.0}}})


def test_flavor_tables_reject_dangling_note() -> None:
    payload = {
        "tcm_flavors": {"sour": {"wood": 1.0}},
        "notes": {"apple": "fruity"},
    }

    with pytest.raises(TableError):
        FlavorTables.from_mapping(payload)


def test_tea_type_alias_must_exist() -> None:
    with pytest.raises(TableError):
        TeaTypeTables.from_mapping({"profiles": {"green": {"wood": 1.0}}, "aliases": {"x": "black"}})


def test_compound_tables_need_an_unbounded_band() -> None:
    payload = {
        "caffeine": {"shares": {"fire": 1.0}},
        "theanine": {"shares": {"water": 1.0}},
        "ratio_bands": [{"name": "only", "min": 1.0, "deltas": {}}],
    }

    with pytest.raises(TableError):
        CompoundTables.from_mapping(payload)


def test_injected_thermal_tables_default_to_neutral() -> None:
    thermal = ThermalTables.from_mapping({"flavor": {}, "processing": {}})

    assert thermal.label_for(0.9) == "Neutral"


def test_processing_combinations_load_in_file_order(tables: TeaTables) -> None:
    names = [item.name for item in tables.processing.combinations]

    assert names == [
        "shade_grown_steamed",
        "withered_rolled_oxidized",
        "minimal_withered",
        "fermented_aged",
        "wet_piled_compressed",
        "heavy_roast",
    ]
    ripe = tables.processing.combinations[4]
    assert ripe.requires[0] == frozenset({"wet-piling", "wet-piled"})
    assert ripe.adjustments[1] == ElementAdjustment("water", cap_element="earth", cap_ratio=0.5)


def test_element_adjustment_caps_then_floors() -> None:
    values = {"wood": 0.2, "fire": 0.1, "earth": 0.4, "metal": 0.0, "water": 0.3}

    ElementAdjustment("earth", scale=1.3, offset=0.1).apply(values)
    ElementAdjustment("water", cap_element="earth", cap_ratio=0.5).apply(values)
    ElementAdjustment("metal", floor=0.1).apply(values)
    ElementAdjustment("fire", scale=0.8, offset=-0.5).apply(values)

    assert values["earth"] == pytest.approx(0.62)
    assert values["water"] == pytest.approx(0.3)
    assert values["metal"] == pytest.approx(0.1)
    assert values["fire"] == 0.0


@pytest.mark.parametrize(
    "combination",
    [
        {"name": "x", "requires": [["steamed"]], "adjust": [{"element": "aether"}]},
        {"name": "x", "requires": [], "adjust": [{"element": "fire"}]},
        {"name": "x", "requires": [["steamed"]], "adjust": []},
        {"requires": [["steamed"]], "adjust": [{"element": "fire"}]},
        {
            "name": "x",
            "requires": [["steamed"]],
            "adjust": [{"element": "fire", "cap": {"element": "ether"}}],
        },
    ],
)
def test_processing_combinations_are_validated(combination: dict) -> None:
    with pytest.raises(TableError):
        ProcessingTables.from_mapping({"methods": {}, "combinations": [combination]})
