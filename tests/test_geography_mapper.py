from __future__ import annotations

import math

import pytest

from wuxing_core.elements import ElementDistribution
from wuxing_tea.mappers.geography import GeographyElementMapper
from wuxing_tea.record import GeographyProfile, TeaRecord
from wuxing_tea.tables import TeaTables


@pytest.fixture()
def mapper(tables: TeaTables) -> GeographyElementMapper:
    return GeographyElementMapper(tables.geography)


def _band(tables: TeaTables, factor_name: str, value: float) -> ElementDistribution:
    factor = next(item for item in tables.geography.factors if item.name == factor_name)
    return factor.band_for(value).elements


def test_single_factor_returns_its_band(mapper: GeographyElementMapper, tables: TeaTables) -> None:
    result = mapper.map({"altitude": 300})

    assert result.is_close(_band(tables, "altitude", 300))


def test_weights_renormalise_over_present_factors(
    mapper: GeographyElementMapper, tables: TeaTables
) -> None:
    result = mapper.map(GeographyProfile(altitude=1600, humidity=50))

    expected = (
        _band(tables, "altitude", 1600).scaled(0.25).plus(_band(tables, "humidity", 50), 0.20)
    ).scaled(1.0 / 0.45)
    assert result.is_close(expected)
    assert math.isclose(result.total, 1.0)


def test_latitude_uses_absolute_value(mapper: GeographyElementMapper) -> None:
    assert mapper.map({"latitude": -35}) == mapper.map({"latitude": 35})


def test_missing_geography(mapper: GeographyElementMapper) -> None:
    assert mapper.map(None) == ElementDistribution.uniform()
    assert mapper.map(GeographyProfile(climate="tropical")) == ElementDistribution.uniform()
    assert mapper.map_record(TeaRecord()) is None


def test_camel_case_solar_radiation(mapper: GeographyElementMapper) -> None:
    readings = mapper.readings({"solarRadiation": 5.5})

    assert [(reading.factor, reading.band) for reading in readings] == [("solar", "bright")]


def test_analyze_terrain(mapper: GeographyElementMapper) -> None:
    high = mapper.analyze({"altitude": 2100, "humidity": 70})
    rainforest = mapper.analyze({"humidity": 90, "temperature": 28})
    lowland = mapper.analyze({"altitude": 100})

    assert high.terrain_character == "High Mountain"
    assert rainforest.terrain_character == "Tropical Rainforest"
    assert lowland.terrain_character == "Fertile Valley"
    assert lowland.dominant_element == "earth"
    assert high.as_dict()["readings"][0]["factor"] == "altitude"


def test_integer_readings_match_float_readings(mapper: GeographyElementMapper) -> None:
    from_ints = mapper.map(GeographyProfile(altitude=2500, humidity=30))
    from_floats = mapper.map(GeographyProfile(altitude=2500.0, humidity=30.0))
    from_mapping = mapper.map({"altitude": 2500, "humidity": 30})

    assert from_ints.is_close(from_floats)
    assert from_ints.is_close(from_mapping)
    assert not from_ints.is_close(ElementDistribution.uniform())
    assert [reading.value for reading in mapper.readings(GeographyProfile(altitude=2500))] == [2500.0]


def test_integer_readings_drive_terrain(mapper: GeographyElementMapper) -> None:
    analysis = mapper.analyze(GeographyProfile(altitude=2500))

    assert analysis.terrain_character == "High Mountain"
