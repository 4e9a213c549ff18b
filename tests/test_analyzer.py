from __future__ import annotations

from typing import Any

import pytest

from wuxing_core.config.system import SystemConfig
from wuxing_core.elements import ElementDistribution
from wuxing_tea.analyzer import (
    TeaAnalyzer,
    TeaProfile,
    element_similarity,
    seasonal_similarity,
)
from wuxing_tea.tables import TeaTables


@pytest.fixture()
def analyzer(config: SystemConfig, tables: TeaTables) -> TeaAnalyzer:
    return TeaAnalyzer(config, tables=tables)


def test_element_similarity_bounds() -> None:
    uniform = ElementDistribution.uniform()

    assert element_similarity(uniform, uniform) == pytest.approx(1.0)
    opposite = element_similarity(ElementDistribution(wood=1.0), ElementDistribution(water=1.0))
    assert 0.0 < opposite < 1.0


def test_seasonal_similarity() -> None:
    scores = {"spring": 8, "summer": 4}

    assert seasonal_similarity(scores, scores) == pytest.approx(1.0)
    assert seasonal_similarity({}, {}) == 0.0
    assert seasonal_similarity(scores, {"spring": 0, "summer": 0}) < 1.0


def test_analyze_tea_components(analyzer: TeaAnalyzer, sencha: dict[str, Any]) -> None:
    profile = analyzer.analyze_tea(sencha)

    assert isinstance(profile, TeaProfile)
    assert profile.name == "Sencha"
    assert profile.analysis.is_sufficient
    assert profile.flavor is not None
    assert profile.compounds is not None
    assert profile.processing is not None
    assert profile.geography is not None
    assert profile.elements.total == pytest.approx(1.0)

    payload = profile.as_dict()
    assert set(payload) == {
        "tea",
        "analysis",
        "effects",
        "flavor",
        "compounds",
        "processing",
        "geography",
    }
    assert payload["tea"]["name"] == "Sencha"


def test_analyze_tea_omits_absent_components(
    analyzer: TeaAnalyzer, shou_puerh: dict[str, Any]
) -> None:
    profile = analyzer.analyze_tea(shou_puerh)

    assert profile.geography is None
    assert profile.analysis.weights["geography"] == 0.0
    assert profile.as_dict()["geography"] is None


def test_analyze_teas_preserves_order(
    analyzer: TeaAnalyzer,
    sencha: dict[str, Any],
    assam: dict[str, Any],
) -> None:
    profiles = analyzer.analyze_teas([assam, sencha])

    assert [profile.name for profile in profiles] == ["Assam", "Sencha"]


def test_find_similar_teas_ranks_and_limits(
    analyzer: TeaAnalyzer,
    sencha: dict[str, Any],
    assam: dict[str, Any],
    shou_puerh: dict[str, Any],
) -> None:
    gyokuro = dict(sencha, name="Gyokuro", flavorProfile=["umami", "marine", "vegetal"])

    results = analyzer.find_similar_teas(sencha, [sencha, assam, shou_puerh, gyokuro])

    names = [item.profile.name for item in results]
    assert "Sencha" not in names
    assert len(results) == 3
    assert names[0] == "Gyokuro"
    similarities = [item.similarity for item in results]
    assert similarities == sorted(similarities, reverse=True)
    assert all(0.0 <= value <= 1.0 for value in similarities)

    limited = analyzer.find_similar_teas(sencha, [assam, shou_puerh, gyokuro], limit=1)
    assert [item.profile.name for item in limited] == ["Gyokuro"]


def test_similar_tea_payload(
    analyzer: TeaAnalyzer, sencha: dict[str, Any], assam: dict[str, Any]
) -> None:
    result = analyzer.find_similar_teas(sencha, [assam])[0]

    payload = result.as_dict()
    assert payload["name"] == "Assam"
    assert set(payload["elements"]) == {"wood", "fire", "earth", "metal", "water"}
    for match in payload["matching_elements"]:
        assert match["role"] in {"dominant", "cross-match", "supporting", "seasonal-match"}


def test_identical_profile_matches_dominant_and_season(
    analyzer: TeaAnalyzer, assam: dict[str, Any]
) -> None:
    twin = dict(assam, name="Assam Second Flush")

    result = analyzer.find_similar_teas(assam, [twin])[0]

    roles = {match.role for match in result.matches}
    assert result.similarity == pytest.approx(1.0)
    assert {"dominant", "supporting", "seasonal-match"} <= roles


def test_tea_type_overrides_are_applied(
    config: SystemConfig, tables: TeaTables, shou_puerh: dict[str, Any]
) -> None:
    overrides = {"tea_types": {"pu-erh": {"elementInteractions": {"enabled": False}}}}
    analyzer = TeaAnalyzer(config, tables=tables, overrides=overrides)

    profile = analyzer.analyze_tea(shou_puerh)

    assert profile.analysis.elements == profile.analysis.thermal_adjusted
    assert config.interactions_enabled is True


def test_overrides_leave_other_types_untouched(
    config: SystemConfig, tables: TeaTables, sencha: dict[str, Any]
) -> None:
    overrides = {"tea_types": {"puerh": {"elementInteractions": {"enabled": False}}}}
    analyzer = TeaAnalyzer(config, tables=tables, overrides=overrides)

    profile = analyzer.analyze_tea(sencha)

    assert profile.analysis.elements != profile.analysis.thermal_adjusted
