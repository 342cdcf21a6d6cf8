from __future__ import annotations

import pytest

from chartengine.aspects import AspectEngine, angular_sep_deg, group_aspect_sets
from chartengine.config import ChartSettings
from chartengine.exceptions import InternalError, ValidationError
from chartengine.schemas import LayerPositions, PlanetPosition


def _layer(**lons: float) -> LayerPositions:
    return LayerPositions(planets={name: PlanetPosition(lon=lon) for name, lon in lons.items()})


def test_angular_sep_wraps_correctly():
    assert angular_sep_deg(350.0, 10.0) == 20.0
    assert angular_sep_deg(10.0, 190.0) == 180.0
    assert angular_sep_deg(0.0, 0.0) == 0.0


def test_exact_trine_between_10_and_130():
    settings = ChartSettings(orbSettings={"trine": 7.0})
    [aspect] = AspectEngine().compute({"natal": _layer(sun=10.0, mars=130.0)}, settings)

    assert aspect.aspect_type == "trine"
    assert aspect.separation == pytest.approx(120.0)
    assert aspect.orb == pytest.approx(0.0)
    assert (aspect.object_a, aspect.object_b) == ("mars", "sun")


def test_orb_is_signed():
    settings = ChartSettings()
    [applying] = AspectEngine().compute({"n": _layer(sun=0.0, moon=87.0)}, settings)
    [separating] = AspectEngine().compute({"n": _layer(sun=0.0, moon=93.0)}, settings)
    assert applying.aspect_type == separating.aspect_type == "square"
    assert applying.orb == pytest.approx(-3.0)
    assert separating.orb == pytest.approx(3.0)


def test_out_of_orb_excluded():
    settings = ChartSettings(orbSettings={"sextile": 3.0})
    assert AspectEngine().compute({"n": _layer(mars=0.0, venus=64.0)}, settings) == []


def test_cross_layer_pairs_and_no_self_pairs():
    positions = {"natal": _layer(sun=10.0), "transit": _layer(sun=10.5)}
    [aspect] = AspectEngine().compute(positions, ChartSettings())
    assert aspect.aspect_type == "conjunction"
    assert (aspect.layer_a, aspect.layer_b) == ("natal", "transit")


def test_include_objects_filter():
    positions = {"n": _layer(sun=0.0, moon=0.0, mars=0.0)}
    aspects = AspectEngine().compute(positions, ChartSettings(includeObjects=["sun", "moon"]))
    assert [(a.object_a, a.object_b) for a in aspects] == [("moon", "sun")]


def test_deterministic_order():
    positions = {
        "transit": _layer(venus=60.0, sun=0.0),
        "natal": _layer(moon=180.0, sun=0.0),
    }
    aspects = AspectEngine().compute(positions, ChartSettings())
    keys = [(a.layer_a, a.object_a, a.layer_b, a.object_b) for a in aspects]
    assert keys == sorted(keys)
    assert aspects == AspectEngine().compute(dict(reversed(list(positions.items()))), ChartSettings())


def test_orbs_validated():
    bad = ChartSettings(orbSettings={"conjunction": 31.0})
    with pytest.raises(ValidationError):
        AspectEngine().compute({"n": _layer(sun=0.0)}, bad)


def test_exclusivity_is_asserted():
    engine = AspectEngine()
    engine.angles = {"conjunction": 0.0, "semi": 5.0}
    with pytest.raises(InternalError):
        engine._match_pair("sun", "n", 0.0, "moon", "n", 3.0, {"conjunction": 8.0, "semi": 8.0})


def test_group_aspect_sets():
    positions = {"natal": _layer(sun=0.0, moon=120.0), "transit": _layer(mars=180.0)}
    sets = group_aspect_sets(AspectEngine().compute(positions, ChartSettings()))
    assert list(sets) == ["natal", "natal__transit"]
    assert [a.aspect_type for a in sets["natal"]] == ["trine"]
    assert {a.aspect_type for a in sets["natal__transit"]} == {"opposition", "sextile"}
