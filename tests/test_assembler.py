from __future__ import annotations

import pytest

from chartengine.aspects import AspectEngine
from chartengine.config import ChartSettings
from chartengine.exceptions import ValidationError
from chartengine.schemas import HousePositions, LayerPositions, PlanetPosition
from chartengine.visual import (
    AngleMarker,
    GlyphPlacement,
    HouseArc,
    RingType,
    SignArc,
    WheelAssembler,
    default_wheel,
    load_wheel_definition,
    longitude_to_screen_angle,
    stack_glyphs,
)


def _houses(asc: float) -> HousePositions:
    return HousePositions(
        system="equal",
        cusps={str(idx): (asc + 30.0 * (idx - 1)) % 360.0 for idx in range(1, 13)},
        angles={"asc": asc, "mc": (asc + 270.0) % 360.0, "dc": (asc + 180.0) % 360.0, "ic": (asc + 90.0) % 360.0},
    )


def _layer(houses=None, **lons):
    planets = {name: PlanetPosition(lon=lon) for name, lon in lons.items()}
    return LayerPositions(planets=planets, houses=houses)


def test_screen_angle_places_ascendant_on_left_horizon():
    assert longitude_to_screen_angle(100.0, 100.0) == 180.0
    assert longitude_to_screen_angle(190.0, 100.0) == 90.0
    assert longitude_to_screen_angle(0.0) == 180.0


def test_stacking_steps_close_neighbours_outward():
    placement = stack_glyphs({"a": 10.0, "b": 12.0, "c": 14.0, "d": 16.0, "e": 100.0}, 0.55, 0.75)
    width = 0.2 / 3
    assert [placement[k][0] for k in "abcde"] == [0, 1, 2, 0, 0]
    assert placement["b"][1] == pytest.approx(0.55 + 1.5 * width)
    assert placement["e"][1] == pytest.approx(0.55 + 0.5 * width)


def test_stacking_clusters_across_zero():
    placement = stack_glyphs({"x": 358.0, "y": 2.0}, 0.0, 0.3)
    assert placement["x"][0] == 0
    assert placement["y"][0] == 1


def test_stacking_ties_break_on_id():
    placement = stack_glyphs({"moon": 50.0, "mars": 50.0}, 0.0, 0.3, bands=2)
    assert placement["mars"][0] == 0
    assert placement["moon"][0] == 1


def test_default_wheel_with_houses():
    natal = _layer(_houses(100.0), sun=100.0, moon=220.0)
    assembled = WheelAssembler().assemble(default_wheel(), {"natal": natal})

    assert assembled.ascendant == 100.0
    assert assembled.primary_layer_id == "natal"
    assert [r.type for r in assembled.rings] == [RingType.SIGNS, RingType.HOUSES, RingType.PLANETS]

    signs, houses, planets = assembled.rings
    assert all(isinstance(p, SignArc) for p in signs.primitives)
    assert len(signs.primitives) == 12
    assert [p.house for p in houses.primitives if isinstance(p, HouseArc)] == list(range(1, 13))
    assert houses.primitives[0].start_angle == 180.0
    sun = assembled.glyphs()[("natal", "sun")]
    assert isinstance(sun, GlyphPlacement)
    assert sun.angle == 180.0


def test_houses_ring_skipped_without_house_data():
    assembled = WheelAssembler().assemble(default_wheel(), {"natal": _layer(sun=0.0)})
    assert [r.type for r in assembled.rings] == [RingType.SIGNS, RingType.PLANETS]
    assert assembled.ascendant == 0.0


def test_missing_layer_rejected():
    with pytest.raises(ValidationError) as excinfo:
        WheelAssembler().assemble(default_wheel(), {"transit": _layer(sun=0.0)})
    assert excinfo.value.context["value"] == "natal"


def test_ring_type_and_source_must_agree():
    wheel = load_wheel_definition(
        {
            "rings": [
                {
                    "slug": "bad",
                    "type": "signs",
                    "orderIndex": 0,
                    "radiusInner": 0.5,
                    "radiusOuter": 1.0,
                    "dataSource": {"kind": "layer_planets", "layerId": "natal"},
                }
            ]
        }
    )
    with pytest.raises(ValidationError, match="requires a static_zodiac"):
        WheelAssembler().assemble(wheel, {"natal": _layer(sun=0.0)})


def test_primary_layer_prefers_house_ring_when_unspecified():
    wheel = load_wheel_definition(
        {
            "rings": [
                {
                    "slug": "transit",
                    "type": "planets",
                    "orderIndex": 0,
                    "radiusInner": 0.6,
                    "radiusOuter": 0.8,
                    "dataSource": {"kind": "layer_planets", "layerId": "transit"},
                },
                {
                    "slug": "angles",
                    "type": "angles",
                    "orderIndex": 1,
                    "radiusInner": 0.8,
                    "radiusOuter": 1.0,
                    "dataSource": {"kind": "layer_houses", "layerId": "natal"},
                },
            ]
        }
    )
    positions = {"natal": _layer(_houses(30.0), sun=0.0), "transit": _layer(sun=45.0)}
    assembled = WheelAssembler().assemble(wheel, positions)

    assert assembled.primary_layer_id == "natal"
    assert assembled.ascendant == 30.0
    markers = assembled.rings[1].primitives
    assert [m.name for m in markers if isinstance(m, AngleMarker)] == ["asc", "ic", "dc", "mc"]
    assert assembled.glyphs()[("transit", "sun")].angle == longitude_to_screen_angle(45.0, 30.0)


def test_object_filter_and_aspects_are_carried():
    natal = _layer(sun=0.0, moon=120.0, mars=200.0)
    aspects = AspectEngine().compute({"natal": natal}, ChartSettings())
    assembled = WheelAssembler().assemble(default_wheel(), {"natal": natal}, aspects, object_filter=["Sun", "moon"])
    assert set(assembled.glyphs()) == {("natal", "sun"), ("natal", "moon")}
    assert assembled.aspects == tuple(aspects)
