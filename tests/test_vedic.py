from __future__ import annotations

import pytest

from chartengine.schemas import HousePositions, LayerPositions, PlanetPosition
from chartengine.vedic import VARGA_CODES, build_varga_layers, identify_yogas, varga_placement


def _layer(planets, ascendant=None):
    houses = None
    if ascendant is not None:
        houses = HousePositions(
            system="whole_sign",
            cusps={str(idx + 1): (ascendant + 30.0 * idx) % 360.0 for idx in range(12)},
            angles={"asc": ascendant, "mc": (ascendant + 270.0) % 360.0},
        )
    return LayerPositions(
        planets={obj: PlanetPosition.from_speed(lon, 0.0, 1.0) for obj, lon in planets.items()},
        houses=houses,
    )


@pytest.mark.parametrize(
    "lon, code, sign, part",
    [
        (0.0, "D9", "aries", 1),
        (3.5, "D9", "taurus", 2),
        (31.0, "D9", "capricorn", 1),
        (61.0, "D9", "libra", 1),
        (15.0, "D3", "leo", 2),
        (25.0, "D3", "sagittarius", 3),
        (10.0, "D2", "leo", 1),
        (20.0, "D2", "cancer", 2),
        (40.0, "D2", "cancer", 1),
        (31.0, "D10", "capricorn", 1),
        (0.75, "D60", "taurus", 2),
        (200.0, "D1", "libra", 1),
    ],
)
def test_varga_sign_counting(lon, code, sign, part):
    placement = varga_placement(lon, code)
    assert placement.sign == sign
    assert placement.part == part


def test_varga_longitude_scales_within_part():
    placement = varga_placement(3.5, "d9")
    assert placement.code == "D9"
    assert placement.longitude == pytest.approx(31.5)


@pytest.mark.parametrize(
    "lon, sign, ruler",
    [
        (3.0, "aries", "mars"),
        (12.0, "sagittarius", "jupiter"),
        (33.0, "taurus", "venus"),
        (59.9, "scorpio", "mars"),
    ],
)
def test_trimsamsa_uses_unequal_segments(lon, sign, ruler):
    placement = varga_placement(lon, "D30")
    assert placement.sign == sign
    assert placement.ruler == ruler


def test_unknown_varga_code():
    assert "D13" not in VARGA_CODES
    with pytest.raises(KeyError):
        varga_placement(10.0, "D13")


def test_build_varga_layers_includes_ascendant():
    layers = build_varga_layers(_layer({"sun": 15.0}, ascendant=61.0), ["D9", "D30"])
    assert set(layers) == {"D9", "D30"}
    assert set(layers["D9"]) == {"sun", "asc"}
    assert layers["D9"]["asc"]["sign"] == "libra"
    assert layers["D30"]["sun"]["ruler"] == "jupiter"
    assert "asc" not in build_varga_layers(_layer({"sun": 15.0}), ["D9"])["D9"]


def test_yogas_detected_in_fixed_order():
    layer = _layer(
        {"sun": 200.0, "moon": 5.0, "mercury": 205.0, "jupiter": 95.0, "mars": 280.0},
        ascendant=0.0,
    )
    yogas = identify_yogas(layer)
    assert [yoga.name for yoga in yogas] == [
        "Ruchaka Yoga",
        "Hamsa Yoga",
        "Gajakesari Yoga",
        "Budhaditya Yoga",
        "Kemadruma Yoga",
    ]
    assert yogas[1].to_dict() == {
        "name": "Hamsa Yoga",
        "category": "panch_mahapurusha",
        "participants": ["jupiter"],
        "notes": ["house 4"],
    }


def test_mahapurusha_needs_houses_and_no_combustion():
    planets = {"sun": 283.0, "moon": 5.0, "mars": 280.0, "jupiter": 95.0, "venus": 40.0}
    assert [yoga.name for yoga in identify_yogas(_layer(planets))] == ["Gajakesari Yoga"]
    names = [yoga.name for yoga in identify_yogas(_layer(planets, ascendant=0.0))]
    assert "Ruchaka Yoga" not in names
    assert "Hamsa Yoga" in names
    assert "Kemadruma Yoga" not in names
