from __future__ import annotations

from datetime import UTC, datetime

import pytest

from chartengine.ephemeris import EphemerisSettings, GeoLocation, SwissEphemerisGateway
from chartengine.ephemeris.swe import has_swisseph
from chartengine.exceptions import EphemerisError

J2000 = datetime(2000, 1, 1, 12, tzinfo=UTC)
LONDON = GeoLocation(lat=51.5074, lon=-0.1278)

needs_swisseph = pytest.mark.skipif(not has_swisseph(), reason="pyswisseph not installed")


def test_unknown_house_system_fails_before_any_query():
    gateway = SwissEphemerisGateway()
    with pytest.raises(EphemerisError) as excinfo:
        gateway.positions(J2000, LONDON, EphemerisSettings(house_system="nonsense", include_objects=("sun",)))
    assert excinfo.value.kind == "invalid_house_system"


@pytest.mark.swisseph
@needs_swisseph
def test_sun_near_capricorn_10_at_j2000():
    gateway = SwissEphemerisGateway()
    layer = gateway.positions(J2000, None, EphemerisSettings(include_objects=("sun", "north_node", "south_node")))

    assert layer.planets["sun"].lon == pytest.approx(280.37, abs=0.5)
    assert not layer.planets["sun"].retrograde
    north, south = layer.planets["north_node"], layer.planets["south_node"]
    assert (south.lon - north.lon) % 360.0 == pytest.approx(180.0)
    assert layer.houses is None


@pytest.mark.swisseph
@needs_swisseph
def test_houses_and_angles():
    gateway = SwissEphemerisGateway()
    layer = gateway.positions(J2000, LONDON, EphemerisSettings(house_system="whole_sign", include_objects=("sun",)))

    houses = layer.houses
    assert houses is not None
    assert houses.system == "whole_sign"
    assert len(houses.cusp_list()) == 12
    assert houses.cusps["1"] % 30.0 == pytest.approx(0.0, abs=1e-6)
    assert houses.angles["dc"] == pytest.approx((houses.angles["asc"] + 180.0) % 360.0)


@pytest.mark.swisseph
@needs_swisseph
def test_sidereal_offset_and_missing_ayanamsa():
    gateway = SwissEphemerisGateway()
    tropical = gateway.positions(J2000, None, EphemerisSettings(include_objects=("sun",)))
    sidereal = gateway.positions(
        J2000, None, EphemerisSettings(zodiac_type="sidereal", ayanamsa="lahiri", include_objects=("sun",))
    )
    offset = (tropical.planets["sun"].lon - sidereal.planets["sun"].lon) % 360.0
    assert offset == pytest.approx(23.86, abs=0.1)

    with pytest.raises(EphemerisError) as excinfo:
        gateway.positions(J2000, None, EphemerisSettings(zodiac_type="sidereal", include_objects=("sun",)))
    assert excinfo.value.kind == "invalid_ayanamsa"
