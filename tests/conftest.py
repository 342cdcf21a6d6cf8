from __future__ import annotations

import copy
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

import pytest

from chartengine.cache import ResultCache
from chartengine.ephemeris import NORTH_NODE, SOUTH_NODE, EphemerisSettings, GeoLocation, south_node_from
from chartengine.schemas import HousePositions, LayerPositions, PlanetPosition
from chartengine.service import ChartService

EPOCH = datetime(2000, 1, 1, 12, tzinfo=UTC)

# Longitude at EPOCH and mean daily motion; deterministic stand-ins for an ephemeris.
BASE_LONGITUDES: dict[str, float] = {
    "sun": 280.46,
    "moon": 218.32,
    "mercury": 252.25,
    "venus": 181.98,
    "mars": 355.43,
    "jupiter": 34.35,
    "saturn": 50.08,
    "uranus": 314.06,
    "neptune": 304.35,
    "pluto": 238.93,
    "chiron": 251.0,
    NORTH_NODE: 125.04,
}

DAILY_MOTION: dict[str, float] = {
    "sun": 0.9856,
    "moon": 13.1764,
    "mercury": 4.0923,
    "venus": 1.6021,
    "mars": 0.524,
    "jupiter": 0.0831,
    "saturn": 0.0335,
    "uranus": 0.0117,
    "neptune": 0.006,
    "pluto": 0.004,
    "chiron": 0.02,
    NORTH_NODE: -0.0529,
}


class FakeGateway:
    """Deterministic gateway that records every query."""

    def __init__(
        self,
        planets: Mapping[str, float] | None = None,
        *,
        ascendant: float | None = None,
        fail_with: Exception | None = None,
    ) -> None:
        self.fixed = dict(planets or {})
        self.ascendant = ascendant
        self.fail_with = fail_with
        self.calls: list[tuple[datetime, GeoLocation | None, EphemerisSettings]] = []

    @property
    def call_count(self) -> int:
        return len(self.calls)

    def _position(self, object_id: str, days: float) -> PlanetPosition:
        speed = DAILY_MOTION.get(object_id, 1.0)
        if object_id in self.fixed:
            lon = self.fixed[object_id]
        else:
            lon = BASE_LONGITUDES.get(object_id, 0.0) + speed * days
        return PlanetPosition.from_speed(lon % 360.0, 0.0, speed)

    def positions(
        self,
        moment: datetime,
        location: GeoLocation | None,
        settings: EphemerisSettings,
    ) -> LayerPositions:
        self.calls.append((moment, location, settings))
        if self.fail_with is not None:
            raise self.fail_with
        days = (moment - EPOCH).total_seconds() / 86400.0
        planets: dict[str, PlanetPosition] = {}
        for object_id in settings.include_objects:
            if object_id == SOUTH_NODE:
                continue
            planets[object_id] = self._position(object_id, days)
        if SOUTH_NODE in settings.include_objects:
            planets[SOUTH_NODE] = south_node_from(planets.get(NORTH_NODE) or self._position(NORTH_NODE, days))
        houses = None
        if location is not None:
            if self.ascendant is not None:
                asc = self.ascendant % 360.0
            else:
                asc = (100.46 + 360.985647 * days + location.lon) % 360.0
            houses = HousePositions(
                system=settings.house_system,
                cusps={str(idx + 1): (asc + 30.0 * idx) % 360.0 for idx in range(12)},
                angles={
                    "asc": asc,
                    "mc": (asc + 270.0) % 360.0,
                    "dc": (asc + 180.0) % 360.0,
                    "ic": (asc + 90.0) % 360.0,
                },
            )
        return LayerPositions(planets=planets, houses=houses)


NATAL_REQUEST: dict[str, Any] = {
    "subjects": [
        {
            "id": "alice",
            "label": "Alice",
            "birthDateTime": "1990-05-15T14:30:00Z",
            "location": {"lat": 40.7128, "lon": -74.006},
        }
    ],
    "settings": {
        "zodiacType": "tropical",
        "houseSystem": "placidus",
        "includeObjects": ["sun", "moon", "mercury", "venus", "mars"],
    },
    "layer_config": {
        "natal": {"kind": "natal", "subjectId": "alice"},
    },
}


@pytest.fixture
def natal_request() -> dict[str, Any]:
    return copy.deepcopy(NATAL_REQUEST)


@pytest.fixture
def synastry_request(natal_request: dict[str, Any]) -> dict[str, Any]:
    natal_request["layer_config"]["transit"] = {
        "kind": "transit",
        "explicitDateTime": "2024-03-20T03:06:00Z",
    }
    return natal_request


@pytest.fixture
def fake_gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def service(fake_gateway: FakeGateway) -> ChartService:
    return ChartService(fake_gateway, ResultCache(16))
