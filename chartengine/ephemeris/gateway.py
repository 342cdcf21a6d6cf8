"""Contract between the pipeline and an ephemeris oracle."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol, runtime_checkable

from ..schemas import LayerPositions, PlanetPosition

__all__ = [
    "DEFAULT_OBJECTS",
    "EphemerisGateway",
    "EphemerisSettings",
    "GeoLocation",
    "SOUTH_NODE",
    "NORTH_NODE",
    "VALID_OBJECTS",
    "south_node_from",
]

NORTH_NODE = "north_node"
SOUTH_NODE = "south_node"

VALID_OBJECTS: tuple[str, ...] = (
    "sun",
    "moon",
    "mercury",
    "venus",
    "mars",
    "jupiter",
    "saturn",
    "uranus",
    "neptune",
    "pluto",
    "chiron",
    NORTH_NODE,
    SOUTH_NODE,
)

# Queried when a request leaves ``include_objects`` empty.
DEFAULT_OBJECTS: tuple[str, ...] = VALID_OBJECTS[:10]


@dataclass(frozen=True, slots=True)
class GeoLocation:
    """Observer location; ``lat`` in [-90, 90], ``lon`` in [-180, 180]."""

    lat: float
    lon: float


@dataclass(frozen=True, slots=True)
class EphemerisSettings:
    """Settings an ephemeris query depends on."""

    zodiac_type: str = "tropical"
    house_system: str = "placidus"
    ayanamsa: str | None = None
    include_objects: tuple[str, ...] = field(default_factory=tuple)


@runtime_checkable
class EphemerisGateway(Protocol):
    """Black-box oracle turning an instant into positions.

    Implementations raise :class:`~chartengine.exceptions.EphemerisError` for
    unknown house systems or ayanamsas and for per-object or house failures.
    """

    def positions(
        self,
        moment: datetime,
        location: GeoLocation | None,
        settings: EphemerisSettings,
    ) -> LayerPositions: ...


def south_node_from(north: PlanetPosition) -> PlanetPosition:
    """Derive the south node opposite ``north``."""

    return PlanetPosition(
        lon=(north.lon + 180.0) % 360.0,
        lat=0.0,
        speed_lon=north.speed_lon,
        retrograde=north.retrograde,
    )
