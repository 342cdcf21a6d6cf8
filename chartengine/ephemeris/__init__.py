"""Ephemeris gateway contract and the Swiss Ephemeris implementation."""

from .gateway import (
    DEFAULT_OBJECTS,
    NORTH_NODE,
    SOUTH_NODE,
    VALID_OBJECTS,
    EphemerisGateway,
    EphemerisSettings,
    GeoLocation,
    south_node_from,
)
from .house_systems import VALID_HOUSE_SYSTEMS, resolve_house_code
from .sidereal import VALID_AYANAMSAS, normalize_ayanamsa_name
from .swisseph_gateway import SwissEphemerisGateway

__all__ = [
    "DEFAULT_OBJECTS",
    "NORTH_NODE",
    "SOUTH_NODE",
    "VALID_AYANAMSAS",
    "VALID_HOUSE_SYSTEMS",
    "VALID_OBJECTS",
    "EphemerisGateway",
    "EphemerisSettings",
    "GeoLocation",
    "SwissEphemerisGateway",
    "normalize_ayanamsa_name",
    "resolve_house_code",
    "south_node_from",
]
