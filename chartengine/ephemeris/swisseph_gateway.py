"""Swiss Ephemeris implementation of :class:`EphemerisGateway`."""

from __future__ import annotations

import logging
import threading
from datetime import UTC, datetime
from time import perf_counter

from ..exceptions import EphemerisError
from ..observability import GATEWAY_CALL_DURATION
from ..schemas import HousePositions, LayerPositions, PlanetPosition
from .gateway import NORTH_NODE, SOUTH_NODE, EphemerisSettings, GeoLocation, south_node_from
from .house_systems import VALID_HOUSE_SYSTEMS, resolve_house_code
from .sidereal import AYANAMSA_SWISS_ATTRS, VALID_AYANAMSAS, normalize_ayanamsa_name
from .swe import swe

__all__ = ["SwissEphemerisGateway", "julian_day"]

LOG = logging.getLogger(__name__)

# Object id -> attribute on the ``swisseph`` module.
_BODY_ATTRS: dict[str, str] = {
    "sun": "SUN",
    "moon": "MOON",
    "mercury": "MERCURY",
    "venus": "VENUS",
    "mars": "MARS",
    "jupiter": "JUPITER",
    "saturn": "SATURN",
    "uranus": "URANUS",
    "neptune": "NEPTUNE",
    "pluto": "PLUTO",
    "chiron": "CHIRON",
    NORTH_NODE: "TRUE_NODE",
}


def julian_day(moment: datetime) -> float:
    """Return the UT Julian day for ``moment``."""

    utc = moment.astimezone(UTC)
    hour = utc.hour + utc.minute / 60.0 + (utc.second + utc.microsecond / 1e6) / 3600.0
    return float(swe.julday(utc.year, utc.month, utc.day, hour, swe.GREG_CAL))


class SwissEphemerisGateway:
    """Query planetary and house positions from pyswisseph.

    Swiss Ephemeris keeps the sidereal mode in process-global state, so all
    queries through one gateway are serialized on an internal lock.
    """

    def __init__(self, ephemeris_path: str | None = None) -> None:
        self.ephemeris_path = ephemeris_path
        self._lock = threading.Lock()
        self._sidereal_mode: int | None = None
        if ephemeris_path:
            swe.set_ephe_path(ephemeris_path)

    def positions(
        self,
        moment: datetime,
        location: GeoLocation | None,
        settings: EphemerisSettings,
    ) -> LayerPositions:
        resolved = resolve_house_code(settings.house_system)
        if resolved is None:
            raise EphemerisError(
                f"Invalid house system: {settings.house_system}. Valid systems: {list(VALID_HOUSE_SYSTEMS)}",
                kind="invalid_house_system",
                house_system=settings.house_system,
            )
        house_name, house_code = resolved
        started = perf_counter()
        with self._lock:
            flags = self._configure_flags(settings)
            jd = julian_day(moment)
            planets: dict[str, PlanetPosition] = {}
            for object_id in settings.include_objects:
                key = object_id.lower()
                if key == SOUTH_NODE:
                    continue
                planets[key] = self._planet_position(key, jd, flags, moment)
            if SOUTH_NODE in settings.include_objects:
                north = planets.get(NORTH_NODE) or self._planet_position(NORTH_NODE, jd, flags, moment)
                planets[SOUTH_NODE] = south_node_from(north)
            houses = None
            if location is not None:
                houses = self._houses(jd, location, house_name, house_code, flags)
        GATEWAY_CALL_DURATION.labels(gateway="swisseph").observe(perf_counter() - started)
        return LayerPositions(planets=planets, houses=houses)

    def _configure_flags(self, settings: EphemerisSettings) -> int:
        flags = int(swe.FLG_SWIEPH) | int(swe.FLG_SPEED)
        if settings.zodiac_type != "sidereal":
            return flags
        if not settings.ayanamsa:
            raise EphemerisError(
                "Sidereal zodiac requires an ayanamsa",
                kind="invalid_ayanamsa",
                ayanamsa=None,
            )
        name = normalize_ayanamsa_name(settings.ayanamsa)
        attr = AYANAMSA_SWISS_ATTRS.get(name)
        if attr is None:
            raise EphemerisError(
                f"Invalid ayanamsa: {settings.ayanamsa}. Valid ayanamsas: {list(VALID_AYANAMSAS)}",
                kind="invalid_ayanamsa",
                ayanamsa=settings.ayanamsa,
            )
        mode = getattr(swe(), attr, None)
        if mode is None:
            raise EphemerisError(
                f"Ayanamsa '{name}' is not supported by the installed Swiss Ephemeris",
                kind="invalid_ayanamsa",
                ayanamsa=settings.ayanamsa,
            )
        if self._sidereal_mode != int(mode):
            swe.set_sid_mode(int(mode), 0, 0)
            self._sidereal_mode = int(mode)
        return flags | int(swe.FLG_SIDEREAL)

    def _planet_position(self, object_id: str, jd: float, flags: int, moment: datetime) -> PlanetPosition:
        attr = _BODY_ATTRS.get(object_id)
        if attr is None:
            raise EphemerisError(
                f"Failed to calculate position for {object_id}: unknown object",
                kind="calculation_failed",
                object_id=object_id,
                moment=moment.isoformat(),
            )
        try:
            values, _retflag = swe.calc_ut(jd, int(getattr(swe(), attr)), flags)
        except swe.Error as exc:
            raise EphemerisError(
                f"Failed to calculate position for {object_id}: {exc}",
                kind="calculation_failed",
                object_id=object_id,
                moment=moment.isoformat(),
            ) from exc
        return PlanetPosition.from_speed(float(values[0]), float(values[1]), float(values[3]))

    def _houses(
        self,
        jd: float,
        location: GeoLocation,
        house_name: str,
        house_code: str,
        flags: int,
    ) -> HousePositions:
        try:
            cusps, ascmc = swe.houses_ex(jd, location.lat, location.lon, house_code.encode("ascii"), flags)
        except swe.Error as exc:
            raise EphemerisError(
                f"House calculation failed: {exc}",
                kind="house_calculation_failed",
                house_system=house_name,
                lat=location.lat,
                lon=location.lon,
            ) from exc
        if len(cusps) < 12:
            raise EphemerisError(
                f"House calculation failed: expected 12 cusps, got {len(cusps)}",
                kind="house_calculation_failed",
                house_system=house_name,
            )
        # pyswisseph returns either 12 cusps or a 13-element array with index 0 unused.
        offset = 1 if len(cusps) == 13 else 0
        cusp_map = {str(idx + 1): float(cusps[idx + offset]) % 360.0 for idx in range(12)}
        asc = float(ascmc[0]) % 360.0
        mc = float(ascmc[1]) % 360.0
        LOG.debug("Computed %s houses at jd=%.5f", house_name, jd)
        return HousePositions(
            system=house_name,
            cusps=cusp_map,
            angles={
                "asc": asc,
                "mc": mc,
                "ic": (mc + 180.0) % 360.0,
                "dc": (asc + 180.0) % 360.0,
            },
        )
