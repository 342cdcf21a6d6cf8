"""Sign tables and essential rulerships shared by the annotation modules."""

from __future__ import annotations

import math

__all__ = [
    "EXALTATIONS",
    "MODERN_RULERS",
    "SIGN_NAMES",
    "SIGN_RULERS",
    "degree_in_sign",
    "normalize_longitude",
    "sign_index",
    "sign_name",
]

SIGN_NAMES: tuple[str, ...] = (
    "aries",
    "taurus",
    "gemini",
    "cancer",
    "leo",
    "virgo",
    "libra",
    "scorpio",
    "sagittarius",
    "capricorn",
    "aquarius",
    "pisces",
)

# Traditional domicile ruler per sign index.
SIGN_RULERS: tuple[str, ...] = (
    "mars",
    "venus",
    "mercury",
    "moon",
    "sun",
    "mercury",
    "venus",
    "mars",
    "jupiter",
    "saturn",
    "saturn",
    "jupiter",
)

# Outer-planet co-rulers: planet -> sign index.
MODERN_RULERS: dict[str, int] = {"uranus": 10, "neptune": 11, "pluto": 7}

# Planet -> (sign index, exact degree within the sign).
EXALTATIONS: dict[str, tuple[int, float]] = {
    "sun": (0, 19.0),
    "moon": (1, 3.0),
    "mercury": (5, 15.0),
    "venus": (11, 27.0),
    "mars": (9, 28.0),
    "jupiter": (3, 15.0),
    "saturn": (6, 21.0),
}


def normalize_longitude(longitude: float) -> float:
    if not math.isfinite(longitude):
        raise ValueError("Longitude must be a finite number of degrees")
    return float(longitude) % 360.0


def sign_index(longitude: float) -> int:
    return min(int(normalize_longitude(longitude) // 30.0), 11)


def sign_name(longitude: float) -> str:
    return SIGN_NAMES[sign_index(longitude)]


def degree_in_sign(longitude: float) -> float:
    return normalize_longitude(longitude) % 30.0
