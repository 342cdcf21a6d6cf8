"""Shared rotational convention for wheel layout."""

from __future__ import annotations

import math

__all__ = ["longitude_to_screen_angle", "norm360", "pol2cart"]


def norm360(value: float) -> float:
    v = value % 360.0
    return v + 360.0 if v < 0 else v


def longitude_to_screen_angle(lon: float, asc: float = 0.0) -> float:
    """Return the screen angle (degrees, y-down frame) for ecliptic ``lon``.

    The ascendant lands at 180° (left horizon) and longitudes increase
    counterclockwise on screen.
    """

    return norm360(180.0 - (lon - asc))


def pol2cart(angle_deg: float, r: float, cx: float = 0.0, cy: float = 0.0) -> tuple[float, float]:
    a = math.radians(angle_deg)
    return cx + r * math.cos(a), cy + r * math.sin(a)
