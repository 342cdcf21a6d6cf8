"""Chaldean decan rulers for ecliptic longitudes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..zodiac import SIGN_NAMES, normalize_longitude

__all__ = ["DECAN_RULERS", "DecanInfo", "decan_for"]

DEGREES_PER_DECAN = 10.0

# Chaldean order starting from Mars at 0° Aries; 36 entries, one per decan.
_CHALDEAN = ("mars", "sun", "venus", "mercury", "moon", "saturn", "jupiter")
DECAN_RULERS: tuple[str, ...] = tuple(_CHALDEAN[idx % 7] for idx in range(36))


@dataclass(frozen=True)
class DecanInfo:
    sign: str
    decan: int
    ruler: str
    start_degree: float
    end_degree: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "sign": self.sign,
            "decan": self.decan,
            "ruler": self.ruler,
            "startDegree": self.start_degree,
            "endDegree": self.end_degree,
        }


def decan_for(longitude: float) -> DecanInfo:
    """Return the decan (1-3 within its sign) covering ``longitude``."""

    index = min(int(normalize_longitude(longitude) // DEGREES_PER_DECAN), 35)
    start = index * DEGREES_PER_DECAN
    return DecanInfo(
        sign=SIGN_NAMES[index // 3],
        decan=index % 3 + 1,
        ruler=DECAN_RULERS[index],
        start_degree=start,
        end_degree=start + DEGREES_PER_DECAN,
    )
