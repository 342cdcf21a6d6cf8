"""Nakshatra and pada annotation for longitudes."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from .calculator import starting_position
from .systems import NAKSHATRA_NAMES, NAKSHATRA_SPAN, VIMSHOTTARI

__all__ = ["NakshatraPosition", "PADA_DEGREES", "nakshatra_for"]

PADA_DEGREES = float(NAKSHATRA_SPAN) / 4.0


@dataclass(frozen=True)
class NakshatraPosition:
    """Placement of a longitude within a nakshatra; ``pada`` is 1-based."""

    name: str
    index: int
    pada: int
    lord: str
    degree_in_nakshatra: float
    longitude: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def nakshatra_for(longitude: float) -> NakshatraPosition:
    lon = float(longitude) % 360.0
    index, fraction, lord = starting_position(VIMSHOTTARI, lon)
    offset = float(fraction * NAKSHATRA_SPAN)
    return NakshatraPosition(
        name=NAKSHATRA_NAMES[index],
        index=index,
        pada=min(int(offset // PADA_DEGREES), 3) + 1,
        lord=lord,
        degree_in_nakshatra=offset,
        longitude=lon,
    )
