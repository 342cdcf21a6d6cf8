"""Detection of a small set of classical Vedic yogas from sign placements.

Houses are counted whole-sign from the ascendant's sign, so yogas that
depend on house position are only reported for layers with houses.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ..schemas import LayerPositions
from ..zodiac import EXALTATIONS, SIGN_RULERS, sign_index

__all__ = ["COMBUSTION_ORB", "YogaResult", "identify_yogas"]

KENDRA_OFFSETS = frozenset({0, 3, 6, 9})
COMBUSTION_ORB = 8.0

_MAHAPURUSHA: tuple[tuple[str, str], ...] = (
    ("mars", "Ruchaka"),
    ("mercury", "Bhadra"),
    ("jupiter", "Hamsa"),
    ("venus", "Malavya"),
    ("saturn", "Shasha"),
)

# Planets whose presence beside the Moon cancels Kemadruma.
_KEMADRUMA_SUPPORT = ("mars", "mercury", "jupiter", "venus", "saturn")


@dataclass(frozen=True)
class YogaResult:
    name: str
    category: str
    participants: tuple[str, ...]
    notes: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "name": self.name,
            "category": self.category,
            "participants": list(self.participants),
        }
        if self.notes:
            payload["notes"] = list(self.notes)
        return payload


def _separation(a: float, b: float) -> float:
    delta = (a - b) % 360.0
    return 360.0 - delta if delta > 180.0 else delta


def _strong(planet: str, sign: int) -> bool:
    own = SIGN_RULERS[sign] == planet
    exalted = planet in EXALTATIONS and EXALTATIONS[planet][0] == sign
    return own or exalted


def _panch_mahapurusha(
    signs: Mapping[str, int],
    longitudes: Mapping[str, float],
    ascendant_sign: int,
) -> list[YogaResult]:
    found: list[YogaResult] = []
    sun = longitudes.get("sun")
    for planet, label in _MAHAPURUSHA:
        sign = signs.get(planet)
        if sign is None:
            continue
        house = (sign - ascendant_sign) % 12 + 1
        if (house - 1) not in KENDRA_OFFSETS or not _strong(planet, sign):
            continue
        if sun is not None and _separation(longitudes[planet], sun) <= COMBUSTION_ORB:
            continue
        found.append(
            YogaResult(
                name=f"{label} Yoga",
                category="panch_mahapurusha",
                participants=(planet,),
                notes=(f"house {house}",),
            )
        )
    return found


def _gajakesari(signs: Mapping[str, int]) -> list[YogaResult]:
    if "moon" not in signs or "jupiter" not in signs:
        return []
    if (signs["jupiter"] - signs["moon"]) % 12 not in KENDRA_OFFSETS:
        return []
    return [YogaResult("Gajakesari Yoga", "lunar", ("jupiter", "moon"))]


def _budhaditya(signs: Mapping[str, int]) -> list[YogaResult]:
    if "sun" not in signs or signs.get("mercury") != signs["sun"]:
        return []
    return [YogaResult("Budhaditya Yoga", "solar", ("sun", "mercury"))]


def _kemadruma(signs: Mapping[str, int]) -> list[YogaResult]:
    moon = signs.get("moon")
    if moon is None:
        return []
    for planet in _KEMADRUMA_SUPPORT:
        if planet in signs and (signs[planet] - moon) % 12 in (1, 11):
            return []
    return [YogaResult("Kemadruma Yoga", "moon_affliction", ("moon",))]


def identify_yogas(positions: LayerPositions) -> list[YogaResult]:
    """Return the yogas formed by one layer's positions in a fixed order."""

    longitudes = {obj: pos.lon for obj, pos in positions.planets.items()}
    signs = {obj: sign_index(lon) for obj, lon in longitudes.items()}
    yogas: list[YogaResult] = []
    if positions.houses is not None and "asc" in positions.houses.angles:
        yogas.extend(_panch_mahapurusha(signs, longitudes, sign_index(positions.houses.angles["asc"])))
    yogas.extend(_gajakesari(signs))
    yogas.extend(_budhaditya(signs))
    yogas.extend(_kemadruma(signs))
    return yogas
