"""Essential dignities by sign: rulership, exaltation, detriment and fall."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..zodiac import EXALTATIONS, MODERN_RULERS, SIGN_NAMES, SIGN_RULERS, degree_in_sign, sign_index

__all__ = ["DEFAULT_EXACT_ORB", "DignityResult", "dignities_for"]

# Degrees either side of the exaltation degree counted as "exact".
DEFAULT_EXACT_ORB = 1.0


@dataclass(frozen=True)
class DignityResult:
    planet: str
    dignity: str
    sign: str
    exact: bool = False

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"planet": self.planet, "dignity": self.dignity, "sign": self.sign}
        if self.exact:
            payload["exact"] = True
        return payload


def _ruled_signs(planet: str) -> set[int]:
    signs = {idx for idx, ruler in enumerate(SIGN_RULERS) if ruler == planet}
    if planet in MODERN_RULERS:
        signs.add(MODERN_RULERS[planet])
    return signs


def dignities_for(planet: str, longitude: float, *, exact_orb: float = DEFAULT_EXACT_ORB) -> list[DignityResult]:
    """Return every essential dignity or debility ``planet`` holds at ``longitude``.

    Detriment and fall are the signs opposite rulership and exaltation.
    Objects without a rulership (nodes, chiron) yield an empty list.
    """

    key = planet.strip().lower()
    idx = sign_index(longitude)
    sign = SIGN_NAMES[idx]
    ruled = _ruled_signs(key)
    results: list[DignityResult] = []
    if idx in ruled:
        results.append(DignityResult(key, "rulership", sign))
    if key in EXALTATIONS:
        exalt_sign, exact_degree = EXALTATIONS[key]
        if idx == exalt_sign:
            exact = abs(degree_in_sign(longitude) - exact_degree) <= exact_orb
            results.append(DignityResult(key, "exaltation", sign, exact=exact))
        elif idx == (exalt_sign + 6) % 12:
            results.append(DignityResult(key, "fall", sign))
    if any((ruled_idx + 6) % 12 == idx for ruled_idx in ruled):
        results.append(DignityResult(key, "detriment", sign))
    return results
