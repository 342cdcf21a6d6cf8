"""Divisional (varga) charts.

Each varga splits a sign into ``divisions`` equal parts and maps part ``n``
to a destination sign by a counting rule. The rule for every supported
chart is kept next to its definition in :data:`VARGA_DEFINITIONS`.
Triṁśāṁśa (D30) uses unequal Parāśari segments and is handled separately.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from ..schemas import LayerPositions
from ..zodiac import SIGN_NAMES, degree_in_sign, sign_index

__all__ = [
    "VARGA_CODES",
    "VARGA_DEFINITIONS",
    "VargaDefinition",
    "VargaPlacement",
    "build_varga_layers",
    "normalize_varga_code",
    "varga_placement",
]


# (width in degrees, destination sign index, ruler)
_ODD_TRIMSAMSA = (
    (5.0, 0, "mars"),
    (5.0, 10, "saturn"),
    (8.0, 8, "jupiter"),
    (7.0, 2, "mercury"),
    (5.0, 6, "venus"),
)
_EVEN_TRIMSAMSA = (
    (5.0, 1, "venus"),
    (7.0, 5, "mercury"),
    (8.0, 11, "jupiter"),
    (5.0, 9, "saturn"),
    (5.0, 7, "mars"),
)


def _is_odd_sign(idx: int) -> bool:
    # Aries is index 0 and the first odd sign.
    return idx % 2 == 0


def _modality(idx: int) -> int:
    """0 for movable, 1 for fixed, 2 for dual signs."""

    return idx % 3


def _modal_start(idx: int) -> int:
    return (idx + (0, 8, 4)[_modality(idx)]) % 12


def _odd_even_start(even_offset: int) -> Callable[[int], int]:
    def _start(idx: int) -> int:
        return idx if _is_odd_sign(idx) else (idx + even_offset) % 12

    return _start


def _hora_dest(idx: int, part: int) -> int:
    # Odd signs: Sun's hora (Leo) then Moon's (Cancer); even signs reversed.
    first, second = (4, 3) if _is_odd_sign(idx) else (3, 4)
    return first if part == 0 else second


def _drekkana_dest(idx: int, part: int) -> int:
    return (idx + part * 4) % 12


def _sequential(start_fn: Callable[[int], int]) -> Callable[[int, int], int]:
    def _dest(idx: int, part: int) -> int:
        return (start_fn(idx) + part) % 12

    return _dest


@dataclass(frozen=True)
class VargaDefinition:
    code: str
    name: str
    divisions: int
    dest_fn: Callable[[int, int], int]
    rule: str

    @property
    def span(self) -> float:
        return 30.0 / self.divisions


_D7_START = _odd_even_start(6)


def _fiery_start(idx: int) -> int:
    return (0, 4, 8)[_modality(idx)]


VARGA_DEFINITIONS: dict[str, VargaDefinition] = {
    definition.code: definition
    for definition in (
        VargaDefinition("D1", "Rasi", 1, lambda idx, _part: idx, "The natal sign without subdivision."),
        VargaDefinition("D2", "Hora", 2, _hora_dest, "Odd signs: Leo then Cancer; even signs: Cancer then Leo."),
        VargaDefinition("D3", "Drekkana", 3, _drekkana_dest, "Each 10° part maps to the next sign of the same element."),
        VargaDefinition("D4", "Chaturthamsa", 4, lambda idx, part: (idx + part * 3) % 12, "Counts by kendras from the natal sign."),
        VargaDefinition("D7", "Saptamsa", 7, _sequential(_D7_START), "Odd signs count from the sign; even signs from the 7th."),
        VargaDefinition("D9", "Navamsa", 9, _sequential(_modal_start), "Movable signs count from the sign, fixed from the 9th, dual from the 5th."),
        VargaDefinition("D10", "Dasamsa", 10, _sequential(_odd_even_start(8)), "Odd signs count from the sign; even signs from the 9th."),
        VargaDefinition("D12", "Dwadasamsa", 12, _sequential(lambda idx: idx), "Counts from the natal sign."),
        VargaDefinition("D16", "Shodasamsa", 16, _sequential(_fiery_start), "Movable signs count from Aries, fixed from Leo, dual from Sagittarius."),
        VargaDefinition("D24", "Siddhamsa", 24, _sequential(lambda idx: 4 if _is_odd_sign(idx) else 3), "Odd signs count from Leo; even signs from Cancer."),
        VargaDefinition("D45", "Akshavedamsa", 45, _sequential(_fiery_start), "Movable signs count from Aries, fixed from Leo, dual from Sagittarius."),
        VargaDefinition("D60", "Shashtiamsa", 60, _sequential(lambda idx: idx), "Counts from the natal sign."),
    )
}

VARGA_CODES: tuple[str, ...] = tuple(VARGA_DEFINITIONS) + ("D30",)


def normalize_varga_code(code: str) -> str:
    key = code.strip().upper()
    return key if key.startswith("D") else f"D{key}"


@dataclass(frozen=True)
class VargaPlacement:
    code: str
    sign_index: int
    longitude: float
    part: int
    ruler: str | None = None

    @property
    def sign(self) -> str:
        return SIGN_NAMES[self.sign_index]

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "sign": self.sign,
            "signIndex": self.sign_index,
            "longitude": self.longitude,
            "part": self.part,
        }
        if self.ruler is not None:
            payload["ruler"] = self.ruler
        return payload


def _part_index(degree: float, divisions: int) -> int:
    # ``floor`` with a small epsilon keeps exact boundaries in the upper part.
    raw = math.floor(degree / (30.0 / divisions) + 1e-9)
    return min(int(raw), divisions - 1)


def _trimsamsa(longitude: float) -> VargaPlacement:
    idx = sign_index(longitude)
    degree = degree_in_sign(longitude)
    segments = _ODD_TRIMSAMSA if _is_odd_sign(idx) else _EVEN_TRIMSAMSA
    lower = 0.0
    for part, (width, dest, ruler) in enumerate(segments, start=1):
        upper = lower + width
        if degree < upper or part == len(segments):
            scaled = (degree - lower) * (30.0 / width)
            return VargaPlacement("D30", dest, (dest * 30.0 + scaled) % 360.0, part, ruler)
        lower = upper
    raise AssertionError("unreachable")


def varga_placement(longitude: float, code: str) -> VargaPlacement:
    """Return the placement of ``longitude`` in the varga named ``code``.

    Raises :class:`KeyError` for an unknown code.
    """

    key = normalize_varga_code(code)
    if key == "D30":
        return _trimsamsa(longitude)
    definition = VARGA_DEFINITIONS[key]
    idx = sign_index(longitude)
    degree = degree_in_sign(longitude)
    part = _part_index(degree, definition.divisions)
    dest = definition.dest_fn(idx, part)
    within = degree - part * definition.span
    varga_lon = (dest * 30.0 + within * definition.divisions) % 360.0
    return VargaPlacement(key, dest, varga_lon, part + 1)


def build_varga_layers(
    positions: LayerPositions,
    codes: Iterable[str],
    *,
    include_ascendant: bool = True,
) -> dict[str, dict[str, dict[str, Any]]]:
    """Return ``{code: {object_id: placement}}`` for one layer's positions."""

    layers: dict[str, dict[str, dict[str, Any]]] = {}
    for code in codes:
        key = normalize_varga_code(code)
        placements = {
            obj: varga_placement(pos.lon, key).to_dict()
            for obj, pos in sorted(positions.planets.items())
        }
        if include_ascendant and positions.houses is not None and "asc" in positions.houses.angles:
            placements["asc"] = varga_placement(positions.houses.angles["asc"], key).to_dict()
        layers[key] = placements
    return layers
