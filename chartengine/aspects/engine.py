"""Aspect matching across one or more position layers."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass
from itertools import combinations
from typing import Any

from ..config.settings import ChartSettings
from ..exceptions import InternalError
from ..observability import ASPECTS_MATCHED
from ..schemas import LayerPositions
from ..validation import validate_orbs

__all__ = [
    "Aspect",
    "AspectEngine",
    "MAJOR_ASPECTS",
    "angular_sep_deg",
    "group_aspect_sets",
]

LOG = logging.getLogger(__name__)

EPS = 1e-9

MAJOR_ASPECTS: dict[str, float] = {
    "conjunction": 0.0,
    "sextile": 60.0,
    "square": 90.0,
    "trine": 120.0,
    "opposition": 180.0,
}


def _norm360(x: float) -> float:
    v = x % 360.0
    return v + 360.0 if v < 0 else v


def angular_sep_deg(lon_a: float, lon_b: float) -> float:
    """Return the absolute circular separation in degrees within [0, 180]."""
    a = _norm360(lon_a)
    b = _norm360(lon_b)
    d = abs(a - b)
    if d > 180.0:
        d = 360.0 - d
    return d


@dataclass(frozen=True, slots=True)
class Aspect:
    """An angular relationship between two objects.

    ``orb`` is signed: ``separation - angle``.
    """

    object_a: str
    layer_a: str
    object_b: str
    layer_b: str
    aspect_type: str
    angle: float
    separation: float
    orb: float

    @property
    def pair_key(self) -> tuple[tuple[str, str], tuple[str, str]]:
        return (self.layer_a, self.object_a), (self.layer_b, self.object_b)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class AspectEngine:
    """Match every unordered object pair against the canonical aspect angles."""

    def __init__(self, *, only_major: bool = True) -> None:
        # Only the five canonical angles are ever considered.
        self.only_major = only_major
        self.angles: Mapping[str, float] = dict(MAJOR_ASPECTS)

    def compute(
        self,
        positions_by_layer: Mapping[str, LayerPositions],
        settings: ChartSettings,
    ) -> list[Aspect]:
        orbs = settings.orb_settings.as_mapping()
        validate_orbs(orbs)
        include = set(settings.include_objects)

        points: list[tuple[str, str, float]] = []
        for layer_id in sorted(positions_by_layer):
            planets = positions_by_layer[layer_id].planets
            for object_id in sorted(planets):
                if include and object_id not in include:
                    continue
                points.append((layer_id, object_id, planets[object_id].lon))

        out: list[Aspect] = []
        for (layer_a, obj_a, lon_a), (layer_b, obj_b, lon_b) in combinations(points, 2):
            match = self._match_pair(obj_a, layer_a, lon_a, obj_b, layer_b, lon_b, orbs)
            if match is not None:
                out.append(match)
                ASPECTS_MATCHED.labels(aspect=match.aspect_type).inc()
        LOG.debug("Matched %d aspects across %d layers", len(out), len(positions_by_layer))
        return out

    def _match_pair(
        self,
        obj_a: str,
        layer_a: str,
        lon_a: float,
        obj_b: str,
        layer_b: str,
        lon_b: float,
        orbs: Mapping[str, float],
    ) -> Aspect | None:
        delta = angular_sep_deg(lon_a, lon_b)
        found: Aspect | None = None
        for name, angle in self.angles.items():
            limit = orbs.get(name, 0.0)
            if abs(delta - angle) > limit + EPS:
                continue
            if found is not None:
                raise InternalError(
                    "Multiple aspect types matched a single pair",
                    pair=f"{layer_a}:{obj_a}/{layer_b}:{obj_b}",
                    aspects=[found.aspect_type, name],
                    separation=delta,
                )
            found = Aspect(
                object_a=obj_a,
                layer_a=layer_a,
                object_b=obj_b,
                layer_b=layer_b,
                aspect_type=name,
                angle=angle,
                separation=delta,
                orb=delta - angle,
            )
        return found


def group_aspect_sets(aspects: Iterable[Aspect]) -> dict[str, list[Aspect]]:
    """Group aspects by layer pair: ``natal`` for intra-layer, ``natal__transit`` across."""

    sets: dict[str, list[Aspect]] = {}
    for aspect in aspects:
        if aspect.layer_a == aspect.layer_b:
            key = aspect.layer_a
        else:
            key = "__".join(sorted((aspect.layer_a, aspect.layer_b)))
        sets.setdefault(key, []).append(aspect)
    return dict(sorted(sets.items()))
