"""Map a wheel definition onto layer positions as normalized polar primitives."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Union

from ..aspects.engine import Aspect
from ..exceptions import ValidationError
from ..schemas import LayerPositions
from ..zodiac import SIGN_NAMES
from .geometry import longitude_to_screen_angle, norm360
from .wheel import DataSourceKind, Ring, RingType, WheelDefinition

__all__ = [
    "AngleMarker",
    "AssembledRing",
    "AssembledWheel",
    "GlyphPlacement",
    "HouseArc",
    "SIGN_NAMES",
    "SignArc",
    "WheelAssembler",
    "stack_glyphs",
]

LOG = logging.getLogger(__name__)

_ANGLE_NAMES: tuple[str, ...] = ("asc", "ic", "dc", "mc")

_RING_SOURCES: dict[RingType, DataSourceKind] = {
    RingType.SIGNS: DataSourceKind.STATIC_ZODIAC,
    RingType.HOUSES: DataSourceKind.LAYER_HOUSES,
    RingType.PLANETS: DataSourceKind.LAYER_PLANETS,
    RingType.ANGLES: DataSourceKind.LAYER_HOUSES,
}


# ---------------------------------------------------------------------------
# Ring-scoped primitives (radius as a fraction of the total radius)


@dataclass(frozen=True, slots=True)
class SignArc:
    index: int
    sign: str
    start_lon: float
    end_lon: float
    start_angle: float
    end_angle: float


@dataclass(frozen=True, slots=True)
class HouseArc:
    house: int
    start_lon: float
    end_lon: float
    start_angle: float
    end_angle: float


@dataclass(frozen=True, slots=True)
class GlyphPlacement:
    object_id: str
    layer_id: str
    longitude: float
    angle: float
    radius: float
    band: int
    retrograde: bool = False


@dataclass(frozen=True, slots=True)
class AngleMarker:
    name: str
    longitude: float
    angle: float


Primitive = Union[SignArc, HouseArc, GlyphPlacement, AngleMarker]


@dataclass(frozen=True, slots=True)
class AssembledRing:
    slug: str
    type: RingType
    label: str
    order_index: int
    radius_inner: float
    radius_outer: float
    layer_id: str | None
    primitives: tuple[Primitive, ...] = ()


@dataclass(frozen=True, slots=True)
class AssembledWheel:
    name: str
    ascendant: float
    primary_layer_id: str | None
    rings: tuple[AssembledRing, ...]
    aspects: tuple[Aspect, ...] = field(default_factory=tuple)

    def glyphs(self) -> dict[tuple[str, str], GlyphPlacement]:
        """Return the first glyph placed for each ``(layer_id, object_id)``."""

        placed: dict[tuple[str, str], GlyphPlacement] = {}
        for ring in self.rings:
            for item in ring.primitives:
                if isinstance(item, GlyphPlacement):
                    placed.setdefault((item.layer_id, item.object_id), item)
        return placed


# ---------------------------------------------------------------------------
# Collision avoidance


def _clusters(items: Sequence[tuple[str, float]], min_separation: float) -> list[list[tuple[str, float]]]:
    clusters: list[list[tuple[str, float]]] = []
    for item in items:
        if clusters and item[1] - clusters[-1][-1][1] < min_separation:
            clusters[-1].append(item)
        else:
            clusters.append([item])
    if len(clusters) > 1:
        first, last = clusters[0], clusters[-1]
        if first[0][1] + 360.0 - last[-1][1] < min_separation:
            clusters[0] = last + first
            clusters.pop()
    return clusters


def stack_glyphs(
    longitudes: Mapping[str, float],
    radius_inner: float,
    radius_outer: float,
    *,
    min_separation_deg: float = 6.0,
    bands: int = 3,
) -> dict[str, tuple[int, float]]:
    """Assign each object a ``(band, radius)`` so close neighbours step outward.

    Objects are ordered by ``(longitude, id)``; a cluster is a run of objects
    each closer than ``min_separation_deg`` to its predecessor, including
    across 0°. The k-th member of a cluster lands in band ``k mod bands``.
    """

    ordered = sorted(((obj, norm360(lon)) for obj, lon in longitudes.items()), key=lambda x: (x[1], x[0]))
    width = (radius_outer - radius_inner) / bands
    placement: dict[str, tuple[int, float]] = {}
    for cluster in _clusters(ordered, min_separation_deg):
        for position, (obj, _lon) in enumerate(cluster):
            band = position % bands
            placement[obj] = (band, radius_inner + (band + 0.5) * width)
    return placement


# ---------------------------------------------------------------------------
# Assembler


class WheelAssembler:
    """Assemble rings in ascending ``orderIndex`` under a shared rotation."""

    def assemble(
        self,
        wheel: WheelDefinition,
        positions_by_layer: Mapping[str, LayerPositions],
        aspects: Iterable[Aspect] = (),
        object_filter: Iterable[str] | None = None,
    ) -> AssembledWheel:
        allowed = {obj.lower() for obj in object_filter} if object_filter else None
        rings = wheel.ordered_rings()
        for ring in rings:
            self._check_ring(ring, positions_by_layer)

        primary = self._primary_layer(wheel, rings, positions_by_layer)
        houses = positions_by_layer[primary].houses if primary is not None else None
        asc = houses.ascendant if houses is not None and houses.ascendant is not None else 0.0

        assembled: list[AssembledRing] = []
        for ring in rings:
            primitives = self._ring_primitives(ring, positions_by_layer, asc, allowed)
            if primitives is None:
                LOG.info("Skipping ring %s: layer %s has no house data", ring.slug, ring.data_source.layer_id)
                continue
            assembled.append(
                AssembledRing(
                    slug=ring.slug,
                    type=ring.type,
                    label=ring.label,
                    order_index=ring.order_index,
                    radius_inner=ring.radius_inner,
                    radius_outer=ring.radius_outer,
                    layer_id=ring.data_source.layer_id,
                    primitives=tuple(primitives),
                )
            )
        return AssembledWheel(
            name=wheel.name,
            ascendant=asc,
            primary_layer_id=primary,
            rings=tuple(assembled),
            aspects=tuple(aspects),
        )

    @staticmethod
    def _check_ring(ring: Ring, positions_by_layer: Mapping[str, LayerPositions]) -> None:
        expected = _RING_SOURCES.get(ring.type)
        if expected is None:
            raise ValidationError(
                f"ring '{ring.slug}': unknown ring type '{ring.type}'", field="type", value=str(ring.type)
            )
        if ring.data_source.kind is not expected:
            raise ValidationError(
                f"ring '{ring.slug}': {ring.type.value} ring requires a {expected.value} data source",
                field="dataSource.kind",
                value=ring.data_source.kind.value,
            )
        layer_id = ring.data_source.layer_id
        if expected is not DataSourceKind.STATIC_ZODIAC and layer_id not in positions_by_layer:
            raise ValidationError(
                f"ring '{ring.slug}': dataSource references unknown layer '{layer_id}'",
                field="dataSource.layerId",
                value=layer_id,
            )

    @staticmethod
    def _primary_layer(
        wheel: WheelDefinition,
        rings: Sequence[Ring],
        positions_by_layer: Mapping[str, LayerPositions],
    ) -> str | None:
        if wheel.primary_layer_id is not None:
            if wheel.primary_layer_id not in positions_by_layer:
                raise ValidationError(
                    f"wheel: primaryLayerId references unknown layer '{wheel.primary_layer_id}'",
                    field="primaryLayerId",
                    value=wheel.primary_layer_id,
                )
            return wheel.primary_layer_id
        for kind in (DataSourceKind.LAYER_HOUSES, DataSourceKind.LAYER_PLANETS):
            for ring in rings:
                if ring.data_source.kind is kind:
                    return ring.data_source.layer_id
        return None

    def _ring_primitives(
        self,
        ring: Ring,
        positions_by_layer: Mapping[str, LayerPositions],
        asc: float,
        allowed: set[str] | None,
    ) -> list[Primitive] | None:
        if ring.type is RingType.SIGNS:
            return self._signs(asc)
        layer_id = ring.data_source.layer_id or ""
        positions = positions_by_layer[layer_id]
        if ring.type is RingType.HOUSES:
            return self._houses(positions, asc)
        if ring.type is RingType.PLANETS:
            return self._planets(ring, layer_id, positions, asc, allowed)
        if ring.type is RingType.ANGLES:
            return self._angles(positions, asc)
        raise ValidationError(f"ring '{ring.slug}': unknown ring type '{ring.type}'", field="type")

    @staticmethod
    def _signs(asc: float) -> list[Primitive]:
        arcs: list[Primitive] = []
        for idx, sign in enumerate(SIGN_NAMES):
            start = idx * 30.0
            end = start + 30.0
            arcs.append(
                SignArc(
                    index=idx,
                    sign=sign,
                    start_lon=start,
                    end_lon=end % 360.0,
                    start_angle=longitude_to_screen_angle(start, asc),
                    end_angle=longitude_to_screen_angle(end, asc),
                )
            )
        return arcs

    @staticmethod
    def _houses(positions: LayerPositions, asc: float) -> list[Primitive] | None:
        if positions.houses is None:
            return None
        cusps = positions.houses.cusp_list()
        arcs: list[Primitive] = []
        for idx in range(12):
            start = cusps[idx]
            end = cusps[(idx + 1) % 12]
            arcs.append(
                HouseArc(
                    house=idx + 1,
                    start_lon=start,
                    end_lon=end,
                    start_angle=longitude_to_screen_angle(start, asc),
                    end_angle=longitude_to_screen_angle(end, asc),
                )
            )
        return arcs

    @staticmethod
    def _planets(
        ring: Ring,
        layer_id: str,
        positions: LayerPositions,
        asc: float,
        allowed: set[str] | None,
    ) -> list[Primitive]:
        planets = {
            obj: pos for obj, pos in positions.planets.items() if allowed is None or obj in allowed
        }
        placement = stack_glyphs(
            {obj: pos.lon for obj, pos in planets.items()},
            ring.radius_inner,
            ring.radius_outer,
            min_separation_deg=ring.min_separation_deg,
            bands=ring.stack_bands,
        )
        ordered = sorted(planets, key=lambda obj: (norm360(planets[obj].lon), obj))
        glyphs: list[Primitive] = []
        for obj in ordered:
            band, radius = placement[obj]
            lon = norm360(planets[obj].lon)
            glyphs.append(
                GlyphPlacement(
                    object_id=obj,
                    layer_id=layer_id,
                    longitude=lon,
                    angle=longitude_to_screen_angle(lon, asc),
                    radius=radius,
                    band=band,
                    retrograde=planets[obj].retrograde,
                )
            )
        return glyphs

    @staticmethod
    def _angles(positions: LayerPositions, asc: float) -> list[Primitive] | None:
        if positions.houses is None:
            return None
        angles = positions.houses.angles
        return [
            AngleMarker(name=name, longitude=angles[name], angle=longitude_to_screen_angle(angles[name], asc))
            for name in _ANGLE_NAMES
            if name in angles
        ]
