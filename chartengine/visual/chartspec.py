"""Absolute-coordinate chart specifications built from an assembled wheel."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field, fields, is_dataclass
from typing import Any, Union

from ..aspects.engine import Aspect
from ..exceptions import ValidationError
from .assembler import AngleMarker, AssembledRing, AssembledWheel, GlyphPlacement, HouseArc, SignArc
from .geometry import pol2cart

__all__ = [
    "Arc",
    "AspectLine",
    "ChartSpec",
    "ChartSpecGenerator",
    "ChartTheme",
    "Circle",
    "HouseSegment",
    "Line",
    "Path",
    "PlanetGlyph",
    "Point",
    "Shape",
    "SignSegment",
    "Stroke",
    "Text",
]


# ---------------------------------------------------------------------------
# Shapes


@dataclass(frozen=True, slots=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True, slots=True)
class Stroke:
    color: str
    width: float = 1.0


@dataclass(frozen=True, slots=True)
class Circle:
    kind: str = field(default="circle", init=False)
    center: Point
    radius: float
    stroke: Stroke | None = None
    fill: str | None = None


@dataclass(frozen=True, slots=True)
class Arc:
    kind: str = field(default="arc", init=False)
    center: Point
    radius: float
    start_angle: float
    end_angle: float
    stroke: Stroke


@dataclass(frozen=True, slots=True)
class Line:
    kind: str = field(default="line", init=False)
    start: Point
    end: Point
    stroke: Stroke


@dataclass(frozen=True, slots=True)
class Text:
    kind: str = field(default="text", init=False)
    position: Point
    content: str
    size: float
    color: str
    anchor: str = "middle"


@dataclass(frozen=True, slots=True)
class PlanetGlyph:
    kind: str = field(default="planet_glyph", init=False)
    object_id: str
    layer_id: str
    position: Point
    size: float
    color: str
    retrograde: bool = False


@dataclass(frozen=True, slots=True)
class AspectLine:
    kind: str = field(default="aspect_line", init=False)
    start: Point
    end: Point
    aspect_type: str
    orb: float
    stroke: Stroke


@dataclass(frozen=True, slots=True)
class HouseSegment:
    kind: str = field(default="house_segment", init=False)
    house: int
    center: Point
    inner_radius: float
    outer_radius: float
    start_angle: float
    end_angle: float
    stroke: Stroke
    fill: str | None = None


@dataclass(frozen=True, slots=True)
class SignSegment:
    kind: str = field(default="sign_segment", init=False)
    sign: str
    index: int
    center: Point
    inner_radius: float
    outer_radius: float
    start_angle: float
    end_angle: float
    stroke: Stroke
    fill: str | None = None


@dataclass(frozen=True, slots=True)
class Path:
    kind: str = field(default="path", init=False)
    points: tuple[Point, ...]
    stroke: Stroke
    closed: bool = False
    fill: str | None = None


Shape = Union[Circle, Arc, Line, Text, PlanetGlyph, AspectLine, HouseSegment, SignSegment, Path]


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _serialize(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return {_camel(f.name): _serialize(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, (list, tuple)):
        return [_serialize(item) for item in value]
    return value


@dataclass(frozen=True, slots=True)
class ChartSpec:
    width: float
    height: float
    center: Point
    background_color: str
    shapes: tuple[Shape, ...]

    def to_dict(self) -> dict[str, Any]:
        return _serialize(self)


# ---------------------------------------------------------------------------
# Theme


_ASPECT_COLORS = {
    "conjunction": "#ffab91",
    "opposition": "#90caf9",
    "square": "#ef9a9a",
    "trine": "#a5d6a7",
    "sextile": "#ce93d8",
}

# Fire, earth, air, water.
_ELEMENT_FILLS = ("#3b1f1f", "#2a2f1f", "#1f2a33", "#1f233b")

_SIGN_LABELS = ("Ari", "Tau", "Gem", "Can", "Leo", "Vir", "Lib", "Sco", "Sag", "Cap", "Aqu", "Pis")

_ANGLE_LABELS = {"asc": "ASC", "dc": "DC", "mc": "MC", "ic": "IC"}


def _hex_color(value: str) -> str:
    text = value.strip()
    if not text.startswith("#"):
        text = f"#{text}"
    digits = text[1:]
    if len(digits) not in (3, 6, 8) or any(ch not in "0123456789abcdefABCDEF" for ch in digits):
        raise ValidationError(f"invalid hex color '{value}'", field="theme", value=value)
    return text.lower()


@dataclass(frozen=True)
class ChartTheme:
    background: str = "#0f1115"
    stroke: str = "#f5f5f5"
    stroke_width: float = 1.0
    text: str = "#f5f5f5"
    glyph: str = "#ffe082"
    glyph_size: float = 14.0
    label_size: float = 11.0
    element_fills: Sequence[str] = _ELEMENT_FILLS
    aspect_colors: Mapping[str, str] = field(default_factory=lambda: dict(_ASPECT_COLORS))

    def __post_init__(self) -> None:
        for name in ("background", "stroke", "text", "glyph"):
            object.__setattr__(self, name, _hex_color(getattr(self, name)))
        object.__setattr__(self, "element_fills", tuple(_hex_color(c) for c in self.element_fills))
        object.__setattr__(
            self, "aspect_colors", {key: _hex_color(c) for key, c in self.aspect_colors.items()}
        )

    @property
    def line(self) -> Stroke:
        return Stroke(color=self.stroke, width=self.stroke_width)

    def aspect_stroke(self, aspect_type: str) -> Stroke:
        return Stroke(color=self.aspect_colors.get(aspect_type, self.stroke), width=self.stroke_width)


# ---------------------------------------------------------------------------
# Generator


class ChartSpecGenerator:
    """Scale an assembled wheel to a canvas and emit the ordered shape list."""

    def __init__(self, theme: ChartTheme | None = None, *, margin_factor: float = 0.95) -> None:
        if not 0.0 < margin_factor <= 1.0:
            raise ValidationError("margin_factor must be in (0, 1]", field="margin_factor", value=margin_factor)
        self.theme = theme or ChartTheme()
        self.margin_factor = margin_factor

    def generate(
        self,
        wheel: AssembledWheel,
        aspects: Iterable[Aspect] | None = None,
        width: float = 800,
        height: float = 800,
    ) -> ChartSpec:
        if width <= 0 or height <= 0:
            raise ValidationError(
                "canvas width and height must be positive", field="canvas", value=(width, height)
            )
        cx, cy = width / 2.0, height / 2.0
        outer = min(width, height) / 2.0 * self.margin_factor
        center = Point(cx, cy)

        shapes: list[Shape] = []
        glyph_points: dict[tuple[str, str], Point] = {}
        for ring in sorted(wheel.rings, key=lambda r: r.order_index):
            shapes.extend(self._ring_shapes(ring, center, outer, glyph_points))

        chosen = wheel.aspects if aspects is None else tuple(aspects)
        for aspect in chosen:
            start = glyph_points.get((aspect.layer_a, aspect.object_a))
            end = glyph_points.get((aspect.layer_b, aspect.object_b))
            if start is None or end is None:
                continue
            shapes.append(
                AspectLine(
                    start=start,
                    end=end,
                    aspect_type=aspect.aspect_type,
                    orb=aspect.orb,
                    stroke=self.theme.aspect_stroke(aspect.aspect_type),
                )
            )
        return ChartSpec(
            width=width,
            height=height,
            center=center,
            background_color=self.theme.background,
            shapes=tuple(shapes),
        )

    def _ring_shapes(
        self,
        ring: AssembledRing,
        center: Point,
        outer: float,
        glyph_points: dict[tuple[str, str], Point],
    ) -> list[Shape]:
        theme = self.theme
        r_in = ring.radius_inner * outer
        r_out = ring.radius_outer * outer
        mid = (r_in + r_out) / 2.0
        shapes: list[Shape] = [
            Circle(center=center, radius=r_out, stroke=theme.line),
            Circle(center=center, radius=r_in, stroke=theme.line),
        ]
        for item in ring.primitives:
            if isinstance(item, SignArc):
                shapes.append(
                    SignSegment(
                        sign=item.sign,
                        index=item.index,
                        center=center,
                        inner_radius=r_in,
                        outer_radius=r_out,
                        start_angle=item.start_angle,
                        end_angle=item.end_angle,
                        stroke=theme.line,
                        fill=theme.element_fills[item.index % len(theme.element_fills)],
                    )
                )
                shapes.append(
                    Text(
                        position=self._point(item.start_angle - 15.0, mid, center),
                        content=_SIGN_LABELS[item.index],
                        size=theme.label_size,
                        color=theme.text,
                    )
                )
            elif isinstance(item, HouseArc):
                shapes.append(
                    HouseSegment(
                        house=item.house,
                        center=center,
                        inner_radius=r_in,
                        outer_radius=r_out,
                        start_angle=item.start_angle,
                        end_angle=item.end_angle,
                        stroke=theme.line,
                    )
                )
                shapes.append(
                    Line(
                        start=self._point(item.start_angle, r_in, center),
                        end=self._point(item.start_angle, r_out, center),
                        stroke=theme.line,
                    )
                )
                span = (item.start_angle - item.end_angle) % 360.0
                shapes.append(
                    Text(
                        position=self._point(item.start_angle - span / 2.0, mid, center),
                        content=str(item.house),
                        size=theme.label_size,
                        color=theme.text,
                    )
                )
            elif isinstance(item, GlyphPlacement):
                point = self._point(item.angle, item.radius * outer, center)
                glyph_points.setdefault((item.layer_id, item.object_id), point)
                shapes.append(
                    PlanetGlyph(
                        object_id=item.object_id,
                        layer_id=item.layer_id,
                        position=point,
                        size=theme.glyph_size,
                        color=theme.glyph,
                        retrograde=item.retrograde,
                    )
                )
                if item.retrograde:
                    shapes.append(
                        Text(
                            position=Point(point.x + theme.glyph_size * 0.6, point.y + theme.glyph_size * 0.6),
                            content="R",
                            size=theme.label_size * 0.8,
                            color=theme.text,
                            anchor="start",
                        )
                    )
            elif isinstance(item, AngleMarker):
                shapes.append(
                    Line(
                        start=self._point(item.angle, r_in, center),
                        end=self._point(item.angle, r_out, center),
                        stroke=Stroke(color=theme.stroke, width=theme.stroke_width * 2.0),
                    )
                )
                shapes.append(
                    Text(
                        position=self._point(item.angle, r_out + theme.label_size, center),
                        content=_ANGLE_LABELS.get(item.name, item.name.upper()),
                        size=theme.label_size,
                        color=theme.text,
                    )
                )
        return shapes

    @staticmethod
    def _point(angle: float, radius: float, center: Point) -> Point:
        x, y = pol2cart(angle, radius, center.x, center.y)
        return Point(x, y)
