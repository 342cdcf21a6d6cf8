"""Wheel layout and chart specification generation."""

from .assembler import (
    AngleMarker,
    AssembledRing,
    AssembledWheel,
    GlyphPlacement,
    HouseArc,
    SignArc,
    WheelAssembler,
    stack_glyphs,
)
from .chartspec import ChartSpec, ChartSpecGenerator, ChartTheme, Point, Shape, Stroke
from .geometry import longitude_to_screen_angle, pol2cart
from .wheel import (
    DataSource,
    DataSourceKind,
    Ring,
    RingType,
    WheelDefinition,
    default_wheel,
    load_wheel_definition,
    load_wheel_file,
)

__all__ = [
    "AngleMarker",
    "AssembledRing",
    "AssembledWheel",
    "ChartSpec",
    "ChartSpecGenerator",
    "ChartTheme",
    "DataSource",
    "DataSourceKind",
    "GlyphPlacement",
    "HouseArc",
    "Point",
    "Ring",
    "RingType",
    "Shape",
    "SignArc",
    "Stroke",
    "WheelAssembler",
    "WheelDefinition",
    "default_wheel",
    "load_wheel_definition",
    "load_wheel_file",
    "longitude_to_screen_angle",
    "pol2cart",
    "stack_glyphs",
]
