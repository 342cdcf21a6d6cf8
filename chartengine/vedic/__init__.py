"""Vedic chart annotations: divisional charts and yogas."""

from .varga import (
    VARGA_CODES,
    VARGA_DEFINITIONS,
    VargaDefinition,
    VargaPlacement,
    build_varga_layers,
    normalize_varga_code,
    varga_placement,
)
from .yogas import YogaResult, identify_yogas

__all__ = [
    "VARGA_CODES",
    "VARGA_DEFINITIONS",
    "VargaDefinition",
    "VargaPlacement",
    "YogaResult",
    "build_varga_layers",
    "identify_yogas",
    "normalize_varga_code",
    "varga_placement",
]
