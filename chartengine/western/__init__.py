"""Western chart annotations: essential dignities and decans."""

from __future__ import annotations

from typing import Any

from ..schemas import LayerPositions
from .decans import DECAN_RULERS, DecanInfo, decan_for
from .dignities import DEFAULT_EXACT_ORB, DignityResult, dignities_for

__all__ = [
    "DECAN_RULERS",
    "DEFAULT_EXACT_ORB",
    "DecanInfo",
    "DignityResult",
    "annotate_layer",
    "decan_for",
    "dignities_for",
]


def annotate_layer(positions: LayerPositions) -> dict[str, Any]:
    """Return ``{"dignities": ..., "decans": ...}`` for one layer's planets.

    Planets holding no dignity are left out of ``dignities``; every planet
    gets a decan.
    """

    dignities: dict[str, list[dict[str, Any]]] = {}
    decans: dict[str, dict[str, Any]] = {}
    for obj, pos in sorted(positions.planets.items()):
        found = dignities_for(obj, pos.lon)
        if found:
            dignities[obj] = [result.to_dict() for result in found]
        decans[obj] = decan_for(pos.lon).to_dict()
    return {"dignities": dignities, "decans": decans}
