"""Deferred import of the ``swisseph`` extension module."""

from __future__ import annotations

import importlib
import importlib.util
from functools import cache
from typing import Any

from ..exceptions import InternalError

__all__ = ["has_swisseph", "load_swisseph", "swe"]


@cache
def load_swisseph() -> Any:
    try:
        return importlib.import_module("swisseph")
    except ImportError as exc:  # pragma: no cover - depends on the environment
        raise InternalError(
            "Swiss Ephemeris is unavailable; install 'pyswisseph' and point SE_EPHE_PATH at its data files",
            module="swisseph",
        ) from exc


class _SwissEphemeris:
    """Attribute proxy that imports ``swisseph`` on first access."""

    def __call__(self) -> Any:
        return load_swisseph()

    def __getattr__(self, item: str) -> Any:
        return getattr(load_swisseph(), item)


swe = _SwissEphemeris()


def has_swisseph() -> bool:
    return importlib.util.find_spec("swisseph") is not None
