"""chartengine package bootstrap and public API surface."""

from __future__ import annotations

import logging
from importlib.metadata import PackageNotFoundError, version as _get_version

from .aspects import Aspect, AspectEngine
from .cache import ResultCache, request_fingerprint
from .config import ChartSettings, ServiceConfig, SettingsOverride, merge_settings
from .exceptions import (
    CalculationError,
    ChartEngineError,
    EphemerisError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from .layers import LayerContext, resolve_layers
from .schemas import PositionDataset, RenderRequest
from .service import ChartRender, ChartService, build_service
from .timelords import DashaPeriod, compute_periods
from .visual import ChartSpec, ChartSpecGenerator, WheelAssembler, WheelDefinition

LOG = logging.getLogger(__name__)

try:
    __version__ = _get_version("chartengine")
except PackageNotFoundError:  # pragma: no cover - running from a source checkout
    __version__ = "0.0.0"


def get_version() -> str:
    """Return the resolved chartengine package version."""

    return __version__


__all__ = [
    "__version__",
    "Aspect",
    "AspectEngine",
    "CalculationError",
    "ChartEngineError",
    "ChartRender",
    "ChartService",
    "ChartSettings",
    "ChartSpec",
    "ChartSpecGenerator",
    "DashaPeriod",
    "EphemerisError",
    "InternalError",
    "LayerContext",
    "NotFoundError",
    "PositionDataset",
    "RenderRequest",
    "ResultCache",
    "ServiceConfig",
    "SettingsOverride",
    "ValidationError",
    "WheelAssembler",
    "WheelDefinition",
    "build_service",
    "compute_periods",
    "get_version",
    "merge_settings",
    "request_fingerprint",
    "resolve_layers",
]
