"""Configuration models for chartengine."""

from .runtime import ServiceConfig
from .settings import (
    ASPECT_TYPES,
    DASHA_DEPTHS,
    ChartSettings,
    OrbOverride,
    OrbSettings,
    PeriodSystemCfg,
    SettingsOverride,
    merge_settings,
)

__all__ = [
    "ASPECT_TYPES",
    "DASHA_DEPTHS",
    "ChartSettings",
    "OrbOverride",
    "OrbSettings",
    "PeriodSystemCfg",
    "ServiceConfig",
    "SettingsOverride",
    "merge_settings",
]
