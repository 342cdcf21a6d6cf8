"""Environment-driven service configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

__all__ = ["ServiceConfig"]


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True, slots=True)
class ServiceConfig:
    """Knobs for a :class:`~chartengine.service.ChartService` deployment."""

    cache_size: int = 1000
    default_wheel_path: Path | None = None
    ephemeris_path: str | None = None
    canvas_size: int = 800
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "ServiceConfig":
        wheel = os.getenv("CHARTENGINE_DEFAULT_WHEEL")
        return cls(
            cache_size=max(1, _env_int("CHARTENGINE_CACHE_SIZE", 1000)),
            default_wheel_path=Path(wheel) if wheel else None,
            ephemeris_path=os.getenv("SE_EPHE_PATH") or None,
            canvas_size=max(1, _env_int("CHARTENGINE_CANVAS_SIZE", 800)),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
