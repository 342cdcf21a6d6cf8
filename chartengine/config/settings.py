"""Chart settings models and the settings-override merge."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ValidationError

__all__ = [
    "ASPECT_TYPES",
    "DASHA_DEPTHS",
    "ChartSettings",
    "OrbOverride",
    "OrbSettings",
    "PeriodSystemCfg",
    "SettingsOverride",
    "merge_settings",
    "pydantic_errors_to_validation",
]

LOG = logging.getLogger(__name__)

ASPECT_TYPES: tuple[str, ...] = ("conjunction", "sextile", "square", "trine", "opposition")

# Depth names accepted by ``PeriodSystemCfg.dashas_depth`` mapped to tree depth.
DASHA_DEPTHS: dict[str, int] = {
    "mahadasha": 1,
    "antardasha": 2,
    "pratyantardasha": 3,
    "sookshma": 4,
    "prana": 5,
}


def pydantic_errors_to_validation(exc: PydanticValidationError, *, prefix: str = "") -> ValidationError:
    """Convert a pydantic error into a :class:`ValidationError` naming the first field."""

    errors = exc.errors()
    first = errors[0] if errors else {}
    loc = ".".join(str(part) for part in first.get("loc", ()))
    field = f"{prefix}.{loc}" if prefix and loc else (prefix or loc)
    message = first.get("msg", "invalid value")
    return ValidationError(
        f"{field}: {message}" if field else message,
        field=field or None,
        value=first.get("input"),
    )


class OrbSettings(BaseModel):
    """Allowed orb (degrees) per major aspect type."""

    model_config = ConfigDict(frozen=True)

    conjunction: float = 8.0
    opposition: float = 8.0
    trine: float = 7.0
    square: float = 6.0
    sextile: float = 4.0

    def as_mapping(self) -> dict[str, float]:
        return {name: float(getattr(self, name)) for name in ASPECT_TYPES}


class PeriodSystemCfg(BaseModel):
    """Optional Vedic configuration: nakshatras, vargas, yogas and dashas."""

    model_config = ConfigDict(frozen=True)

    include_nakshatras: bool = False
    include_angles_in_nakshatra: bool = True
    nakshatra_objects: Optional[list[str]] = None
    vargas: list[str] = Field(default_factory=list)
    include_yogas: bool = False
    include_dashas: bool = False
    dasha_systems: list[str] = Field(default_factory=lambda: ["vimshottari"])
    dashas_depth: str = "pratyantardasha"
    dashas_horizon_years: Optional[float] = None

    @field_validator("dashas_depth")
    @classmethod
    def _known_depth(cls, value: str) -> str:
        key = value.strip().lower()
        if key not in DASHA_DEPTHS:
            raise ValueError(f"unknown dashas_depth '{value}'; expected one of {sorted(DASHA_DEPTHS)}")
        return key

    @property
    def depth(self) -> int:
        return DASHA_DEPTHS[self.dashas_depth]


class ChartSettings(BaseModel):
    """Effective chart settings for a request."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    zodiac_type: Literal["tropical", "sidereal"] = Field("tropical", alias="zodiacType")
    ayanamsa: Optional[str] = None
    house_system: str = Field("placidus", alias="houseSystem")
    orb_settings: OrbSettings = Field(default_factory=OrbSettings, alias="orbSettings")
    include_objects: list[str] = Field(default_factory=list, alias="includeObjects")
    period_config: Optional[PeriodSystemCfg] = Field(None, alias="vedicConfig")

    @field_validator("include_objects")
    @classmethod
    def _lowercase_objects(cls, value: list[str]) -> list[str]:
        return [item.strip().lower() for item in value]


class OrbOverride(BaseModel):
    """Sparse orb override; omitted aspect types keep their base value."""

    model_config = ConfigDict(extra="ignore", strict=True)

    conjunction: Optional[float] = None
    opposition: Optional[float] = None
    trine: Optional[float] = None
    square: Optional[float] = None
    sextile: Optional[float] = None


class SettingsOverride(BaseModel):
    """Strongly typed partial update layered onto :class:`ChartSettings`.

    Unknown keys are ignored. ``ayanamsa`` and ``vedicConfig`` accept
    ``null`` to clear the base value.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", strict=True)

    zodiac_type: Optional[Literal["tropical", "sidereal"]] = Field(None, alias="zodiacType")
    house_system: Optional[str] = Field(None, alias="houseSystem")
    ayanamsa: Optional[str] = None
    orb_settings: Optional[OrbOverride] = Field(None, alias="orbSettings")
    include_objects: Optional[list[str]] = Field(None, alias="includeObjects")
    period_config: Optional[PeriodSystemCfg] = Field(None, alias="vedicConfig")

    @classmethod
    def parse(cls, raw: Mapping[str, Any] | None) -> "SettingsOverride":
        """Validate a loosely typed override map at the boundary."""

        if not raw:
            return cls()
        known = {field.alias or name for name, field in cls.model_fields.items()}
        unknown = sorted(key for key in raw if key not in known)
        if unknown:
            LOG.debug("Ignoring unknown settings override keys: %s", unknown)
        try:
            return cls.model_validate(dict(raw))
        except PydanticValidationError as exc:
            raise pydantic_errors_to_validation(exc, prefix="settings_override") from exc

    def is_empty(self) -> bool:
        return not self.model_fields_set


def merge_settings(base: ChartSettings, override: SettingsOverride) -> ChartSettings:
    """Return ``base`` with every field present in ``override`` applied."""

    present = override.model_fields_set
    if not present:
        return base
    update: dict[str, Any] = {}
    if "zodiac_type" in present and override.zodiac_type is not None:
        update["zodiac_type"] = override.zodiac_type
    if "house_system" in present and override.house_system is not None:
        update["house_system"] = override.house_system
    if "ayanamsa" in present:
        update["ayanamsa"] = override.ayanamsa
    if "orb_settings" in present and override.orb_settings is not None:
        orbs = override.orb_settings.model_dump(exclude_none=True)
        update["orb_settings"] = base.orb_settings.model_copy(update=orbs)
    if "include_objects" in present and override.include_objects is not None:
        update["include_objects"] = [item.strip().lower() for item in override.include_objects]
    if "period_config" in present:
        update["period_config"] = override.period_config
    return base.model_copy(update=update)
