"""Up-front request validation.

Everything checked here fails before any ephemeris work is scheduled, so a
malformed request never reaches the gateway.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from datetime import datetime

from .config.settings import ASPECT_TYPES, ChartSettings, PeriodSystemCfg
from .ephemeris.gateway import VALID_OBJECTS
from .ephemeris.house_systems import VALID_HOUSE_SYSTEMS, resolve_house_code
from .ephemeris.sidereal import VALID_AYANAMSAS, normalize_ayanamsa_name
from .exceptions import NotFoundError, ValidationError
from .layers import LAYER_KINDS
from .schemas import LayerConfig, Location, RenderRequest, Subject
from .timelords import PERIOD_SYSTEMS
from .timeutils import parse_instant
from .vedic import VARGA_CODES, normalize_varga_code

__all__ = [
    "MAX_ORB",
    "MAX_YEAR",
    "MIN_ORB",
    "MIN_YEAR",
    "RequestValidator",
    "validate_orbs",
]

MIN_YEAR = -1000
MAX_YEAR = 3000

MIN_ORB = 0.0
MAX_ORB = 30.0


def validate_orbs(orbs: Mapping[str, float]) -> None:
    """Raise :class:`ValidationError` unless every orb is finite and in range."""

    for name in ASPECT_TYPES:
        value = orbs.get(name)
        if value is None:
            continue
        field = f"orbSettings.{name}"
        if not math.isfinite(value):
            raise ValidationError(f"{field} must be a finite number, got {value}", field=field, value=value)
        if value < MIN_ORB or value > MAX_ORB:
            raise ValidationError(
                f"{field} must be between {MIN_ORB:g} and {MAX_ORB:g} degrees, got {value}",
                field=field,
                value=value,
            )


class RequestValidator:
    """Validate a render request against its effective settings."""

    @classmethod
    def validate_request(cls, request: RenderRequest, settings: ChartSettings | None = None) -> None:
        effective = settings if settings is not None else request.settings
        cls.validate_subjects(request.subjects)
        cls.validate_settings(effective)
        cls.validate_layer_config(request.layer_config, request.subjects)
        if effective.period_config is not None:
            cls.validate_period_config(effective.period_config, request.layer_config)

    @classmethod
    def validate_subjects(cls, subjects: Sequence[Subject]) -> None:
        if not subjects:
            raise ValidationError("At least one subject is required", field="subjects")
        seen: set[str] = set()
        for idx, subject in enumerate(subjects):
            prefix = f"subjects[{idx}]"
            if not subject.id:
                raise ValidationError(f"{prefix}.id cannot be empty", field=f"{prefix}.id")
            if subject.id in seen:
                raise ValidationError(
                    f"Duplicate subject ID: {subject.id}", field=f"{prefix}.id", value=subject.id
                )
            seen.add(subject.id)
            if subject.birth_date_time is not None:
                moment = parse_instant(
                    subject.birth_date_time,
                    field=f"{prefix}.birthDateTime",
                    timezone=subject.birth_timezone,
                )
                cls._validate_date_range(moment, field=f"{prefix}.birthDateTime")
            if subject.location is not None:
                cls._validate_location(subject.location, field=f"{prefix}.location")

    @classmethod
    def validate_settings(cls, settings: ChartSettings) -> None:
        if resolve_house_code(settings.house_system) is None:
            raise ValidationError(
                f"Invalid houseSystem: {settings.house_system}. Valid systems: {list(VALID_HOUSE_SYSTEMS)}",
                field="houseSystem",
                value=settings.house_system,
            )
        if settings.ayanamsa is not None:
            if normalize_ayanamsa_name(settings.ayanamsa) not in VALID_AYANAMSAS:
                raise ValidationError(
                    f"Invalid ayanamsa: {settings.ayanamsa}. Valid ayanamsas: {list(VALID_AYANAMSAS)}",
                    field="ayanamsa",
                    value=settings.ayanamsa,
                )
        elif settings.zodiac_type == "sidereal":
            raise ValidationError("Sidereal zodiac requires an ayanamsa", field="ayanamsa")
        validate_orbs(settings.orb_settings.as_mapping())
        for idx, obj in enumerate(settings.include_objects):
            if obj not in VALID_OBJECTS:
                raise ValidationError(
                    f"Invalid includeObjects[{idx}]: {obj}. Valid objects: {list(VALID_OBJECTS)}",
                    field=f"includeObjects[{idx}]",
                    value=obj,
                )

    @classmethod
    def validate_layer_config(
        cls,
        layer_config: Mapping[str, LayerConfig],
        subjects: Sequence[Subject],
    ) -> None:
        if not layer_config:
            raise ValidationError("At least one layer must be configured", field="layer_config")
        subject_ids = {subject.id for subject in subjects}
        for layer_id in sorted(layer_config):
            config = layer_config[layer_id]
            kind = config.kind.strip().lower()
            if kind not in LAYER_KINDS:
                raise ValidationError(
                    f"Layer '{layer_id}': Invalid kind '{config.kind}'. Valid kinds: {list(LAYER_KINDS)}",
                    layer_id=layer_id,
                    field="kind",
                    value=config.kind,
                )
            if kind == "natal":
                if config.subject_id is None:
                    raise ValidationError(
                        f"Layer '{layer_id}': natal layer must specify a subjectId",
                        layer_id=layer_id,
                        field="subjectId",
                    )
            else:
                if config.explicit_date_time is None:
                    raise ValidationError(
                        f"Layer '{layer_id}': {kind} layer must specify explicitDateTime",
                        layer_id=layer_id,
                        field="explicitDateTime",
                    )
                field = f"layer_config[{layer_id}].explicitDateTime"
                moment = parse_instant(config.explicit_date_time, field=field)
                cls._validate_date_range(moment, field=field)
            if config.subject_id is not None and config.subject_id not in subject_ids:
                raise NotFoundError(
                    f"Layer '{layer_id}': subjectId '{config.subject_id}' not found in subjects",
                    layer_id=layer_id,
                    subject_id=config.subject_id,
                )
            if config.location is not None:
                cls._validate_location(config.location, field=f"layer_config[{layer_id}].location")

    @classmethod
    def validate_period_config(cls, cfg: PeriodSystemCfg, layer_config: Mapping[str, LayerConfig]) -> None:
        for idx, code in enumerate(cfg.vargas):
            if normalize_varga_code(code) not in VARGA_CODES:
                raise ValidationError(
                    f"Invalid vedicConfig.vargas[{idx}]: {code}. Valid vargas: {list(VARGA_CODES)}",
                    field=f"vedicConfig.vargas[{idx}]",
                    value=code,
                )
        if not cfg.include_dashas:
            return
        for idx, name in enumerate(cfg.dasha_systems):
            if name.strip().lower() not in PERIOD_SYSTEMS:
                raise ValidationError(
                    f"Unknown dasha system: {name}. Valid systems: {sorted(PERIOD_SYSTEMS)}",
                    field=f"vedicConfig.dasha_systems[{idx}]",
                    value=name,
                )
        if cfg.dasha_systems and not any(
            config.kind.strip().lower() == "natal" for config in layer_config.values()
        ):
            raise ValidationError("Natal layer required for dasha calculation", field="vedicConfig")

    @staticmethod
    def _validate_location(location: Location, *, field: str) -> None:
        if not math.isfinite(location.lat):
            raise ValidationError(f"{field}: latitude must be a finite number", field=field, value=location.lat)
        if not math.isfinite(location.lon):
            raise ValidationError(f"{field}: longitude must be a finite number", field=field, value=location.lon)
        if not -90.0 <= location.lat <= 90.0:
            raise ValidationError(
                f"{field}: latitude must be between -90 and 90, got {location.lat}",
                field=field,
                value=location.lat,
            )
        if not -180.0 <= location.lon <= 180.0:
            raise ValidationError(
                f"{field}: longitude must be between -180 and 180, got {location.lon}",
                field=field,
                value=location.lon,
            )

    @staticmethod
    def _validate_date_range(moment: datetime, *, field: str) -> None:
        if not MIN_YEAR <= moment.year <= MAX_YEAR:
            raise ValidationError(
                f"Date year {moment.year} is outside valid range ({MIN_YEAR} to {MAX_YEAR})",
                field=field,
                value=moment.year,
            )
