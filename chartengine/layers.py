"""Resolve declared layers into concrete ephemeris query contexts."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta

from .config.settings import ChartSettings
from .ephemeris.gateway import DEFAULT_OBJECTS, EphemerisSettings, GeoLocation
from .exceptions import NotFoundError, ValidationError
from .schemas import LayerConfig, Location, Subject
from .timeutils import parse_instant

__all__ = [
    "LAYER_KINDS",
    "PROGRESSION_YEAR_DAYS",
    "LayerContext",
    "ephemeris_settings_for",
    "resolve_layers",
]

LOG = logging.getLogger(__name__)

LAYER_KINDS: tuple[str, ...] = ("natal", "transit", "progressed")

# Day-for-a-year secondary progression.
PROGRESSION_YEAR_DAYS = 365.2422


@dataclass(frozen=True, slots=True)
class LayerContext:
    """Fully concrete inputs for one layer's gateway query."""

    layer_id: str
    kind: str
    moment: datetime
    location: GeoLocation | None
    settings: EphemerisSettings
    subject_id: str | None = None
    target_moment: datetime | None = None

    @property
    def location_model(self) -> Location | None:
        if self.location is None:
            return None
        return Location(lat=self.location.lat, lon=self.location.lon)


def ephemeris_settings_for(settings: ChartSettings) -> EphemerisSettings:
    """Project chart settings onto the fields an ephemeris query depends on."""

    objects = tuple(settings.include_objects) or DEFAULT_OBJECTS
    return EphemerisSettings(
        zodiac_type=settings.zodiac_type,
        house_system=settings.house_system,
        ayanamsa=settings.ayanamsa if settings.zodiac_type == "sidereal" else None,
        include_objects=objects,
    )


def _find_subject(subjects: Sequence[Subject], subject_id: str) -> Subject | None:
    for subject in subjects:
        if subject.id == subject_id:
            return subject
    return None


def _birth_moment(layer_id: str, subject: Subject) -> datetime:
    if not subject.birth_date_time:
        raise ValidationError(
            f"Layer '{layer_id}': subject '{subject.id}' missing 'birthDateTime'",
            layer_id=layer_id,
            subject_id=subject.id,
            field="birthDateTime",
        )
    return parse_instant(
        subject.birth_date_time,
        field=f"subjects[{subject.id}].birthDateTime",
        timezone=subject.birth_timezone,
    )


def _explicit_moment(layer_id: str, config: LayerConfig) -> datetime:
    if not config.explicit_date_time:
        raise ValidationError(
            f"Layer '{layer_id}': {config.kind} layer must specify 'explicitDateTime'",
            layer_id=layer_id,
            field="explicitDateTime",
        )
    return parse_instant(
        config.explicit_date_time,
        field=f"layer_config[{layer_id}].explicitDateTime",
    )


def _progressed_moment(natal: datetime, target: datetime) -> datetime:
    elapsed_days = (target - natal).total_seconds() / 86400.0
    return natal + timedelta(days=elapsed_days / PROGRESSION_YEAR_DAYS)


def _resolve_one(
    layer_id: str,
    config: LayerConfig,
    subjects: Sequence[Subject],
    ephemeris_settings: EphemerisSettings,
) -> LayerContext:
    kind = config.kind.strip().lower()
    if kind not in LAYER_KINDS:
        raise ValidationError(
            f"Layer '{layer_id}': unsupported layer kind '{config.kind}'",
            layer_id=layer_id,
            field="kind",
            value=config.kind,
        )

    subject: Subject | None = None
    if config.subject_id is not None:
        subject = _find_subject(subjects, config.subject_id)
        if subject is None:
            raise NotFoundError(
                f"Layer '{layer_id}': subjectId '{config.subject_id}' not found",
                layer_id=layer_id,
                subject_id=config.subject_id,
            )

    target: datetime | None = None
    if kind == "natal":
        if subject is None:
            raise ValidationError(
                f"Layer '{layer_id}': natal layer must specify a 'subjectId'",
                layer_id=layer_id,
                field="subjectId",
            )
        moment = _birth_moment(layer_id, subject)
    else:
        moment = _explicit_moment(layer_id, config)
        if kind == "progressed" and subject is not None and subject.birth_date_time:
            target = moment
            moment = _progressed_moment(_birth_moment(layer_id, subject), target)

    source = config.location or (subject.location if subject is not None else None)
    location = GeoLocation(lat=source.lat, lon=source.lon) if source is not None else None
    if location is None:
        LOG.debug("Layer %s has no location; houses will be skipped", layer_id)

    return LayerContext(
        layer_id=layer_id,
        kind=kind,
        moment=moment,
        location=location,
        settings=ephemeris_settings,
        subject_id=config.subject_id,
        target_moment=target,
    )


def resolve_layers(
    subjects: Sequence[Subject],
    layer_config: Mapping[str, LayerConfig],
    settings: ChartSettings,
) -> list[LayerContext]:
    """Resolve every configured layer, ordered by layer id.

    Raises :class:`ValidationError` for missing instants, unknown kinds or
    unparsable timestamps and :class:`NotFoundError` for subject references
    that do not resolve.
    """

    if not layer_config:
        raise ValidationError("At least one layer must be configured", field="layer_config")
    ephemeris_settings = ephemeris_settings_for(settings)
    return [
        _resolve_one(layer_id, layer_config[layer_id], subjects, ephemeris_settings)
        for layer_id in sorted(layer_config)
    ]
