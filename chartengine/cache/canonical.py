"""Canonical request fingerprints for the result cache."""
from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Any, Dict, Mapping

import orjson

from ..config.settings import ChartSettings
from ..schemas import LayerConfig, Location, RenderRequest, Subject

__all__ = ["CanonicalPayload", "canonicalize_request", "make_cache_key", "request_fingerprint"]

_NAMESPACE = "ephemeris"


@dataclass(frozen=True)
class CanonicalPayload:
    payload: Mapping[str, Any]
    serialized: bytes
    digest: str


def _float_key(value: float) -> str:
    # Exact bit pattern; no two distinct doubles share a key.
    return float(value).hex()


def _normalize_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {str(key): _normalize_value(value[key]) for key in sorted(value, key=str)}
    if isinstance(value, (list, tuple)):
        return [_normalize_value(v) for v in value]
    if isinstance(value, bool) or value is None or isinstance(value, str):
        return value
    if isinstance(value, float):
        return _float_key(value)
    if isinstance(value, int):
        return value
    return str(value)


def _location(location: Location | None) -> Dict[str, str] | None:
    if location is None:
        return None
    return {"lat": _float_key(location.lat), "lon": _float_key(location.lon)}


def _subject(subject: Subject) -> Dict[str, Any]:
    return {
        "id": subject.id,
        "birthDateTime": subject.birth_date_time,
        "birthTimezone": subject.birth_timezone,
        "location": _location(subject.location),
    }


def _layer(config: LayerConfig) -> Dict[str, Any]:
    return {
        "kind": config.kind.strip().lower(),
        "subjectId": config.subject_id,
        "explicitDateTime": config.explicit_date_time,
        "location": _location(config.location),
    }


def _settings(settings: ChartSettings) -> Dict[str, Any]:
    period = settings.period_config
    return {
        "zodiacType": settings.zodiac_type,
        "houseSystem": settings.house_system.strip().lower(),
        "ayanamsa": settings.ayanamsa,
        "includeObjects": list(settings.include_objects),
        "orbSettings": _normalize_value(settings.orb_settings.as_mapping()),
        "vedicConfig": _normalize_value(period.model_dump()) if period is not None else None,
    }


def canonicalize_request(request: RenderRequest, settings: ChartSettings) -> Dict[str, Any]:
    """Return the canonical document describing everything a dataset depends on.

    Subjects are keyed by id and layers by layer id so the document does not
    depend on input ordering.
    """

    return {
        "subjects": {subject.id: _subject(subject) for subject in request.subjects},
        "layers": {layer_id: _layer(config) for layer_id, config in request.layer_config.items()},
        "settings": _settings(settings),
        "override": _normalize_value(request.settings_override),
    }


def make_cache_key(namespace: str, payload: Mapping[str, Any]) -> CanonicalPayload:
    serialized = orjson.dumps(payload, option=orjson.OPT_SORT_KEYS)
    digest = hashlib.sha256(serialized).hexdigest()
    return CanonicalPayload(payload=dict(payload), serialized=serialized, digest=f"{namespace}:v1:{digest}")


def request_fingerprint(request: RenderRequest, settings: ChartSettings) -> str:
    """Content-addressed key ``ephemeris:v1:<sha256>`` for ``request``."""

    return make_cache_key(_NAMESPACE, canonicalize_request(request, settings)).digest
