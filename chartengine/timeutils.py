"""Timestamp parsing and formatting helpers."""

from __future__ import annotations

from datetime import UTC, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .exceptions import ValidationError

__all__ = ["ensure_utc", "isoformat", "parse_instant"]


def ensure_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None or moment.tzinfo.utcoffset(moment) is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


def parse_instant(value: str, *, field: str, timezone: str | None = None) -> datetime:
    """Parse an ISO-8601 / RFC 3339 timestamp into an aware UTC ``datetime``.

    Naive timestamps are interpreted in ``timezone`` (an IANA name) when
    given, otherwise as UTC. Failures raise :class:`ValidationError` naming
    ``field``.
    """

    text = (value or "").strip()
    if not text:
        raise ValidationError(f"{field}: timestamp must not be empty", field=field, value=value)
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00").replace("z", "+00:00"))
    except ValueError as exc:
        raise ValidationError(
            f"{field}: failed to parse datetime '{value}'", field=field, value=value
        ) from exc
    if parsed.tzinfo is None and timezone:
        try:
            parsed = parsed.replace(tzinfo=ZoneInfo(timezone))
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValidationError(
                f"{field}: unknown timezone '{timezone}'", field=field, value=timezone
            ) from exc
    return ensure_utc(parsed)


def isoformat(moment: datetime) -> str:
    """Return a canonical ISO-8601 string in UTC."""

    return moment.astimezone(UTC).isoformat().replace("+00:00", "Z")
