"""Core data structures for period-system (dasha) trees."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from fractions import Fraction
from typing import Any

__all__ = ["DashaPeriod", "LEVEL_NAMES", "years_to_timedelta"]

# Tree depth -> level name; depth 0 is the root wrapping the whole tree.
LEVEL_NAMES: dict[int, str] = {
    0: "root",
    1: "mahadasha",
    2: "antardasha",
    3: "pratyantardasha",
    4: "sookshma",
    5: "prana",
}


def years_to_timedelta(years: Fraction, year_days: Fraction) -> timedelta:
    """Convert an exact year count to a ``timedelta`` rounded to the microsecond."""

    micros = years * year_days * 86_400 * 1_000_000
    return timedelta(microseconds=round(micros))


def _iso(moment: datetime) -> str:
    return moment.astimezone(UTC).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class DashaPeriod:
    """A single period node; ``children`` subdivide it at the next depth.

    ``offset_years`` is the exact distance from the tree's reference instant.
    ``start`` and ``end`` are both derived from exact offsets so a period
    always starts at the instant its predecessor ends.
    """

    lord: str
    system: str
    depth: int
    start: datetime
    end: datetime
    duration_years: Fraction
    offset_years: Fraction = Fraction(0)
    children: tuple["DashaPeriod", ...] = field(default_factory=tuple)

    @property
    def level(self) -> str:
        return LEVEL_NAMES.get(self.depth, f"level{self.depth}")

    def contains(self, moment: datetime) -> bool:
        reference = moment.astimezone(UTC)
        return self.start <= reference < self.end

    def iter_depth(self, depth: int):
        """Yield every descendant (or self) at ``depth`` in chronological order."""

        if self.depth == depth:
            yield self
            return
        for child in self.children:
            yield from child.iter_depth(depth)

    def to_dict(self, *, include_children: bool = True) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "lord": self.lord,
            "system": self.system,
            "level": self.level,
            "depth": self.depth,
            "start": _iso(self.start),
            "end": _iso(self.end),
            "durationYears": float(self.duration_years),
        }
        if include_children and self.children:
            payload["children"] = [child.to_dict() for child in self.children]
        return payload
