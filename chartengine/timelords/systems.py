"""Period-system descriptors and the built-in registry."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from fractions import Fraction

from ..exceptions import CalculationError

__all__ = [
    "ASHTOTTARI",
    "NAKSHATRA_NAMES",
    "PERIOD_SYSTEMS",
    "PeriodSystem",
    "VIMSHOTTARI",
    "YOGINI",
    "get_period_system",
    "register_period_system",
]

NAKSHATRA_NAMES: tuple[str, ...] = (
    "Ashwini",
    "Bharani",
    "Krittika",
    "Rohini",
    "Mrigashira",
    "Ardra",
    "Punarvasu",
    "Pushya",
    "Ashlesha",
    "Magha",
    "Purva Phalguni",
    "Uttara Phalguni",
    "Hasta",
    "Chitra",
    "Swati",
    "Vishakha",
    "Anuradha",
    "Jyeshtha",
    "Mula",
    "Purva Ashadha",
    "Uttara Ashadha",
    "Shravana",
    "Dhanishta",
    "Shatabhisha",
    "Purva Bhadrapada",
    "Uttara Bhadrapada",
    "Revati",
)

NAKSHATRA_SPAN = Fraction(360, 27)
YEAR_DAYS = Fraction(36525, 100)


@dataclass(frozen=True)
class PeriodSystem:
    """Parameters of a cyclic proportional-subdivision period system.

    ``lords`` is the canonical cycle order and ``years`` the per-lord share of
    the cycle. ``span_lords[i]`` is the lord ruling the ``i``-th
    ``span_degrees``-wide slice of the ecliptic.
    """

    name: str
    lords: tuple[str, ...]
    years: Mapping[str, Fraction]
    span_degrees: Fraction
    span_lords: tuple[str, ...]
    year_days: Fraction = YEAR_DAYS

    def __post_init__(self) -> None:
        if set(self.years) != set(self.lords):
            raise ValueError(f"{self.name}: years table must cover exactly the lords")
        unknown = set(self.span_lords) - set(self.lords)
        if unknown:
            raise ValueError(f"{self.name}: span table references unknown lords {sorted(unknown)}")
        if self.span_degrees * len(self.span_lords) != 360:
            raise ValueError(f"{self.name}: spans must tile the full circle")

    @property
    def cycle_years(self) -> Fraction:
        return sum(self.years.values(), Fraction(0))

    @property
    def span_count(self) -> int:
        return len(self.span_lords)

    def rotation(self, start: str) -> list[str]:
        """Return the lords in canonical order beginning at ``start``."""

        idx = self.lords.index(start)
        return [self.lords[(idx + step) % len(self.lords)] for step in range(len(self.lords))]


def _build(
    name: str,
    table: Sequence[tuple[str, int]],
    span_lords: Sequence[str],
) -> PeriodSystem:
    return PeriodSystem(
        name=name,
        lords=tuple(lord for lord, _ in table),
        years={lord: Fraction(years) for lord, years in table},
        span_degrees=NAKSHATRA_SPAN,
        span_lords=tuple(span_lords),
    )


_VIMSHOTTARI_TABLE: tuple[tuple[str, int], ...] = (
    ("ketu", 7),
    ("venus", 20),
    ("sun", 6),
    ("moon", 10),
    ("mars", 7),
    ("rahu", 18),
    ("jupiter", 16),
    ("saturn", 19),
    ("mercury", 17),
)

VIMSHOTTARI = _build(
    "vimshottari",
    _VIMSHOTTARI_TABLE,
    [_VIMSHOTTARI_TABLE[idx % 9][0] for idx in range(27)],
)

_YOGINI_TABLE: tuple[tuple[str, int], ...] = (
    ("Mangala", 1),
    ("Pingala", 2),
    ("Dhanya", 3),
    ("Bhramari", 4),
    ("Bhadrika", 5),
    ("Ulka", 6),
    ("Siddha", 7),
    ("Sankata", 8),
)

# Nakshatra number (1-based) plus 3, modulo 8, selects the yogini.
YOGINI = _build(
    "yogini",
    _YOGINI_TABLE,
    [_YOGINI_TABLE[(idx + 3) % 8][0] for idx in range(27)],
)

_ASHTOTTARI_TABLE: tuple[tuple[str, int], ...] = (
    ("sun", 6),
    ("moon", 15),
    ("mars", 8),
    ("mercury", 17),
    ("saturn", 10),
    ("jupiter", 19),
    ("rahu", 12),
    ("venus", 21),
)

# Consecutive nakshatra groups starting from Ardra.
_ASHTOTTARI_GROUPS: tuple[tuple[str, int], ...] = (
    ("sun", 4),
    ("moon", 3),
    ("mars", 4),
    ("mercury", 3),
    ("saturn", 3),
    ("jupiter", 3),
    ("rahu", 4),
    ("venus", 3),
)


def _ashtottari_span_lords() -> list[str]:
    lords = [""] * 27
    cursor = NAKSHATRA_NAMES.index("Ardra")
    for lord, count in _ASHTOTTARI_GROUPS:
        for _ in range(count):
            lords[cursor % 27] = lord
            cursor += 1
    return lords


ASHTOTTARI = _build("ashtottari", _ASHTOTTARI_TABLE, _ashtottari_span_lords())

PERIOD_SYSTEMS: dict[str, PeriodSystem] = {
    system.name: system for system in (VIMSHOTTARI, YOGINI, ASHTOTTARI)
}


def register_period_system(system: PeriodSystem) -> None:
    """Add ``system`` to the registry, replacing any system of the same name."""

    PERIOD_SYSTEMS[system.name] = system


def get_period_system(name: str) -> PeriodSystem:
    key = (name or "").strip().lower()
    system = PERIOD_SYSTEMS.get(key)
    if system is None:
        raise CalculationError(
            f"Unknown period system '{name}'",
            system=name,
            known=sorted(PERIOD_SYSTEMS),
        )
    return system
