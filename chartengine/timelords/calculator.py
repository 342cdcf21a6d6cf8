"""Generalized cyclic proportional subdivision of period systems."""

from __future__ import annotations

import logging
import math
from datetime import datetime
from fractions import Fraction

from ..exceptions import CalculationError
from ..timeutils import ensure_utc
from .models import LEVEL_NAMES, DashaPeriod, years_to_timedelta
from .systems import PeriodSystem, get_period_system

__all__ = ["MAX_DEPTH", "active_periods", "compute_periods", "starting_position"]

LOG = logging.getLogger(__name__)

MAX_DEPTH = max(LEVEL_NAMES)


def starting_position(system: PeriodSystem, longitude: float) -> tuple[int, Fraction, str]:
    """Return ``(span_index, fraction_elapsed, lord)`` for ``longitude``."""

    exact = Fraction(float(longitude) % 360.0) / system.span_degrees
    whole = math.floor(exact)
    return whole % system.span_count, exact - whole, system.span_lords[whole % system.span_count]


def _build(
    system: PeriodSystem,
    reference: datetime,
    lord: str,
    depth: int,
    offset: Fraction,
    duration: Fraction,
    max_depth: int,
) -> DashaPeriod:
    children: list[DashaPeriod] = []
    if depth < max_depth:
        cursor = offset
        cycle = system.cycle_years
        for child_lord in system.rotation(lord):
            child_duration = duration * system.years[child_lord] / cycle
            children.append(
                _build(system, reference, child_lord, depth + 1, cursor, child_duration, max_depth)
            )
            cursor += child_duration
    return DashaPeriod(
        lord=lord,
        system=system.name,
        depth=depth,
        start=reference + years_to_timedelta(offset, system.year_days),
        end=reference + years_to_timedelta(offset + duration, system.year_days),
        duration_years=duration,
        offset_years=offset,
        children=tuple(children),
    )


def compute_periods(
    reference_instant: datetime,
    reference_longitude: float,
    system: str | PeriodSystem,
    max_depth: int,
    *,
    horizon_years: float | Fraction | None = None,
) -> DashaPeriod:
    """Return the root of the period tree for ``system``.

    The first top-level period is the balance of the lord ruling the span
    that ``reference_longitude`` falls in; subsequent periods cycle through
    the lords until ``horizon_years`` (default: one full cycle) is covered.
    ``max_depth`` counts levels below the root, 1 meaning top level only.
    """

    descriptor = system if isinstance(system, PeriodSystem) else get_period_system(system)
    if isinstance(max_depth, bool) or not isinstance(max_depth, int):
        raise CalculationError("max_depth must be an integer", max_depth=max_depth)
    if max_depth < 1 or max_depth > MAX_DEPTH:
        raise CalculationError(
            f"max_depth must be between 1 and {MAX_DEPTH}",
            max_depth=max_depth,
            system=descriptor.name,
        )
    if not math.isfinite(reference_longitude):
        raise CalculationError(
            "Reference longitude must be finite",
            longitude=reference_longitude,
            system=descriptor.name,
        )
    horizon = descriptor.cycle_years if horizon_years is None else Fraction(horizon_years)
    if horizon <= 0:
        raise CalculationError("horizon_years must be positive", horizon_years=horizon_years)

    reference = ensure_utc(reference_instant)
    index, fraction, lord = starting_position(descriptor, reference_longitude)
    LOG.debug(
        "%s periods from span %d (%.4f elapsed) ruled by %s",
        descriptor.name,
        index,
        float(fraction),
        lord,
    )

    top: list[DashaPeriod] = []
    cursor = Fraction(0)
    lord_index = descriptor.lords.index(lord)
    duration = (1 - fraction) * descriptor.years[lord]
    while cursor < horizon:
        current = descriptor.lords[lord_index % len(descriptor.lords)]
        if top:
            duration = descriptor.years[current]
        top.append(_build(descriptor, reference, current, 1, cursor, duration, max_depth))
        cursor += duration
        lord_index += 1

    return DashaPeriod(
        lord=descriptor.name,
        system=descriptor.name,
        depth=0,
        start=reference,
        end=reference + years_to_timedelta(cursor, descriptor.year_days),
        duration_years=cursor,
        offset_years=Fraction(0),
        children=tuple(top),
    )


def active_periods(root: DashaPeriod, moment: datetime) -> list[DashaPeriod]:
    """Return the chain of periods (top level first) containing ``moment``."""

    chain: list[DashaPeriod] = []
    node = root
    while node.children:
        current = next((child for child in node.children if child.contains(moment)), None)
        if current is None:
            break
        chain.append(current)
        node = current
    return chain
