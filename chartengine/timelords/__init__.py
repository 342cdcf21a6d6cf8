"""Period-system (dasha) calculations."""

from .calculator import MAX_DEPTH, active_periods, compute_periods, starting_position
from .models import LEVEL_NAMES, DashaPeriod
from .nakshatra import NakshatraPosition, nakshatra_for
from .systems import (
    ASHTOTTARI,
    PERIOD_SYSTEMS,
    VIMSHOTTARI,
    YOGINI,
    PeriodSystem,
    get_period_system,
    register_period_system,
)

__all__ = [
    "ASHTOTTARI",
    "LEVEL_NAMES",
    "MAX_DEPTH",
    "PERIOD_SYSTEMS",
    "VIMSHOTTARI",
    "YOGINI",
    "DashaPeriod",
    "NakshatraPosition",
    "PeriodSystem",
    "active_periods",
    "compute_periods",
    "get_period_system",
    "nakshatra_for",
    "register_period_system",
    "starting_position",
]
