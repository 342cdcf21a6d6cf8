"""Error taxonomy shared across the chart computation pipeline."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

__all__ = [
    "CalculationError",
    "ChartEngineError",
    "EphemerisError",
    "InternalError",
    "NotFoundError",
    "ValidationError",
]


class ChartEngineError(Exception):
    """Base class for every error surfaced by the pipeline.

    ``context`` carries the offending field, layer id or value so callers can
    act on the failure without reading logs.
    """

    code = "ERROR"

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context: Mapping[str, Any] = dict(context)

    def to_dict(self) -> dict[str, Any]:
        """Return the error envelope ``{code, message, details}``."""

        return {
            "code": self.code,
            "message": self.message,
            "details": dict(self.context) or None,
        }

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{key}={value!r}" for key, value in self.context.items())
        return f"{self.message} ({details})"


class ValidationError(ChartEngineError):
    """Malformed or out-of-range input."""

    code = "VALIDATION_ERROR"


class CalculationError(ChartEngineError):
    """Gateway or period-system calculation failure."""

    code = "CALCULATION_ERROR"


class EphemerisError(CalculationError):
    """Failure reported by an ephemeris gateway.

    ``kind`` is one of ``invalid_house_system``, ``invalid_ayanamsa``,
    ``calculation_failed`` or ``house_calculation_failed``.
    """

    def __init__(self, message: str, *, kind: str, **context: Any) -> None:
        super().__init__(message, kind=kind, **context)
        self.kind = kind


class NotFoundError(ChartEngineError):
    """A reference (subject, layer) could not be resolved."""

    code = "NOT_FOUND"


class InternalError(ChartEngineError):
    """Unexpected failure, e.g. an unreachable gateway."""

    code = "INTERNAL_ERROR"
