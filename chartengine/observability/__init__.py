"""Observability helpers."""

from .metrics import (
    ASPECTS_MATCHED,
    GATEWAY_CALL_DURATION,
    PIPELINE_ERRORS,
    RESULT_CACHE_EVICTIONS,
    RESULT_CACHE_HITS,
    RESULT_CACHE_MISSES,
    ensure_metrics_registered,
)

__all__ = [
    "ASPECTS_MATCHED",
    "GATEWAY_CALL_DURATION",
    "PIPELINE_ERRORS",
    "RESULT_CACHE_EVICTIONS",
    "RESULT_CACHE_HITS",
    "RESULT_CACHE_MISSES",
    "ensure_metrics_registered",
]
