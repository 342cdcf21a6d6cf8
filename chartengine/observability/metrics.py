"""Prometheus metric definitions shared across chartengine components."""

from __future__ import annotations

from collections.abc import Iterable

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram

__all__ = [
    "ASPECTS_MATCHED",
    "GATEWAY_CALL_DURATION",
    "PIPELINE_ERRORS",
    "RESULT_CACHE_EVICTIONS",
    "RESULT_CACHE_HITS",
    "RESULT_CACHE_MISSES",
    "ensure_metrics_registered",
]


RESULT_CACHE_HITS = Counter(
    "chartengine_result_cache_hits_total",
    "Position dataset requests served from the result cache.",
    ("cache",),
    registry=None,
)

RESULT_CACHE_MISSES = Counter(
    "chartengine_result_cache_misses_total",
    "Position dataset requests that required a gateway computation.",
    ("cache",),
    registry=None,
)

RESULT_CACHE_EVICTIONS = Counter(
    "chartengine_result_cache_evictions_total",
    "Entries evicted from the result cache due to capacity.",
    ("cache",),
    registry=None,
)

GATEWAY_CALL_DURATION = Histogram(
    "chartengine_gateway_call_duration_seconds",
    "Duration of a single layer's ephemeris gateway query.",
    ("gateway",),
    registry=None,
)

ASPECTS_MATCHED = Counter(
    "chartengine_aspects_matched_total",
    "Aspects recorded by the aspect engine.",
    ("aspect",),
    registry=None,
)

PIPELINE_ERRORS = Counter(
    "chartengine_pipeline_errors_total",
    "Pipeline failures grouped by error code.",
    ("code",),
    registry=None,
)


def _iter_metrics() -> Iterable[Counter | Histogram]:
    yield RESULT_CACHE_HITS
    yield RESULT_CACHE_MISSES
    yield RESULT_CACHE_EVICTIONS
    yield GATEWAY_CALL_DURATION
    yield ASPECTS_MATCHED
    yield PIPELINE_ERRORS


def ensure_metrics_registered(registry: CollectorRegistry | None = None) -> None:
    """Register the chartengine metrics with ``registry`` (default ``REGISTRY``).

    Safe to call repeatedly; metrics already present are left alone.
    """

    target = registry or REGISTRY
    for metric in _iter_metrics():
        try:
            target.register(metric)
        except ValueError:
            # Duplicate name in the target registry.
            continue
