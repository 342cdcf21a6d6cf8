"""Bounded in-process cache for computed position datasets."""
from __future__ import annotations

import copy
import logging
import threading
from typing import Any, Callable, Generic, TypeVar

from cachetools import LRUCache

from ..observability import RESULT_CACHE_EVICTIONS, RESULT_CACHE_HITS, RESULT_CACHE_MISSES

__all__ = ["ResultCache"]

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class _CountingLRU(LRUCache):
    """``LRUCache`` that reports capacity evictions."""

    def __init__(self, maxsize: int, name: str) -> None:
        super().__init__(maxsize=maxsize)
        self._name = name

    def popitem(self) -> tuple[Any, Any]:
        key, value = super().popitem()
        RESULT_CACHE_EVICTIONS.labels(cache=self._name).inc()
        _LOGGER.debug("Evicted %s from %s cache", key, self._name)
        return key, value


class ResultCache(Generic[T]):
    """Fingerprint-keyed LRU cache with capacity-only eviction.

    The lock guards lookups and inserts only; ``compute`` runs outside it, so
    two concurrent misses on the same fingerprint both compute and the last
    insert wins. Values are stored and returned as deep copies.
    """

    def __init__(self, maxsize: int = 1000, *, name: str = "positions") -> None:
        if maxsize < 1:
            raise ValueError("maxsize must be at least 1")
        self.name = name
        self._entries: LRUCache = _CountingLRU(maxsize, name)
        self._lock = threading.Lock()

    @property
    def maxsize(self) -> int:
        return int(self._entries.maxsize)

    def get(self, fingerprint: str) -> T | None:
        with self._lock:
            value = self._entries.get(fingerprint)
        return None if value is None else copy.deepcopy(value)

    def put(self, fingerprint: str, value: T) -> None:
        snapshot = copy.deepcopy(value)
        with self._lock:
            self._entries[fingerprint] = snapshot

    def get_or_compute(self, fingerprint: str, compute: Callable[[], T]) -> T:
        cached = self.get(fingerprint)
        if cached is not None:
            RESULT_CACHE_HITS.labels(cache=self.name).inc()
            _LOGGER.debug("Cache hit for %s", fingerprint)
            return cached
        RESULT_CACHE_MISSES.labels(cache=self.name).inc()
        _LOGGER.debug("Cache miss for %s", fingerprint)
        value = compute()
        self.put(fingerprint, value)
        return copy.deepcopy(value)

    async def aget_or_compute(self, fingerprint: str, compute: Callable[[], Any]) -> T:
        """Async variant where ``compute`` returns an awaitable."""

        cached = self.get(fingerprint)
        if cached is not None:
            RESULT_CACHE_HITS.labels(cache=self.name).inc()
            _LOGGER.debug("Cache hit for %s", fingerprint)
            return cached
        RESULT_CACHE_MISSES.labels(cache=self.name).inc()
        _LOGGER.debug("Cache miss for %s", fingerprint)
        value = await compute()
        self.put(fingerprint, value)
        return copy.deepcopy(value)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, fingerprint: object) -> bool:
        with self._lock:
            return fingerprint in self._entries
