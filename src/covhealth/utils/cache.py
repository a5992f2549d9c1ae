"""Bounded LRU memoisation for values derived from build records."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

_T = TypeVar("_T")


class MemoryCache(Generic[_T]):
    """In-memory LRU cache keyed by build key (``job#number``).

    Relies on ``dict`` insertion order: a hit is moved to the end by
    delete-and-reinsert, and the first key is the eviction candidate.

    Args:
        max_size: Maximum number of entries before LRU eviction.
    """

    def __init__(self, max_size: int = 64) -> None:
        if max_size < 1:
            raise ValueError(f"max_size must be at least 1 (got: {max_size})")
        self._max_size = max_size
        self._store: dict[str, _T] = {}
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> _T | None:
        """Return the cached value or ``None``."""
        if key not in self._store:
            self.misses += 1
            return None
        self.hits += 1
        value = self._store.pop(key)
        self._store[key] = value
        return value

    def put(self, key: str, value: _T) -> None:
        """Store a value, evicting the least recently used entry if at capacity."""
        if key in self._store:
            del self._store[key]
        elif self.size >= self._max_size:
            oldest = next(iter(self._store))
            del self._store[oldest]
            logger.debug("Evicted %s from cache", oldest)
        self._store[key] = value

    def get_or_compute(self, key: str, compute: Callable[[], _T]) -> _T:
        """Return the cached value for *key*, computing and storing it on a miss."""
        if key in self._store:
            self.hits += 1
            cached = self._store.pop(key)
            self._store[key] = cached
            return cached
        self.misses += 1
        value = compute()
        self.put(key, value)
        return value

    @property
    def size(self) -> int:
        return len(self._store)
