"""Tests for covhealth.utils.cache."""

from __future__ import annotations

import pytest

from covhealth.utils.cache import MemoryCache


class TestMemoryCache:
    def test_put_and_get(self) -> None:
        cache: MemoryCache[str] = MemoryCache()
        cache.put("web#1", "v1")
        assert cache.get("web#1") == "v1"

    def test_get_missing_returns_none(self) -> None:
        cache: MemoryCache[str] = MemoryCache()
        assert cache.get("missing") is None
        assert cache.misses == 1

    def test_invalid_max_size(self) -> None:
        with pytest.raises(ValueError, match="max_size"):
            MemoryCache(max_size=0)

    def test_lru_eviction(self) -> None:
        cache: MemoryCache[int] = MemoryCache(max_size=3)
        cache.put("a", 1)
        cache.put("b", 2)
        cache.put("c", 3)
        # Access "a" to make it most-recently-used
        cache.get("a")
        # Adding "d" should evict "b" (oldest after "a" was refreshed)
        cache.put("d", 4)
        assert cache.get("b") is None
        assert cache.get("a") == 1
        assert cache.get("c") == 3
        assert cache.get("d") == 4

    def test_put_overwrites_existing(self) -> None:
        cache: MemoryCache[str] = MemoryCache()
        cache.put("k1", "old")
        cache.put("k1", "new")
        assert cache.get("k1") == "new"
        assert cache.size == 1


class TestGetOrCompute:
    def test_computes_once(self) -> None:
        cache: MemoryCache[int] = MemoryCache()
        calls: list[int] = []

        def _compute() -> int:
            calls.append(1)
            return 42

        assert cache.get_or_compute("web#1", _compute) == 42
        assert cache.get_or_compute("web#1", _compute) == 42
        assert len(calls) == 1
        assert (cache.hits, cache.misses) == (1, 1)

    def test_caches_none_values(self) -> None:
        cache: MemoryCache[int | None] = MemoryCache()
        calls: list[int] = []

        def _compute() -> None:
            calls.append(1)

        cache.get_or_compute("web#1", _compute)
        cache.get_or_compute("web#1", _compute)
        assert len(calls) == 1

    def test_hit_refreshes_recency(self) -> None:
        cache: MemoryCache[int] = MemoryCache(max_size=2)
        cache.put("a", 1)
        cache.put("b", 2)
        cache.get_or_compute("a", lambda: 0)
        cache.put("c", 3)
        assert cache.get("a") == 1
        assert cache.get("b") is None
