"""Tests for the bounded preload cache."""

import pytest

from player.cache import PreloadCache


class TestPreloadCache:
    def test_fifo_eviction_drops_oldest_insert(self):
        cache = PreloadCache(3)
        for key in ("u1", "u2", "u3", "u4"):
            cache.put(key, key.upper())

        assert cache.keys() == ["u2", "u3", "u4"]
        assert "u1" not in cache
        assert len(cache) == 3

    def test_reads_do_not_refresh_entries(self):
        cache = PreloadCache(2)
        cache.put("a", 1)
        cache.put("b", 2)
        assert cache.get("a") == 1

        cache.put("c", 3)
        assert "a" not in cache
        assert cache.keys() == ["b", "c"]

    def test_duplicate_put_keeps_first_handle(self):
        cache = PreloadCache(3)
        first, second = object(), object()

        assert cache.put("a", first) is True
        assert cache.put("a", second) is False
        assert cache.get("a") is first
        assert len(cache) == 1

    def test_missing_key_returns_none(self):
        assert PreloadCache(1).get("nope") is None

    def test_capacity_one(self):
        cache = PreloadCache(1)
        cache.put("a", 1)
        cache.put("b", 2)
        assert list(cache) == ["b"]

    def test_clear(self):
        cache = PreloadCache(2)
        cache.put("a", 1)
        cache.clear()
        assert len(cache) == 0

    @pytest.mark.parametrize("capacity", [0, -1])
    def test_rejects_non_positive_capacity(self, capacity):
        with pytest.raises(ValueError):
            PreloadCache(capacity)
