"""
Tests for the Result Cache
==========================
"""

import pytest

from inline_suggest.base import Match, MatchSource
from inline_suggest.cache import ResultCache, make_key


def batch(n):
    return [Match(n, n + 1, "x", "msg", MatchSource.AI_COREFERENCE)]


class TestMakeKey:
    """Tests for cache keys."""

    def test_format(self):
        """Test key format."""
        assert make_key("Hello there", "Maria") == "11:Hello there:Maria"

    def test_prefix_truncated(self):
        """Test prefix truncation in keys."""
        text = "a" * 80
        assert make_key(text, "He") == f"80:{'a' * 50}:He"


class TestResultCache:
    """Tests for the LRU behavior."""

    def test_get_put(self):
        """Test storing and retrieving a batch."""
        cache = ResultCache(2)
        assert cache.get("k") is None
        cache.put("k", batch(1))
        assert cache.get("k") == batch(1)
        assert "k" in cache
        assert cache.stats()['hits'] == 1
        assert cache.stats()['misses'] == 1

    def test_evicts_least_recently_used(self):
        """Test LRU eviction."""
        cache = ResultCache(2)
        cache.put("a", batch(1))
        cache.put("b", batch(2))
        cache.get("a")
        cache.put("c", batch(3))
        assert "a" in cache
        assert "b" not in cache
        assert len(cache) == 2
        assert cache.stats()['evictions'] == 1

    def test_returned_list_is_a_copy(self):
        """Test that callers cannot mutate cached batches."""
        cache = ResultCache(2)
        cache.put("a", batch(1))
        cache.get("a").clear()
        assert cache.get("a") == batch(1)

    def test_invalidate(self):
        """Test invalidation."""
        cache = ResultCache(4)
        cache.put("a", batch(1))
        cache.put("b", batch(2))
        cache.invalidate("a")
        assert "a" not in cache and "b" in cache
        cache.invalidate()
        assert len(cache) == 0

    def test_hit_for_different_text_is_stale(self):
        """Test that a key collision with different text is dropped as a miss."""
        cache = ResultCache(2)
        cache.put("k", batch(1), text="abc")
        assert cache.get("k", "abd") is None
        assert "k" not in cache
        stats = cache.stats()
        assert stats['stale'] == 1
        assert stats['misses'] == 1
        assert stats['hits'] == 0

    def test_hit_for_same_text(self):
        """Test that a stored entry is returned when the text matches."""
        cache = ResultCache(2)
        cache.put("k", batch(1), text="abc")
        assert cache.get("k", "abc") == batch(1)

    def test_capacity_must_be_positive(self):
        """Test capacity validation."""
        with pytest.raises(ValueError):
            ResultCache(0)
