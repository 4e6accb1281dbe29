import pytest

from homelab.services.cache import (
    COMMUNITY_POSTS_TTL,
    FAVICON_TTL,
    FEED_ENTRIES_TTL,
    TTLCache,
)


class TestTTLCache:
    def test_get_missing_key_returns_none(self, clock):
        cache = TTLCache(60, clock=clock)
        assert cache.get("example.com") is None

    def test_get_returns_value_within_ttl(self, clock):
        cache = TTLCache(60, clock=clock)
        cache.put("example.com", b"icon")
        clock.advance(59.9)
        assert cache.get("example.com") == b"icon"

    def test_entry_is_stale_once_ttl_elapsed(self, clock):
        cache = TTLCache(60, clock=clock)
        cache.put("example.com", b"icon")
        clock.advance(60)
        assert cache.get("example.com") is None

    def test_stale_entry_stays_until_overwritten(self, clock):
        cache = TTLCache(60, clock=clock)
        cache.put("example.com", b"old")
        clock.advance(120)

        assert cache.get("example.com") is None
        assert "example.com" in cache
        assert len(cache) == 1

        cache.put("example.com", b"new")
        assert cache.get("example.com") == b"new"
        assert len(cache) == 1

    def test_put_resets_fetch_time(self, clock):
        cache = TTLCache(60, clock=clock)
        cache.put("k", 1)
        clock.advance(50)
        cache.put("k", 2)
        clock.advance(50)
        assert cache.get("k") == 2

    def test_empty_list_is_a_hit(self, clock):
        cache = TTLCache(60, clock=clock)
        cache.put("feed-1", [])
        assert cache.get("feed-1") == []

    def test_evicts_least_recently_used(self, clock):
        cache = TTLCache(60, max_entries=2, clock=clock)
        cache.put("a", 1)
        cache.put("b", 2)
        cache.get("a")
        cache.put("c", 3)

        assert len(cache) == 2
        assert "b" not in cache
        assert cache.get("a") == 1
        assert cache.get("c") == 3

    def test_instances_are_independent(self, clock):
        favicons = TTLCache(FAVICON_TTL, clock=clock)
        feeds = TTLCache(FEED_ENTRIES_TTL, clock=clock)
        favicons.put("same-key", "icon")
        assert feeds.get("same-key") is None

    def test_rejects_non_positive_capacity(self):
        with pytest.raises(ValueError):
            TTLCache(60, max_entries=0)


def test_resource_ttls():
    assert FAVICON_TTL == 86400
    assert FEED_ENTRIES_TTL == 900
    assert COMMUNITY_POSTS_TTL == 600
