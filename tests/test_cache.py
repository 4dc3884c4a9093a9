"""Test the directory cache."""

import pytest
from pathy_lsp.cache import DirectoryCache, DirEntry


class FakeClock:
    """Manually advanced time source."""

    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


def listing(*names):
    return [DirEntry(name, name.endswith("/")) for name in names]


class TestDirectoryCache:
    """Tests for DirectoryCache."""

    def test_insert_then_get(self, clock):
        cache = DirectoryCache(ttl=0.5, max_entries=4, clock=clock)
        items = listing("a", "b/")
        cache.insert("/d", items)

        assert cache.get("/d") == items

    def test_get_returns_copy(self, clock):
        cache = DirectoryCache(ttl=0.5, max_entries=4, clock=clock)
        cache.insert("/d", listing("a"))

        cache.get("/d").append(DirEntry("zzz", False))
        assert cache.get("/d") == listing("a")

    def test_miss(self, clock):
        cache = DirectoryCache(ttl=0.5, max_entries=4, clock=clock)
        assert cache.get("/missing") is None

    def test_ttl_expiry(self, clock):
        cache = DirectoryCache(ttl=0.5, max_entries=4, clock=clock)
        cache.insert("/d", listing("a"))

        clock.advance(0.5)
        assert cache.get("/d") is not None  # age == ttl is still valid

        clock.advance(0.01)
        assert cache.get("/d") is None
        assert "/d" not in cache

    def test_expired_entry_still_counts_until_read(self, clock):
        cache = DirectoryCache(ttl=0.5, max_entries=4, clock=clock)
        cache.insert("/d", listing("a"))
        clock.advance(10)
        assert len(cache) == 1

    def test_reinsert_replaces(self, clock):
        cache = DirectoryCache(ttl=0.5, max_entries=4, clock=clock)
        cache.insert("/d", listing("a"))
        cache.insert("/d", listing("b"))

        assert len(cache) == 1
        assert cache.get("/d") == listing("b")

    def test_capacity_evicts_least_recent(self, clock):
        cache = DirectoryCache(ttl=5, max_entries=2, clock=clock)
        cache.insert("/a", listing("1"))
        cache.insert("/b", listing("2"))
        cache.insert("/c", listing("3"))

        assert len(cache) == 2
        assert "/a" not in cache
        assert cache.directories() == ["/c", "/b"]

    def test_get_refreshes_recency(self, clock):
        cache = DirectoryCache(ttl=5, max_entries=2, clock=clock)
        cache.insert("/a", listing("1"))
        cache.insert("/b", listing("2"))
        cache.get("/a")
        cache.insert("/c", listing("3"))

        assert "/a" in cache
        assert "/b" not in cache

    def test_capacity_never_exceeded(self, clock):
        cache = DirectoryCache(ttl=5, max_entries=3, clock=clock)
        for i in range(20):
            cache.insert(f"/d{i % 7}", listing(str(i)))
            assert len(cache) <= 3

    def test_update_limits_shrinks(self, clock):
        cache = DirectoryCache(ttl=5, max_entries=4, clock=clock)
        for name in ("/a", "/b", "/c", "/d"):
            cache.insert(name, listing("x"))

        cache.update_limits(ttl=5, max_entries=2)
        assert cache.directories() == ["/d", "/c"]

    def test_update_limits_keeps_timestamps(self, clock):
        """A shorter TTL applies to old entries on their next read."""
        cache = DirectoryCache(ttl=5, max_entries=4, clock=clock)
        cache.insert("/a", listing("x"))
        clock.advance(1)

        cache.update_limits(ttl=0.5, max_entries=4)
        assert "/a" in cache
        assert cache.get("/a") is None

    def test_zero_capacity(self, clock):
        cache = DirectoryCache(ttl=5, max_entries=0, clock=clock)
        cache.insert("/a", listing("x"))
        assert len(cache) == 0
        assert cache.get("/a") is None
