"""Tests for the in-memory TTL cache."""

from datetime import UTC, datetime, timedelta

from food_journal.services.cache import InMemoryCache


class FakeClock:
    def __init__(self) -> None:
        self.now = datetime(2026, 1, 1, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now


def test_entries_expire() -> None:
    clock = FakeClock()
    cache = InMemoryCache(clock=clock)
    cache.set("k", "v", ttl_seconds=10)

    assert cache.get("k") == "v"
    clock.now += timedelta(seconds=10)
    assert cache.get("k") is None


def test_size_cap_evicts_soonest_expiring_entry() -> None:
    cache = InMemoryCache(max_entries=2, clock=FakeClock())
    cache.set("short", 1, ttl_seconds=5)
    cache.set("long", 2, ttl_seconds=500)

    cache.set("new", 3, ttl_seconds=50)

    assert cache.get("short") is None
    assert cache.get("long") == 2
    assert cache.get("new") == 3


def test_invalidate_by_prefix() -> None:
    cache = InMemoryCache(clock=FakeClock())
    cache.set("fdc:search:rice", [], ttl_seconds=60)
    cache.set("fdc:food:1", {}, ttl_seconds=60)

    assert cache.invalidate("fdc:search:") == 1
    assert cache.get("fdc:food:1") == {}
    assert cache.invalidate() == 1
