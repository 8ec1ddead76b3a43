"""
Tests for the freshness-window metadata cache.
"""
from app.cache import DataCategory, MetadataCache


def make_cache(clock, **kwargs):
    return MetadataCache(DataCategory.TEAM_METADATA, freshness_seconds=300, clock=clock, **kwargs)


def test_entry_is_fresh_inside_window(clock):
    cache = make_cache(clock)
    cache.put(1, "a")

    clock.advance(299)
    assert cache.is_fresh(1)

    clock.advance(1)
    assert not cache.is_fresh(1)


def test_stale_entries_remain_readable(clock):
    cache = make_cache(clock)
    cache.put(1, "a")
    clock.advance(3600)

    assert cache.lookup(1) == "a"
    assert not cache.is_fresh(1)


def test_partition_treats_stale_as_missing(clock):
    cache = make_cache(clock)
    cache.put(1, "old")
    clock.advance(400)
    cache.put(2, "new")

    fresh, missing = cache.partition([1, 2, 3, 2, 1])

    assert fresh == [2]
    assert missing == [1, 3]


def test_put_overwrites_and_resets_age(clock):
    cache = make_cache(clock)
    cache.put(1, "a")
    clock.advance(400)
    cache.put(1, "b")

    assert cache.lookup(1) == "b"
    assert cache.is_fresh(1)


def test_unbounded_by_default(clock):
    cache = make_cache(clock)
    for i in range(1000):
        cache.put(i, i)

    assert len(cache) == 1000


def test_max_entries_evicts_least_recently_used(clock):
    cache = make_cache(clock, max_entries=2)
    cache.put(1, "a")
    cache.put(2, "b")
    cache.lookup(1)
    cache.put(3, "c")

    assert cache.lookup(2) is None
    assert cache.lookup(1) == "a"
    assert cache.lookup(3) == "c"
    assert cache.get_stats()["evictions"] == 1


def test_stats_count_fresh_entries(clock):
    cache = make_cache(clock)
    cache.put(1, "a")
    clock.advance(301)
    cache.put(2, "b")

    stats = cache.get_stats()

    assert stats["entries"] == 2
    assert stats["fresh"] == 1
