import pytest

from vocab_core.cache import TTLCache


def test_get_returns_fresh_entries(clock):
    cache = TTLCache(ttl_seconds=300, max_size=5, clock=clock)
    cache.put("Basics", 1)

    clock.advance(299)

    assert cache.get("Basics") == 1
    assert "Basics" in cache


def test_entries_expire_after_ttl(clock):
    cache = TTLCache(ttl_seconds=300, max_size=5, clock=clock)
    cache.put("Basics", 1)

    clock.advance(300)

    assert cache.get("Basics") is None
    assert len(cache) == 0


def test_put_refreshes_timestamp(clock):
    cache = TTLCache(ttl_seconds=300, max_size=5, clock=clock)
    cache.put("Basics", 1)
    clock.advance(200)
    cache.put("Basics", 2)
    clock.advance(200)

    assert cache.get("Basics") == 2


def test_oldest_entry_evicted_when_full(clock):
    cache = TTLCache(ttl_seconds=300, max_size=2, clock=clock)
    cache.put("a", 1)
    cache.put("b", 2)
    cache.put("c", 3)

    assert len(cache) == 2
    assert cache.get("a") is None
    assert cache.get("b") == 2
    assert cache.get("c") == 3


def test_evict_one_or_all(clock):
    cache = TTLCache(clock=clock)
    cache.put("a", 1)
    cache.put("b", 2)

    cache.evict("a")
    assert "a" not in cache
    assert "b" in cache

    cache.evict()
    assert len(cache) == 0


@pytest.mark.parametrize("ttl,size", [(0, 5), (-1, 5), (300, 0)])
def test_invalid_limits_rejected(ttl, size):
    with pytest.raises(ValueError):
        TTLCache(ttl_seconds=ttl, max_size=size)
