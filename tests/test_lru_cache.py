import pytest

from statica import LRUCache


def test_lru_cache():
    cache: LRUCache[int, int] = LRUCache(2)

    cache.set(1, 2)
    a = cache.get(1)

    assert a == 2


def test_lru_cache_miss():
    cache: LRUCache[int, int] = LRUCache(2)

    assert cache.get(1) is None


def test_lru_cache_invalid_capacity():
    with pytest.raises(ValueError, match="Capacity must be positive"):
        LRUCache(0)


def test_lru_cache_evicts_least_recently_used():
    cache: LRUCache[int, int] = LRUCache(2)

    cache.set(1, 10)
    cache.set(2, 10)

    cache.get(1)
    cache.set(3, 10)

    assert cache.get(2) is None
    assert cache.get(1) == 10
    assert cache.get(3) == 10


def test_lru_cache_set_refreshes_recency():
    cache: LRUCache[int, int] = LRUCache(2)

    cache.set(1, 10)
    cache.set(2, 10)
    cache.set(1, 20)
    cache.set(3, 10)

    assert cache.get(2) is None
    assert cache.get(1) == 20


def test_lru_cache_capacity_one():
    cache: LRUCache[str, str] = LRUCache(1)

    cache.set("a", "1")
    cache.set("b", "2")

    assert "a" not in cache
    assert cache.get("b") == "2"
    assert len(cache) == 1
