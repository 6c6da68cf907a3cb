# nosec B101


from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

import pytest

from infrastructure.cache.memory_cache import MemoryCache


@pytest.fixture
def cache(clock):
    return MemoryCache(ttl=timedelta(minutes=60), max_size=3, name='test', clock=clock)


# ============================================================================
# TEST: get() / set()
# ============================================================================

def test_set_then_get_returns_value(cache):
    cache.set('usd', {'EUR': 0.95})

    assert cache.get('usd') == {'EUR': 0.95}


def test_get_unknown_key_returns_none(cache):
    assert cache.get('nonexistent') is None


def test_set_existing_key_replaces_value_without_eviction(cache):
    cache.set('a', 1)
    cache.set('b', 2)
    cache.set('c', 3)

    cache.set('a', 10)

    assert cache.get('a') == 10
    assert cache.get('b') == 2
    assert cache.get('c') == 3
    assert cache.stats().evictions == 0


# ============================================================================
# TEST: Size-based eviction
# ============================================================================

def test_inserting_past_max_size_evicts_exactly_one_oldest_entry(cache):
    for key in ('a', 'b', 'c', 'd'):
        cache.set(key, key.upper())

    stats = cache.stats()
    assert stats.evictions == 1
    assert stats.size == 3
    assert cache.get('a') is None
    assert cache.get('b') == 'B'
    assert cache.get('c') == 'C'
    assert cache.get('d') == 'D'


def test_eviction_follows_insertion_order_not_reads(cache):
    cache.set('a', 1)
    cache.set('b', 2)
    cache.set('c', 3)
    cache.get('a')

    cache.set('d', 4)

    assert cache.get('a') is None
    assert len(cache) == 3


def test_reinserted_key_moves_to_back_of_eviction_queue(cache):
    cache.set('a', 1)
    cache.set('b', 2)
    cache.set('c', 3)
    cache.set('a', 1)

    cache.set('d', 4)

    assert cache.get('b') is None
    assert cache.get('a') == 1


def test_max_size_must_be_positive():
    with pytest.raises(ValueError):
        MemoryCache(ttl=timedelta(minutes=1), max_size=0)


# ============================================================================
# TEST: TTL expiry
# ============================================================================

def test_entry_past_ttl_is_a_miss_and_removed(cache, clock):
    cache.set('usd', 'rates')
    clock.advance(timedelta(minutes=60, seconds=1))

    assert cache.get('usd') is None
    assert len(cache) == 0


def test_entry_at_exact_ttl_is_still_served(cache, clock):
    cache.set('usd', 'rates')
    clock.advance(timedelta(minutes=60))

    assert cache.get('usd') == 'rates'


def test_clear_expired_removes_only_stale_entries(cache, clock):
    cache.set('old', 1)
    clock.advance(timedelta(minutes=45))
    cache.set('new', 2)
    clock.advance(timedelta(minutes=30))

    removed = cache.clear_expired()

    assert removed == 1
    assert cache.get('old') is None
    assert cache.get('new') == 2


def test_clear_drops_everything(cache):
    cache.set('a', 1)
    cache.set('b', 2)

    cache.clear()

    assert len(cache) == 0


# ============================================================================
# TEST: Stats and factories
# ============================================================================

def test_stats_track_hits_and_misses(cache):
    cache.set('test', 'value')
    cache.get('test')
    cache.get('nonexistent')

    stats = cache.stats()
    assert stats.hits == 1
    assert stats.misses == 1
    assert stats.hit_rate == 0.5
    assert stats.max_size == 3


def test_hit_rate_is_zero_without_lookups(cache):
    assert cache.stats().hit_rate == 0.0


def test_default_ttl_values():
    countries = MemoryCache.for_countries()
    rates = MemoryCache.for_rates()

    assert countries.ttl == timedelta(hours=24)
    assert countries.max_size == 500
    assert rates.ttl == timedelta(hours=1)
    assert rates.max_size == 1000


def test_concurrent_writers_never_exceed_max_size():
    cache = MemoryCache(ttl=timedelta(minutes=5), max_size=50)

    def write(start):
        for i in range(start, start + 100):
            cache.set(f'key-{i}', i)
            cache.get(f'key-{i}')

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(write, range(0, 800, 100)))

    stats = cache.stats()
    assert stats.size == 50
    assert stats.evictions == 800 - 50
