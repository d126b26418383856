"""Tests for the forecast TTL cache."""

import pytest

from tripwx.forecast.cache import ForecastCache
from tripwx.forecast.demo import generate_demo_sample


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sample(rng):
    return generate_demo_sample(rng=rng, timestamp=1_700_000_000)


class TestForecastCache:
    """Test caching behaviour."""

    def test_miss_then_hit(self, clock, sample):
        cache = ForecastCache(ttl=300, clock=clock)
        assert cache.get(48.85, 2.35, 1_700_000_000) is None
        cache.set(48.85, 2.35, 1_700_000_000, sample)
        assert cache.get(48.85, 2.35, 1_700_000_000) is sample
        stats = cache.stats()
        assert stats['hits'] == 1
        assert stats['misses'] == 1
        assert stats['size'] == 1

    def test_key_rounds_coordinates(self, clock, sample):
        cache = ForecastCache(clock=clock)
        cache.set(48.856612, 2.352219, 1_700_000_000, sample)
        assert cache.get(48.85661, 2.35222, 1_700_000_000) is sample
        assert (48.8566, 2.3522, 1_700_000_000) in cache

    def test_different_target_is_different_entry(self, clock, sample):
        cache = ForecastCache(clock=clock)
        cache.set(48.85, 2.35, 1_700_000_000, sample)
        assert cache.get(48.85, 2.35, 1_700_003_600) is None

    def test_expiry(self, clock, sample):
        cache = ForecastCache(ttl=300, clock=clock)
        cache.set(48.85, 2.35, 1_700_000_000, sample)
        clock.advance(299)
        assert cache.get(48.85, 2.35, 1_700_000_000) is sample
        clock.advance(1)
        assert cache.get(48.85, 2.35, 1_700_000_000) is None
        assert len(cache) == 0

    def test_clear(self, clock, sample):
        cache = ForecastCache(clock=clock)
        cache.set(48.85, 2.35, 1_700_000_000, sample)
        cache.get(48.85, 2.35, 1_700_000_000)
        cache.clear()
        assert len(cache) == 0
        assert cache.stats()['hits'] == 0

    def test_set_evicts_expired_entries(self, clock, sample):
        cache = ForecastCache(ttl=300, clock=clock)
        for i in range(1000):
            cache.set(48.85, 2.35, 1_700_000_000 + i, sample)
            clock.advance(10)
        # only writes within the last 300s survive
        assert len(cache) == 30
        clock.advance(300)
        cache.set(45.76, 4.84, 1_700_000_000, sample)
        assert len(cache) == 1

    def test_evict_expired_keeps_fresh_entries(self, clock, sample):
        cache = ForecastCache(ttl=300, clock=clock)
        cache.set(48.85, 2.35, 1_700_000_000, sample)
        clock.advance(200)
        cache.set(45.76, 4.84, 1_700_000_000, sample)
        clock.advance(150)
        assert cache.evict_expired() == 1
        assert cache.get(45.76, 4.84, 1_700_000_000) is sample
