"""In-memory TTL cache for resolved weather samples."""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from tripwx.config import CACHE_COORD_DECIMALS, DEFAULT_CACHE_TTL_S
from tripwx.forecast.models import WeatherSample

logger = logging.getLogger(__name__)

CacheKey = Tuple[float, float, int]


@dataclass(frozen=True)
class CacheEntry:
    """A cached sample and the clock reading when it was fetched."""

    sample: WeatherSample
    fetched_at: float


class ForecastCache:
    """
    TTL cache keyed by rounded position and target timestamp.

    The cache is an explicit value handed to the pipeline rather than a
    module global, so tests can inject a fake clock and pre-seeded entries.

    Writes and the expiry sweep share one lock. Two lookups racing
    on the same key may both recompute and the last write wins; entries are
    idempotent for identical inputs.

    Example:
        cache = ForecastCache(ttl=300)
        sample = cache.get(48.85, 2.35, 1700000000)
        if sample is None:
            sample = fetch(...)
            cache.set(48.85, 2.35, 1700000000, sample)
    """

    def __init__(self, ttl: float = DEFAULT_CACHE_TTL_S, clock: Callable[[], float] = time.monotonic):
        """
        Args:
            ttl: Entry lifetime in seconds
            clock: Callable returning the current time in seconds
        """
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[CacheKey, CacheEntry] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    @staticmethod
    def make_key(lat: float, lng: float, timestamp: int) -> CacheKey:
        return (round(lat, CACHE_COORD_DECIMALS), round(lng, CACHE_COORD_DECIMALS), int(timestamp))

    def get(self, lat: float, lng: float, timestamp: int) -> Optional[WeatherSample]:
        """Return a fresh cached sample or None."""
        key = self.make_key(lat, lng, timestamp)
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None
        if self._clock() - entry.fetched_at >= self.ttl:
            self._entries.pop(key, None)
            self._misses += 1
            logger.debug("Cache entry expired for %s", key)
            return None
        self._hits += 1
        logger.debug("Cache hit for %s", key)
        return entry.sample

    def set(self, lat: float, lng: float, timestamp: int, sample: WeatherSample) -> None:
        """Store a sample and evict every expired entry."""
        now = self._clock()
        with self._lock:
            self._evict(now)
            self._entries[self.make_key(lat, lng, timestamp)] = CacheEntry(sample, now)

    def evict_expired(self, now: Optional[float] = None) -> int:
        """
        Remove entries older than the TTL.

        Keys include the target timestamp, so most are written once and never
        read again; sweeping on write keeps the cache bounded.

        Returns:
            Number of entries removed
        """
        if now is None:
            now = self._clock()
        with self._lock:
            return self._evict(now)

    def _evict(self, now: float) -> int:
        expired = [key for key, entry in self._entries.items() if now - entry.fetched_at >= self.ttl]
        for key in expired:
            self._entries.pop(key, None)
        if expired:
            logger.debug("Evicted %d expired cache entries", len(expired))
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
        self._hits = 0
        self._misses = 0

    def stats(self) -> dict:
        """Size, TTL, hit/miss counters and keys currently stored."""
        with self._lock:
            keys = list(self._entries.keys())
        return {
            'size': len(keys),
            'ttl': self.ttl,
            'hits': self._hits,
            'misses': self._misses,
            'keys': keys,
        }

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: CacheKey) -> bool:
        return key in self._entries
