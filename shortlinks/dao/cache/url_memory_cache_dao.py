"""In-process read-through cache for short URL targets

URLMemoryCacheDAO keeps `shortcode -> target` pairs in a cachetools TLRUCache,
which supports a time-to-live per entry (needed so that an entry never outlives
the mapping it copies) and least-recently-used eviction once the cache is full.

Eviction policies:
    'lru':  at most `max_entries` entries; the least recently used one is evicted first.
    'none': unbounded; entries only disappear when their TTL runs out or on invalidate().

Example:
    >>> cache = URLMemoryCacheDAO(default_ttl=86400, eviction_policy='lru', max_entries=2)
    >>> cache.set('abc123', 'https://example.com')
    >>> cache.get('abc123')
    'https://example.com'
    >>> cache.invalidate('abc123')
    >>> cache.get('abc123') is None
    True
"""

import math
import time
import threading
from collections.abc import Callable

from beartype import beartype
from cachetools import TLRUCache

from shortlinks.constants import Defaults, EvictionPolicy
from shortlinks.dao.base import URLCacheBaseDAO


class URLMemoryCacheDAO(URLCacheBaseDAO):
    """Thread-safe in-memory URL cache with per-entry TTL and optional LRU bound.

    One lock guards the whole TLRUCache, since LRU order and expiry are shared
    across keys. It is held only for the single dictionary operation of each
    call (never across a store read), so callers on unrelated keys wait at most
    for one O(1) lookup, insert or pop.

    Args:
        default_ttl (int):
            TTL in seconds for entries set without an explicit TTL (and the cap for explicit ones).
        eviction_policy (EvictionPolicy | str):
            'lru' (bounded) or 'none' (TTL only). Defaults to 'lru'.
        max_entries (int):
            Size bound used with the 'lru' policy.
        timer (Callable[[], float]):
            Monotonic clock in seconds. Defaults to time.monotonic.
    """

    def __init__(
        self,
        default_ttl: int = Defaults.CACHE_TTL_SECONDS,
        eviction_policy: EvictionPolicy | str = Defaults.CACHE_EVICTION_POLICY,
        max_entries: int = Defaults.CACHE_MAX_ENTRIES,
        timer: Callable[[], float] = time.monotonic,
    ):
        super().__init__(default_ttl)
        self.eviction_policy = EvictionPolicy(eviction_policy)
        if self.eviction_policy is EvictionPolicy.LRU and max_entries <= 0:
            raise ValueError(f'max_entries must be a positive integer for the LRU policy (given value: {max_entries}).')

        maxsize = max_entries if self.eviction_policy is EvictionPolicy.LRU else math.inf
        self._cache = TLRUCache(maxsize=maxsize, ttu=self._time_to_use, timer=timer)
        self._lock = threading.Lock()

    @staticmethod
    def _time_to_use(shortcode: str, entry: tuple[str, int], now: float) -> float:
        _, ttl = entry
        return now + ttl

    def __len__(self) -> int:
        with self._lock:
            self._cache.expire()
            return len(self._cache)

    @beartype
    def get(self, shortcode: str) -> str | None:
        with self._lock:
            try:
                target, _ = self._cache[shortcode]
            except KeyError:
                return None
        return target

    @beartype
    def set(self, shortcode: str, target: str, ttl: int | None = None) -> None:
        with self._lock:
            self._cache[shortcode] = (target, self._ttl(ttl))

    @beartype
    def invalidate(self, shortcode: str) -> None:
        with self._lock:
            self._cache.pop(shortcode, None)
