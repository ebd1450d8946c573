"""Abstract base class for read-through URL cache DAOs.

The cache only ever holds `shortcode -> target` pairs copied from the mapping
store, each with a bounded time-to-live. It is never the source of truth:
callers treat CacheUnavailableError as a cache miss.
"""

from abc import ABC, abstractmethod


class URLCacheBaseDAO(ABC):
    """Interface for read-through URL caches.

    Methods:
        get(shortcode: str) -> str | None:
            Cached target for a short code, None on miss or after the entry's TTL.

        set(shortcode: str, target: str, ttl: int | None = None) -> None:
            Insert or overwrite an entry. ttl defaults to the cache's default TTL.

        invalidate(shortcode: str) -> None:
            Drop an entry early. Invalidating a missing entry is not an error.

    All methods raise CacheUnavailableError when the backend cannot be reached.
    """

    def __init__(self, default_ttl: int):
        if default_ttl <= 0:
            raise ValueError(f'Default cache TTL must be a positive integer (given value: {default_ttl}).')
        self.default_ttl = default_ttl

    def _ttl(self, ttl: int | None) -> int:
        # Cap explicit TTLs by the default so no entry outlives the configured bound
        return self.default_ttl if ttl is None else min(int(ttl), self.default_ttl)

    @abstractmethod
    def get(self, shortcode: str) -> str | None:
        pass

    @abstractmethod
    def set(self, shortcode: str, target: str, ttl: int | None = None) -> None:
        pass

    @abstractmethod
    def invalidate(self, shortcode: str) -> None:
        pass
