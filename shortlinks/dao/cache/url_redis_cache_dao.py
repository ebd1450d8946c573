"""Redis-backed read-through cache for short URL targets

Entries are plain strings stored with `SET <key> <target> EX <ttl>`, so Redis
itself drops them once their TTL runs out. When Redis is configured with a
`maxmemory-policy` such as `allkeys-lru`, it also provides the size-bounded
eviction.

Every Redis failure is raised as CacheUnavailableError. The cache never PINGs
Redis on construction: an unavailable cache must not stop the service from
starting.

Example:
    >>> cache = URLRedisCacheDAO(redis_host='localhost', prefix='shortlinks:dev')
    >>> cache.set('abc123', 'https://example.com', ttl=60)
    >>> cache.get('abc123')
    'https://example.com'
"""

from typing import Optional

from beartype import beartype

from shortlinks.constants import Defaults
from shortlinks.dao.base import URLCacheBaseDAO
from shortlinks.dao.cache.cache_key_schema import CacheKeySchema
from shortlinks.dao.cache.helpers import handle_cache_error
from shortlinks.dao.redis.mixins import RedisClientMixin


class URLRedisCacheDAO(RedisClientMixin, URLCacheBaseDAO):
    """Redis-based URL cache.

    Attributes (see RedisClientMixin):
        redis (redis.Redis):
            Redis client used to communicate with the cache.
        keys (CacheKeySchema):
            Key schema helper for generating namespaced cache keys.

    Args:
        default_ttl (int):
            TTL in seconds for entries set without an explicit TTL (and the cap for explicit ones).
        prefix (Optional[str]):
            Namespace prefix for all cache keys.
        **redis_kwargs:
            Connection parameters forwarded to RedisClientMixin (redis_host, redis_client, ...).
    """

    key_schema_cls = CacheKeySchema
    healthcheck_on_init = False

    def __init__(self, default_ttl: int = Defaults.CACHE_TTL_SECONDS, prefix: Optional[str] = None, **redis_kwargs):
        RedisClientMixin.__init__(self, prefix=prefix, **redis_kwargs)
        URLCacheBaseDAO.__init__(self, default_ttl)

    @handle_cache_error
    @beartype
    def get(self, shortcode: str) -> str | None:
        return self.redis.get(self.keys.link_target_key(shortcode))

    @handle_cache_error
    @beartype
    def set(self, shortcode: str, target: str, ttl: int | None = None) -> None:
        self.redis.set(self.keys.link_target_key(shortcode), target, ex=self._ttl(ttl))

    @handle_cache_error
    @beartype
    def invalidate(self, shortcode: str) -> None:
        self.redis.delete(self.keys.link_target_key(shortcode))
