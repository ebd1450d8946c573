"""Service wiring: build stores, caches, resolvers and reapers from configuration

Functions:
    build_store(config, prefix=None) -> ShortURLBaseDAO
        Mapping store selected by `store_backend` (and `shards`).
    build_cache(config, prefix=None) -> URLCacheBaseDAO | None
        Read-through cache selected by `cache_backend`.
    build_resolver(config=None, prefix=None) -> URLResolver
        Resolver wired with store, cache and generator.
    build_reaper(resolver, config) -> ExpiredLinkReaper
        Background reaper on the configured interval.

Example:
    >>> config = ShortenerConfig(store_backend='memory', cache_backend='memory')
    >>> resolver = build_resolver(config)
    >>> resolver.resolve(resolver.shorten('https://example.com'))
    'https://example.com'
"""

import logging

from shortlinks.constants import StoreBackend, CacheBackend
from shortlinks.dao.base import ShortURLBaseDAO, URLCacheBaseDAO
from shortlinks.dao.memory import ShortURLMemoryDAO
from shortlinks.dao.redis import ShortURLRedisDAO
from shortlinks.dao.sharded import ShortURLShardedDAO
from shortlinks.dao.cache import URLMemoryCacheDAO, URLRedisCacheDAO, URLElastiCacheDAO
from shortlinks.generators import build_generator
from shortlinks.reaper import ExpiredLinkReaper
from shortlinks.resolver import URLResolver
from shortlinks.types import RedisConnectionParams
from shortlinks.utils.config import ShortenerConfig, load_config, app_prefix


logger = logging.getLogger(__name__)


def _redis_kwargs(params: RedisConnectionParams) -> dict:
    # {'host': ..., 'port': ...} -> {'redis_host': ..., 'redis_port': ...}
    return {f'redis_{k}': v for k, v in params.items()}


def build_store(config: ShortenerConfig, prefix: str | None = None) -> ShortURLBaseDAO:
    if config.store_backend is StoreBackend.MEMORY:
        return ShortURLMemoryDAO()

    if config.shards:
        shards = [
            ShortURLRedisDAO(**_redis_kwargs(shard), redis_socket_timeout=config.store_timeout_seconds, prefix=prefix)
            for shard in config.shards
        ]
        logger.debug('Built sharded Redis store.', extra={'shards': len(shards)})
        return ShortURLShardedDAO(shards)

    return ShortURLRedisDAO(**_redis_kwargs(config.redis), redis_socket_timeout=config.store_timeout_seconds, prefix=prefix)


def build_cache(config: ShortenerConfig, prefix: str | None = None) -> URLCacheBaseDAO | None:
    match config.cache_backend:
        case CacheBackend.NONE:
            return None
        case CacheBackend.MEMORY:
            return URLMemoryCacheDAO(
                default_ttl=config.cache_ttl_seconds,
                eviction_policy=config.cache_eviction_policy,
                max_entries=config.cache_max_entries,
            )
        case CacheBackend.REDIS:
            return URLRedisCacheDAO(
                default_ttl=config.cache_ttl_seconds,
                prefix=prefix,
                redis_socket_timeout=config.cache_timeout_seconds,
                **_redis_kwargs(config.cache_connection),
            )
        case CacheBackend.ELASTICACHE:
            return URLElastiCacheDAO(
                default_ttl=config.cache_ttl_seconds,
                prefix=prefix,
                redis_socket_timeout=config.cache_timeout_seconds,
            )


def build_resolver(config: ShortenerConfig | None = None, prefix: str | None = None) -> URLResolver:
    """Build a fully wired URLResolver.

    Args:
        config (ShortenerConfig | None):
            Configuration. Loaded with load_config() when None.
        prefix (str | None):
            Key namespace. Defaults to app_prefix().

    Raises:
        BadConfigurationError / MissingEnvironmentVariableError:
            If the configuration cannot be loaded or is invalid.
        DataStoreError:
            If a Redis store fails its healthcheck.
    """
    if config is None:
        config = ShortenerConfig.from_mapping(load_config())
    if prefix is None:
        prefix = app_prefix()

    dao = build_store(config, prefix)
    cache = build_cache(config, prefix)
    logger.info(
        'Built resolver.',
        extra={
            'storeBackend': config.store_backend.value,
            'cacheBackend': config.cache_backend.value,
            'codeStrategy': config.code_strategy.value,
        },
    )
    return URLResolver(
        dao,
        cache=cache,
        generator=build_generator(config, dao),
        cache_ttl=config.cache_ttl_seconds,
        default_link_ttl_seconds=config.default_link_ttl_seconds,
        max_insert_attempts=config.max_random_retries,
    )


def build_reaper(resolver: URLResolver, config: ShortenerConfig) -> ExpiredLinkReaper:
    return ExpiredLinkReaper(resolver, interval_seconds=config.reap_interval_seconds)
