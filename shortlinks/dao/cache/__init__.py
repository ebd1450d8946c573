from shortlinks.dao.cache.cache_key_schema import CacheKeySchema
from shortlinks.dao.cache.url_memory_cache_dao import URLMemoryCacheDAO
from shortlinks.dao.cache.url_redis_cache_dao import URLRedisCacheDAO
from shortlinks.dao.cache.mixins import ElastiCacheClientMixin, URLElastiCacheDAO


__all__ = [
    'CacheKeySchema',
    'URLMemoryCacheDAO',
    'URLRedisCacheDAO',
    'ElastiCacheClientMixin',
    'URLElastiCacheDAO',
]
