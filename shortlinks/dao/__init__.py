from shortlinks.dao.base import ShortURLBaseDAO, URLCacheBaseDAO
from shortlinks.dao.memory import ShortURLMemoryDAO
from shortlinks.dao.redis import ShortURLRedisDAO
from shortlinks.dao.sharded import ShortURLShardedDAO
from shortlinks.dao.cache import URLMemoryCacheDAO, URLRedisCacheDAO, URLElastiCacheDAO


__all__ = [
    'ShortURLBaseDAO',
    'URLCacheBaseDAO',
    'ShortURLMemoryDAO',
    'ShortURLRedisDAO',
    'ShortURLShardedDAO',
    'URLMemoryCacheDAO',
    'URLRedisCacheDAO',
    'URLElastiCacheDAO',
]
