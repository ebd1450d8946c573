from shortlinks.dao.redis.redis_key_schema import RedisKeySchema
from shortlinks.dao.redis.mixins import RedisClientMixin
from shortlinks.dao.redis.short_url_redis_dao import ShortURLRedisDAO


__all__ = [
    'RedisKeySchema',
    'RedisClientMixin',
    'ShortURLRedisDAO',
]
