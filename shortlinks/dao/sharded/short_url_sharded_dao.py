"""Hash-partitioned mapping store

ShortURLShardedDAO spreads mappings across several backing DAOs (usually one
ShortURLRedisDAO per Redis instance). The shard of a shortcode is derived from
its xxHash64 digest, so every worker routes the same shortcode to the same
shard without coordination.

The global counter must stay a single atomic integer, so it is always owned by
the first shard.

Example:
    >>> dao = ShortURLShardedDAO([ShortURLRedisDAO(redis_host='redis-a'), ShortURLRedisDAO(redis_host='redis-b')])
    >>> dao.shard_index('abc123') in (0, 1)
    True
    >>> dao.insert(ShortURLModel(target='https://example.com', shortcode='abc123'))
    <ShortURLShardedDAO>
"""

import logging
from collections.abc import Sequence
from datetime import datetime

import xxhash
from beartype import beartype

from shortlinks.models import ShortURLModel
from shortlinks.dao.base import ShortURLBaseDAO


logger = logging.getLogger(__name__)


class ShortURLShardedDAO(ShortURLBaseDAO):
    """Route each shortcode to one of several backing DAOs by hash.

    Args:
        shards (Sequence[ShortURLBaseDAO]):
            Backing DAOs. Order matters: it defines the routing and shard 0 owns the counter.
            Changing the number or order of shards re-routes existing shortcodes.
    """

    def __init__(self, shards: Sequence[ShortURLBaseDAO]):
        if not shards:
            raise ValueError('ShortURLShardedDAO needs at least one shard.')
        self.shards = tuple(shards)

    def shard_index(self, shortcode: str) -> int:
        return xxhash.xxh64_intdigest(shortcode) % len(self.shards)

    def shard_for(self, shortcode: str) -> ShortURLBaseDAO:
        return self.shards[self.shard_index(shortcode)]

    @beartype
    def insert(self, short_url: ShortURLModel, **kwargs) -> 'ShortURLShardedDAO':
        self.shard_for(short_url.shortcode).insert(short_url, **kwargs)
        return self

    @beartype
    def get(self, shortcode: str, **kwargs) -> ShortURLModel | None:
        return self.shard_for(shortcode).get(shortcode, **kwargs)

    @beartype
    def exists(self, shortcode: str, **kwargs) -> bool:
        return self.shard_for(shortcode).exists(shortcode, **kwargs)

    @beartype
    def delete(self, shortcode: str, **kwargs) -> bool:
        return self.shard_for(shortcode).delete(shortcode, **kwargs)

    @beartype
    def reap_expired(self, now: datetime | None = None, **kwargs) -> list[str]:
        reaped = []
        for index, shard in enumerate(self.shards):
            shortcodes = shard.reap_expired(now, **kwargs)
            logger.debug('Reaped shard.', extra={'shard': index, 'reaped': len(shortcodes)})
            reaped.extend(shortcodes)
        return reaped

    def count(self, increment: bool = False, **kwargs) -> int:
        return self.shards[0].count(increment=increment, **kwargs)
