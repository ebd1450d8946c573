"""Data Access Object (DAO) implementation for managing shortened URLs in Redis

This module provides a Redis-based implementation of ShortURLBaseDAO for CRUD-like
operations with ShortURLModel instances.

Responsibilities:
    - Insert, retrieve and delete short URLs in Redis;
    - Increment the global counter (atomic INCR);
    - Index expiring mappings and reap them once expired;
    - Retire deleted and expired shortcodes permanently;
    - Translate Redis failures into DAO exceptions.

Data layout (see RedisKeySchema):
    <prefix>:links:<shortcode>  HASH  target, created_at, expires_at (epoch seconds, '' = never)
    <prefix>:links:expiry       ZSET  shortcode -> expires_at epoch seconds
    <prefix>:links:retired      SET   retired shortcodes
    <prefix>:links:counter      STR   global counter

Classes:
    ShortURLRedisDAO:
        DAO for storing and retrieving ShortURLModel in a Redis datastore.

Example:
    >>> from shortlinks.models import ShortURLModel
    >>> from shortlinks.dao.redis import ShortURLRedisDAO

    >>> dao = ShortURLRedisDAO(prefix="app:dev")

    >>> short_url = ShortURLModel(
    ...     target="https://example.com/page",
    ...     shortcode="abc123"
    ... )
    >>> dao.insert(short_url)
    <ShortURLRedisDAO>

    >>> retrieved = dao.get("abc123")
    >>> retrieved.target
    'https://example.com/page'
    >>> dao.delete("abc123")
    True
    >>> dao.exists("abc123")  # retired
    True
"""

from datetime import datetime

import redis
from beartype import beartype

from shortlinks.models import ShortURLModel
from shortlinks.dao.base import ShortURLBaseDAO
from shortlinks.dao.redis.mixins import RedisClientMixin
from shortlinks.dao.redis.helpers import handle_redis_connection_error
from shortlinks.dao.exceptions import ShortURLAlreadyExistsError, DataStoreError
from shortlinks.utils.helpers import utc_now, to_epoch, from_epoch


class ShortURLRedisDAO(RedisClientMixin, ShortURLBaseDAO):
    """Redis-based Data Access Object (DAO) for managing short URL mappings

    This class implements the ShortURLBaseDAO interface using Redis as a data store.

    Attributes (see RedisClientMixin):
        redis (redis.Redis):
            Redis client used to communicate with the Redis datastore.
        keys (RedisKeySchema):
            Key schema helper for generating namespaced Redis keys.

    Methods:
        insert(short_url: ShortURLModel, **kwargs) -> ShortURLRedisDAO:
            Insert a short URL mapping (WATCH/MULTI, so the existence check is atomic).
            Raises ShortURLAlreadyExistsError when the shortcode is live or retired.
            Raises DataStoreError on connectivity issues with Redis.

        get(shortcode: str, **kwargs) -> ShortURLModel | None:
            Retrieve a live short URL mapping by shortcode, None if missing or expired.

        exists(shortcode: str, **kwargs) -> bool:
            True if the shortcode has a mapping or is retired.

        delete(shortcode: str, **kwargs) -> bool:
            Delete and retire a mapping. Idempotent.

        reap_expired(now: datetime | None = None, **kwargs) -> list[str]:
            Delete and retire all expired mappings.

        count(increment: bool = False, **kwargs) -> int:
            Retrieve (and optionally increment) the global URL counter.
    """

    MAX_REAP_ATTEMPTS = 5

    @staticmethod
    def _serialize(short_url: ShortURLModel) -> dict[str, str | float]:
        return {
            'target': short_url.target,
            'created_at': to_epoch(short_url.created_at),
            'expires_at': '' if short_url.expires_at is None else to_epoch(short_url.expires_at),
        }

    @staticmethod
    def _deserialize(shortcode: str, fields: dict[str, str]) -> ShortURLModel:
        expires_at = fields.get('expires_at')
        return ShortURLModel(
            target=fields['target'],
            shortcode=shortcode,
            created_at=from_epoch(fields['created_at']),
            expires_at=from_epoch(expires_at) if expires_at else None,
        )

    @handle_redis_connection_error
    @beartype
    def insert(self, short_url: ShortURLModel, **kwargs) -> 'ShortURLRedisDAO':
        """Insert a short URL mapping into Redis

        The link key is WATCHed while its existence (and the retired set) is
        checked, then the mapping and its expiry index entry are written in a
        MULTI/EXEC transaction. If another client touches the link key in
        between, EXEC aborts and the insert is reported as a duplicate.

        Args:
            short_url (ShortURLModel):
                ShortURLModel instance representing the shortened URL mapping.
            **kwargs:
                Optional keyword arguments (for future use).

        Returns:
            ShortURLRedisDAO: self (for method chaining)

        Raises:
            ShortURLAlreadyExistsError:
                If a short URL with the same shortcode already exists or was retired.
            DataStoreError:
                If a Redis connection issue occurs during the transaction.
        """
        shortcode = short_url.shortcode
        link_key = self.keys.link_key(shortcode)

        # NOTE: Without WATCH two concurrent inserts of the same shortcode could
        #       both pass the existence check before either writes:
        #
        #       (worker 1): EXISTS <app>:links:<shortcode>  => 0
        #       (worker 2): EXISTS <app>:links:<shortcode>  => 0
        #       (worker 1): HSET <app>:links:<shortcode> target <url 1> ...
        #       (worker 2): HSET <app>:links:<shortcode> target <url 2> ...  => url 1 silently lost
        #
        #       With WATCH, worker 2's EXEC fails with WatchError instead.
        with self.redis.pipeline(transaction=True) as pipe:
            try:
                pipe.watch(link_key)
                if pipe.exists(link_key) or pipe.sismember(self.keys.retired_key(), shortcode):
                    raise ShortURLAlreadyExistsError(f"Short URL with code '{shortcode}' already exists.")

                pipe.multi()
                pipe.hset(link_key, mapping=self._serialize(short_url))
                if short_url.expires_at is not None:
                    pipe.zadd(self.keys.expiry_index_key(), {shortcode: to_epoch(short_url.expires_at)})
                pipe.execute()
            except redis.exceptions.WatchError as e:
                raise ShortURLAlreadyExistsError(f"Short URL with code '{shortcode}' was created concurrently.") from e
        return self

    @handle_redis_connection_error
    @beartype
    def get(self, shortcode: str, **kwargs) -> ShortURLModel | None:
        """Retrieve a stored short URL mapping by shortcode

        Args:
            shortcode (str):
                The shortcode identifier for the shortened URL.
            **kwargs:
                Optional keyword arguments (for future use).

        Returns:
            ShortURLModel | None:
                The retrieved ShortURLModel if found and not expired, otherwise None.

        Raises:
            DataStoreError:
                If Redis connectivity issues occur.

        Example:
            >>> dao.get('abc123')
            ShortURLModel(target='https://example.com', shortcode='abc123', ...)
        """
        fields = self.redis.hgetall(self.keys.link_key(shortcode))
        if not fields:
            return None

        short_url = self._deserialize(shortcode, fields)
        # Expired mappings stay physically present until the next reaper sweep
        if short_url.is_expired():
            return None
        return short_url

    @handle_redis_connection_error
    @beartype
    def exists(self, shortcode: str, **kwargs) -> bool:
        with self.redis.pipeline(transaction=True) as pipe:
            pipe.exists(self.keys.link_key(shortcode))
            pipe.sismember(self.keys.retired_key(), shortcode)
            link_exists, retired = pipe.execute()
        return bool(link_exists) or bool(retired)

    @handle_redis_connection_error
    @beartype
    def delete(self, shortcode: str, **kwargs) -> bool:
        """Delete a short URL mapping and retire its shortcode

        Deleting a shortcode which has no mapping is a no-op (the shortcode is
        not retired, so it stays available as a custom alias).

        Returns:
            bool: True if a mapping was removed, False otherwise.

        Raises:
            DataStoreError:
                If Redis connectivity issues occur.
        """
        link_key = self.keys.link_key(shortcode)

        with self.redis.pipeline(transaction=True) as pipe:
            try:
                pipe.watch(link_key)
                if not pipe.exists(link_key):
                    return False

                pipe.multi()
                pipe.delete(link_key)
                pipe.zrem(self.keys.expiry_index_key(), shortcode)
                pipe.sadd(self.keys.retired_key(), shortcode)
                pipe.execute()
            except redis.exceptions.WatchError:
                # A concurrent delete or reaper sweep removed the mapping first
                return False
        return True

    @handle_redis_connection_error
    @beartype
    def reap_expired(self, now: datetime | None = None, **kwargs) -> list[str]:
        """Delete and retire every expired short URL mapping

        The expiry index is WATCHed while the due shortcodes are read, then the
        link hashes, their index entries and the retired set are updated in a
        single MULTI/EXEC transaction. A failed sweep leaves the index intact,
        so the next sweep finds the same shortcodes again. If another client
        changes the index in between (an insert, a delete or another reaper),
        the sweep re-reads it.

        Args:
            now (datetime | None):
                Reference moment. Defaults to the current UTC time.

        Returns:
            list[str]: Shortcodes of the reaped mappings.

        Raises:
            DataStoreError:
                If Redis connectivity issues occur, or the expiry index keeps
                changing for `MAX_REAP_ATTEMPTS` attempts in a row.
        """
        deadline = to_epoch(now or utc_now())
        expiry_index_key = self.keys.expiry_index_key()

        for _ in range(self.MAX_REAP_ATTEMPTS):
            with self.redis.pipeline(transaction=True) as pipe:
                try:
                    pipe.watch(expiry_index_key)
                    shortcodes = pipe.zrangebyscore(expiry_index_key, '-inf', deadline)
                    if not shortcodes:
                        return []

                    pipe.multi()
                    pipe.delete(*(self.keys.link_key(shortcode) for shortcode in shortcodes))
                    pipe.zrem(expiry_index_key, *shortcodes)
                    pipe.sadd(self.keys.retired_key(), *shortcodes)
                    pipe.execute()
                except redis.exceptions.WatchError:
                    continue
            return list(shortcodes)

        raise DataStoreError(f'Expiry index changed during {self.MAX_REAP_ATTEMPTS} consecutive reap attempts.')

    @handle_redis_connection_error
    def count(self, increment: bool = False, **kwargs) -> int:
        """Retrieve global short URL counter

        Args:
            increment (bool):
                If True, atomically increments the counter (INCR). Otherwise, retrieves its value.
            **kwargs:
                Optional keyword arguments.

        Returns:
            int:
                The updated or current global counter value.

        Example:
            >>> dao.count(increment=False)
            123
            >>> dao.count(increment=True)
            124
        """
        if increment:
            return int(self.redis.incr(self.keys.counter_key()))
        else:
            return int(self.redis.get(self.keys.counter_key()) or 0)
