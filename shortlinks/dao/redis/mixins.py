"""Redis client mixin shared by the store and cache DAOs.

A DAO built on RedisClientMixin either receives a ready `redis.Redis` client
or the `redis_*` connection parameters to build one. Store DAOs PING Redis on
construction so that a misconfigured store fails at startup; caches opt out
(`healthcheck_on_init = False`), since an unreachable cache only degrades
lookups.

Example:
    >>> class ShortURLRedisDAO(RedisClientMixin, ShortURLBaseDAO):
    ...     pass
    ...
    >>> dao = ShortURLRedisDAO(redis_host='redis', prefix='shortlinks:prod')
    >>> dao.healthcheck()
    True
"""

from typing import Optional

import redis

from shortlinks.dao.redis.redis_key_schema import RedisKeySchema
from shortlinks.dao.redis.helpers import redis_location
from shortlinks.dao.exceptions import DataStoreError


class RedisClientMixin:
    """Redis client setup and connectivity check for Redis-backed DAOs.

    Class attributes:
        key_schema_cls (type):
            Key schema built from `prefix`. Subclasses swap in their own.
        healthcheck_on_init (bool):
            Default for the `healthcheck` constructor argument.

    Attributes:
        redis (redis.Redis):
            Active Redis client.
        keys:
            Instance of `key_schema_cls` for this DAO's namespace.

    Args:
        redis_host, redis_port, redis_db, redis_username, redis_password:
            Connection parameters, ignored when `redis_client` is given.
        redis_decode_responses (bool):
            Return str instead of bytes. Defaults to True.
        redis_socket_timeout (Optional[float]):
            Bound in seconds on connecting and on every command. None waits forever.
        redis_client (Optional[redis.Redis]):
            Pre-initialized client.
        prefix (Optional[str]):
            Namespace prefix for all keys, e.g. 'app:env'.
        healthcheck (Optional[bool]):
            PING right away. Defaults to `healthcheck_on_init`.

    Raises:
        DataStoreError:
            If the initial PING fails.
    """

    key_schema_cls = RedisKeySchema
    healthcheck_on_init = True

    def __init__(
        self,
        redis_host: str = 'localhost',
        redis_port: int = 6379,
        redis_db: int = 0,
        redis_decode_responses: bool = True,
        redis_username: Optional[str] = None,
        redis_password: Optional[str] = None,
        redis_socket_timeout: Optional[float] = None,
        redis_client: Optional[redis.Redis] = None,
        prefix: Optional[str] = None,
        healthcheck: Optional[bool] = None,
    ):
        if redis_client is None:
            redis_client = redis.Redis(
                host=redis_host,
                port=int(redis_port),
                db=int(redis_db),
                decode_responses=redis_decode_responses,
                username=redis_username,
                password=redis_password,
                socket_timeout=redis_socket_timeout,
                socket_connect_timeout=redis_socket_timeout,
            )
        self.redis = redis_client
        self.keys = self.key_schema_cls(prefix=prefix)

        if healthcheck is None:
            healthcheck = self.healthcheck_on_init
        if healthcheck:
            self.healthcheck()

    def healthcheck(self, raise_error: bool = True) -> bool:
        """PING Redis.

        Returns:
            bool: True if Redis answered. False only when raise_error=False.

        Raises:
            DataStoreError: If Redis is unreachable and raise_error=True.
        """
        try:
            self.redis.ping()
        except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError) as e:
            if not raise_error:
                return False
            raise DataStoreError(
                f"Can't connect to Redis at {redis_location(self.redis)}. Check the provided configuration parameters."
            ) from e
        return True
