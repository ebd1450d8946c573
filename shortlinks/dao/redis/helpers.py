import functools
import redis
from typing import TypeVar, Any
from collections.abc import Callable

from shortlinks.dao.exceptions import DataStoreError


__all__ = []

F = TypeVar('F', bound=Callable[..., Any])


def redis_location(client: redis.Redis) -> str:
    """Describe a Redis client's endpoint as <host>:<port>/<db> for error messages"""
    info = client.connection_pool.connection_kwargs
    return f"{info.get('host')}:{info.get('port')}/{info.get('db')}"


def handle_redis_connection_error[F](method: F) -> F:
    """Wrap Redis-interacting DAO methods to handle connection errors and timeouts

    Args:
        method (Callable[..., Any]):
            DAO method performing Redis operations which may raise
            redis.exceptions.ConnectionError or redis.exceptions.TimeoutError.

    Returns:
        Callable[..., Any]:
            Wrapped method which raises DataStoreError on connectivity issues with Redis.

    Example:
        >>> @handle_redis_connection_error
        ... def get_count(self):
        ...     return self.redis.get('count')
    """

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except redis.exceptions.TimeoutError as e:
            raise DataStoreError(f'Redis at {redis_location(self.redis)} timed out.') from e
        except redis.exceptions.ConnectionError as e:
            raise DataStoreError(f"Can't connect to Redis at {redis_location(self.redis)}.") from e

    return wrapper
