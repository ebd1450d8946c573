import functools
import redis
from typing import TypeVar, Any
from collections.abc import Callable

from shortlinks.dao.exceptions import CacheUnavailableError
from shortlinks.dao.redis.helpers import redis_location


__all__ = []

F = TypeVar('F', bound=Callable[..., Any])


def handle_cache_error[F](method: F) -> F:
    """Wrap Redis-interacting cache methods to surface any Redis failure as CacheUnavailableError

    Unlike the mapping store, the cache converts every redis.exceptions.RedisError
    (connection errors, timeouts, server errors), because callers only need to
    know that the cache could not answer.

    Example:
        >>> @handle_cache_error
        ... def get(self, shortcode):
        ...     return self.redis.get(shortcode)
    """

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except redis.exceptions.RedisError as e:
            raise CacheUnavailableError(f'Cache at {redis_location(self.redis)} is unavailable ({e.__class__.__name__}).') from e

    return wrapper
