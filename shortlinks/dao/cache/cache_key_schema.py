import functools
from collections.abc import Callable


__all__ = ['CacheKeySchema']  # hide internal decorator prefix_key from imports


def prefix_key(func: Callable) -> Callable:
    @functools.wraps(func)
    def wrapper(self, *args, **kwargs) -> str:
        key = func(self, *args, **kwargs)
        return f'{self.prefix}:{key}'

    return wrapper


class CacheKeySchema:
    """Provide standardized Redis keys for the read-through URL cache.

    Every key starts with "cache", followed by the optional app prefix, e.g.
    "cache:shortlinks:prod:links:abc123". The mandatory "cache" segment keeps
    cache entries apart from mapping store keys when both share one Redis.

    NOTE: Yes, this class mirrors RedisKeySchema, but we don't want to spaghettify
    the caching layer with our Redis datastore backend.
    """

    def __init__(self, prefix: str | None = None):
        if prefix is not None and not isinstance(prefix, str):
            raise TypeError(f'Prefix must be of type string (given type: {type(prefix)}).')

        self.prefix = f'cache:{prefix}' if prefix is not None else 'cache'

    @prefix_key
    def link_target_key(self, shortcode: str) -> str:
        return f'links:{shortcode}'
