import functools
from collections.abc import Callable


__all__ = ['RedisKeySchema']  # hide internal decorator prefix_key from imports


def prefix_key(func: Callable) -> Callable:
    @functools.wraps(func)
    def wrapper(self, *args, **kwargs) -> str:
        key = func(self, *args, **kwargs)
        return f'{self.prefix}:{key}' if self.prefix is not None else key

    return wrapper


class RedisKeySchema:
    """Provide standardized Redis keys for storing short URL mappings.

    An optional prefix can be provided to namespace all generated keys.
    It is highly encouraged to set a custom prefix for each app and environment,
    e.g. "shortlinks:prod" or "shortlinks:dev".

    Keys:
        links:<shortcode>   hash with the mapping fields (target, created_at, expires_at)
        links:expiry        sorted set of expiring shortcodes scored by expiry epoch seconds
        links:retired       set of shortcodes that can never be issued again
        links:counter       global counter of the sequential strategy
    """

    def __init__(self, prefix: str | None = None):
        if prefix is not None and not isinstance(prefix, str):
            raise TypeError(f'Prefix must be of type string (given type: {type(prefix)}).')

        self.prefix = prefix

    @prefix_key
    def link_key(self, shortcode: str) -> str:
        return f'links:{shortcode}'

    @prefix_key
    def expiry_index_key(self) -> str:
        return 'links:expiry'

    @prefix_key
    def retired_key(self) -> str:
        return 'links:retired'

    @prefix_key
    def counter_key(self) -> str:
        return 'links:counter'
