"""In-process implementation of ShortURLBaseDAO.

A reference mapping store for local runs and tests. It honors the same
contract as ShortURLRedisDAO: atomic insert, expiry-aware reads, permanent
retirement of deleted/expired shortcodes and an atomic counter. All state is
guarded by a single lock, and every critical section is a handful of dict
operations, so callers never wait on I/O while holding it.

Example:
    >>> dao = ShortURLMemoryDAO()
    >>> dao.count(increment=True)
    1
    >>> dao.insert(ShortURLModel(target='https://example.com', shortcode='1'))
    <ShortURLMemoryDAO>
    >>> dao.get('1').target
    'https://example.com'
"""

import threading
from datetime import datetime

from beartype import beartype

from shortlinks.models import ShortURLModel
from shortlinks.dao.base import ShortURLBaseDAO
from shortlinks.dao.exceptions import ShortURLAlreadyExistsError
from shortlinks.utils.helpers import utc_now


class ShortURLMemoryDAO(ShortURLBaseDAO):
    """Thread-safe, in-memory mapping store.

    Args:
        counter_start (int):
            Initial counter value; the first count(increment=True) returns counter_start + 1.
    """

    def __init__(self, counter_start: int = 0):
        self._lock = threading.Lock()
        self._links: dict[str, ShortURLModel] = {}
        self._retired: set[str] = set()
        self._counter = counter_start

    def __len__(self) -> int:
        with self._lock:
            return len(self._links)

    @beartype
    def insert(self, short_url: ShortURLModel, **kwargs) -> 'ShortURLMemoryDAO':
        with self._lock:
            if short_url.shortcode in self._links or short_url.shortcode in self._retired:
                raise ShortURLAlreadyExistsError(f"Short URL with code '{short_url.shortcode}' already exists.")
            self._links[short_url.shortcode] = short_url
        return self

    @beartype
    def get(self, shortcode: str, **kwargs) -> ShortURLModel | None:
        with self._lock:
            short_url = self._links.get(shortcode)
        if short_url is None or short_url.is_expired():
            return None
        return short_url

    @beartype
    def exists(self, shortcode: str, **kwargs) -> bool:
        with self._lock:
            return shortcode in self._links or shortcode in self._retired

    @beartype
    def delete(self, shortcode: str, **kwargs) -> bool:
        with self._lock:
            if self._links.pop(shortcode, None) is None:
                return False
            self._retired.add(shortcode)
        return True

    @beartype
    def reap_expired(self, now: datetime | None = None, **kwargs) -> list[str]:
        now = now or utc_now()
        with self._lock:
            expired = [shortcode for shortcode, short_url in self._links.items() if short_url.is_expired(now)]
            for shortcode in expired:
                del self._links[shortcode]
            self._retired.update(expired)
        return expired

    def count(self, increment: bool = False, **kwargs) -> int:
        with self._lock:
            if increment:
                self._counter += 1
            return self._counter
