"""Resolver: the shortener's external operations

URLResolver ties the generator, the mapping store and the read-through cache
together:

    shorten(target)   -> validate -> generator -> store.insert
    resolve(code)     -> cache.get -> (miss) store.get -> cache.set -> store.get
    delete(code)      -> store.delete -> cache.invalidate

The mapping store is the source of truth. The cache is optional and
best-effort: every CacheUnavailableError is logged and treated as a miss, so
a cache outage slows reads down but never fails them. Store failures
(DataStoreError) always propagate, and are never reported as "not found".

Example:
    >>> from shortlinks.dao.memory import ShortURLMemoryDAO
    >>> from shortlinks.dao.cache import URLMemoryCacheDAO
    >>> dao = ShortURLMemoryDAO()
    >>> resolver = URLResolver(dao, cache=URLMemoryCacheDAO(default_ttl=60))
    >>> code = resolver.shorten('https://example.com/a')
    >>> code
    '1'
    >>> resolver.resolve(code)
    'https://example.com/a'
"""

import logging
from datetime import datetime, timedelta

from shortlinks.constants import Defaults
from shortlinks.dao.base import ShortURLBaseDAO, URLCacheBaseDAO
from shortlinks.dao.exceptions import ShortURLNotFoundError, ShortURLAlreadyExistsError, CacheUnavailableError
from shortlinks.exceptions import ValidationError, GenerationExhaustedError
from shortlinks.generators import ShortcodeGenerator, SequentialShortcodeGenerator
from shortlinks.models import ShortURLModel
from shortlinks.utils.helpers import utc_now
from shortlinks.utils.validators import validate_url, validate_alias


logger = logging.getLogger(__name__)


class URLResolver:
    """Shorten, resolve and delete short URL mappings.

    Args:
        dao (ShortURLBaseDAO):
            Mapping store (source of truth).
        cache (URLCacheBaseDAO | None):
            Read-through cache. None disables caching.
        generator (ShortcodeGenerator | None):
            Shortcode generator. Defaults to a sequential generator on `dao`.
        cache_ttl (int):
            Upper bound in seconds for the lifetime of cache entries.
        default_link_ttl_seconds (int | None):
            Lifetime given to new mappings created without an explicit expiry.
            None means such mappings never expire.
        max_insert_attempts (int):
            How many generated codes are tried when inserts keep colliding.
            A random generator runs its own `max_retries` draws per attempt,
            so at most max_insert_attempts * max_retries codes are drawn.
    """

    def __init__(
        self,
        dao: ShortURLBaseDAO,
        cache: URLCacheBaseDAO | None = None,
        generator: ShortcodeGenerator | None = None,
        cache_ttl: int = Defaults.CACHE_TTL_SECONDS,
        default_link_ttl_seconds: int | None = None,
        max_insert_attempts: int = Defaults.MAX_RANDOM_RETRIES,
    ):
        if cache_ttl <= 0:
            raise ValueError(f'Cache TTL must be a positive integer (given value: {cache_ttl}).')
        if max_insert_attempts < 1:
            raise ValueError(f'Insert attempts must be at least 1 (given value: {max_insert_attempts}).')
        self.dao = dao
        self.cache = cache
        self.generator = generator or SequentialShortcodeGenerator(dao)
        self.cache_ttl = cache_ttl
        self.default_link_ttl_seconds = default_link_ttl_seconds
        self.max_insert_attempts = max_insert_attempts

    # -------------------------------
    # Read path
    # -------------------------------

    def resolve(self, shortcode: str) -> str:
        """Return the target URL of a shortcode.

        Reads go to the cache first. On a miss the store is consulted and the
        cache is populated with a TTL of min(cache_ttl, time left before the
        mapping expires), so a cache entry never outlives its mapping.

        After populating, the store is read once more: a delete (or reaper
        sweep) may have invalidated the cache between the store read and the
        cache write, and the entry written here would then outlive the mapping.

        Raises:
            ShortURLNotFoundError:
                If the shortcode was never issued, was deleted or has expired.
            DataStoreError:
                If the mapping store is unavailable.
        """
        target = self._cache_get(shortcode)
        if target is not None:
            logger.debug('Cache hit.', extra={'shortcode': shortcode})
            return target

        logger.debug('Cache miss.', extra={'shortcode': shortcode})
        short_url = self.dao.get(shortcode)
        if short_url is None:
            logger.info('Short URL not found.', extra={'shortcode': shortcode})
            raise ShortURLNotFoundError(f"Short URL with code '{shortcode}' not found.")

        ttl = self._cache_ttl_for(short_url)
        if ttl > 0 and self._cache_set(shortcode, short_url.target, ttl):
            self._revalidate_cache_entry(shortcode)
        return short_url.target

    def info(self, shortcode: str) -> ShortURLModel:
        """Return the full mapping of a shortcode straight from the store (bypassing the cache).

        Raises:
            ShortURLNotFoundError: If there is no live mapping.
            DataStoreError: If the mapping store is unavailable.
        """
        short_url = self.dao.get(shortcode)
        if short_url is None:
            raise ShortURLNotFoundError(f"Short URL with code '{shortcode}' not found.")
        return short_url

    # -------------------------------
    # Write path
    # -------------------------------

    def shorten(
        self,
        target: str,
        custom_alias: str | None = None,
        ttl: int | None = None,
        expires_at: datetime | None = None,
    ) -> str:
        """Create a mapping for `target` and return its shortcode.

        The target (and alias) are validated before anything else happens, so
        rejected input never consumes a counter value. The cache is not
        populated on write.

        Args:
            target (str):
                Absolute http(s) URL to shorten.
            custom_alias (str | None):
                Caller-chosen shortcode. Used verbatim; no retries on conflict.
            ttl (int | None):
                Lifetime of the mapping in seconds.
            expires_at (datetime | None):
                Absolute expiry moment. Mutually exclusive with ttl.

        Returns:
            str: The shortcode of the new mapping.

        Raises:
            InvalidURLError / InvalidAliasError:
                If the target or the alias is rejected.
            ValidationError:
                If the expiry arguments are inconsistent or in the past.
            ShortURLAlreadyExistsError:
                If the custom alias is taken or retired.
            GenerationExhaustedError / CounterOverflowError:
                If no free shortcode can be generated.
            DataStoreError:
                If the mapping store is unavailable.
        """
        validate_url(target)
        if custom_alias is not None:
            validate_alias(custom_alias)
        now = utc_now()
        expires_at = self._expiry(now, ttl, expires_at)

        if custom_alias is not None:
            try:
                self.dao.insert(ShortURLModel(target=target, shortcode=custom_alias, created_at=now, expires_at=expires_at))
            except ShortURLAlreadyExistsError:
                logger.info('Custom alias is already taken.', extra={'shortcode': custom_alias})
                raise
            logger.info('Shortened URL.', extra={'shortcode': custom_alias, 'customAlias': True})
            return custom_alias

        for attempt in range(1, self.max_insert_attempts + 1):
            shortcode = self.generator.generate()
            try:
                self.dao.insert(ShortURLModel(target=target, shortcode=shortcode, created_at=now, expires_at=expires_at))
            except ShortURLAlreadyExistsError:
                # Lost a race for the code (random) or hit a custom alias (sequential)
                logger.debug('Generated shortcode is taken, trying another one.', extra={'shortcode': shortcode, 'attempt': attempt})
                continue
            logger.info('Shortened URL.', extra={'shortcode': shortcode, 'customAlias': False})
            return shortcode

        logger.warning('Could not insert a generated shortcode.', extra={'attempts': self.max_insert_attempts})
        raise GenerationExhaustedError(f'Every generated shortcode was taken ({self.max_insert_attempts} attempts).')

    def delete(self, shortcode: str) -> None:
        """Delete a mapping and drop it from the cache. Idempotent.

        Raises:
            DataStoreError: If the mapping store is unavailable.
        """
        removed = self.dao.delete(shortcode)
        self._cache_invalidate(shortcode)
        logger.info('Deleted short URL.', extra={'shortcode': shortcode, 'removed': removed})

    def reap_expired(self, now: datetime | None = None) -> int:
        """Remove every expired mapping and its cache entry; return how many were removed."""
        reaped = self.dao.reap_expired(now)
        for shortcode in reaped:
            self._cache_invalidate(shortcode)
        logger.info('Reaped expired short URLs.', extra={'reaped': len(reaped)})
        return len(reaped)

    # -------------------------------
    # Helpers
    # -------------------------------

    def _expiry(self, now: datetime, ttl: int | None, expires_at: datetime | None) -> datetime | None:
        if ttl is not None and expires_at is not None:
            raise ValidationError('Pass either ttl or expires_at, not both.')
        if ttl is not None:
            if ttl <= 0:
                raise ValidationError(f'Link TTL must be a positive integer (given value: {ttl}).')
            return now + timedelta(seconds=ttl)
        if expires_at is not None:
            if expires_at.tzinfo is None:
                raise ValidationError('expires_at must be timezone-aware.')
            if expires_at <= now:
                raise ValidationError(f'expires_at must be in the future (given value: {expires_at.isoformat()}).')
            return expires_at
        if self.default_link_ttl_seconds is not None:
            return now + timedelta(seconds=self.default_link_ttl_seconds)
        return None

    def _cache_ttl_for(self, short_url: ShortURLModel) -> int:
        remaining = short_url.seconds_to_expiry()
        return self.cache_ttl if remaining is None else min(self.cache_ttl, remaining)

    def _cache_get(self, shortcode: str) -> str | None:
        if self.cache is None:
            return None
        try:
            return self.cache.get(shortcode)
        except CacheUnavailableError as e:
            logger.warning('Cache is unavailable, reading from the store.', extra={'shortcode': shortcode, 'reason': str(e)})
            return None

    def _cache_set(self, shortcode: str, target: str, ttl: int) -> bool:
        if self.cache is None:
            return False
        try:
            self.cache.set(shortcode, target, ttl=ttl)
        except CacheUnavailableError as e:
            logger.warning('Cache is unavailable, skipping populate.', extra={'shortcode': shortcode, 'reason': str(e)})
            return False
        return True

    def _revalidate_cache_entry(self, shortcode: str) -> None:
        if self.dao.get(shortcode) is None:
            logger.debug('Mapping vanished while populating the cache, invalidating.', extra={'shortcode': shortcode})
            self._cache_invalidate(shortcode)

    def _cache_invalidate(self, shortcode: str) -> None:
        if self.cache is None:
            return
        try:
            self.cache.invalidate(shortcode)
        except CacheUnavailableError as e:
            logger.warning('Cache is unavailable, skipping invalidation.', extra={'shortcode': shortcode, 'reason': str(e)})
