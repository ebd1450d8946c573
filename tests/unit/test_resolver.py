"""Unit tests for the URLResolver

Test coverage includes:

1. Round trips
   - resolve(shorten(url)) == url, with and without a cache.
   - Sequential strategy starting at counter 1 issues '1', then '2'.

2. Read path
   - Cache hits never touch the store; misses populate the cache.
   - Cache TTL is capped by the mapping's remaining lifetime.
   - resolve() still works after the cache entry expired or was evicted.
   - Never-issued, deleted and expired codes raise ShortURLNotFoundError.
   - Store failures propagate as DataStoreError, never as not-found.
   - Cache failures degrade to store reads.

3. Write path
   - Invalid URLs and aliases are rejected before the generator runs.
   - Custom aliases: used verbatim, duplicates rejected.
   - Generated-code collisions are retried within the bound.
   - Random draws never exceed max_insert_attempts * max_retries.
   - Expiry arguments (ttl, expires_at, default link TTL).

4. delete(), info() and reap_expired()

5. Concurrency
   - Concurrent shorten() calls never share a code.

6. Cache consistency
   - A delete racing a cache populate leaves no stale cache entry.
   - Populates are re-checked against the store and kept when still valid.

7. Configuration
   - Constructor bounds are validated.
"""

import threading
from datetime import datetime, timedelta, UTC
from unittest.mock import MagicMock

import pytest
from freezegun import freeze_time

from shortlinks.dao.base import ShortURLBaseDAO, URLCacheBaseDAO
from shortlinks.dao.cache import URLMemoryCacheDAO
from shortlinks.dao.exceptions import ShortURLNotFoundError, ShortURLAlreadyExistsError, DataStoreError, CacheUnavailableError
from shortlinks.dao.memory import ShortURLMemoryDAO
from shortlinks.exceptions import InvalidURLError, InvalidAliasError, ValidationError, GenerationExhaustedError
from shortlinks.generators import ShortcodeGenerator, RandomShortcodeGenerator
from shortlinks.models import ShortURLModel
from shortlinks.resolver import URLResolver
from shortlinks.utils.shortener import encode_base62


NOW = datetime(2025, 10, 15, 12, 0, 0, tzinfo=UTC)


# -------------------------------
# Fixtures
# -------------------------------


class FakeTimer:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def timer():
    return FakeTimer()


@pytest.fixture
def dao():
    return ShortURLMemoryDAO()


@pytest.fixture
def cache(timer):
    return URLMemoryCacheDAO(default_ttl=86_400, timer=timer)


@pytest.fixture
def resolver(dao, cache):
    return URLResolver(dao, cache=cache, cache_ttl=86_400)


@pytest.fixture
def unavailable_cache():
    _cache = MagicMock(spec=URLCacheBaseDAO)
    _cache.get.side_effect = CacheUnavailableError('Cache at redis.test:6379/0 is unavailable (ConnectionError).')
    _cache.set.side_effect = CacheUnavailableError('Cache at redis.test:6379/0 is unavailable (ConnectionError).')
    _cache.invalidate.side_effect = CacheUnavailableError('Cache at redis.test:6379/0 is unavailable (ConnectionError).')
    return _cache


# -------------------------------
# 1. Round trips
# -------------------------------


@pytest.mark.parametrize('url', ['https://example.com/a', 'http://example.org/path?q=1#frag', 'https://例え.jp/ページ'])
def test_resolve_shortened_url(resolver, url):
    assert resolver.resolve(resolver.shorten(url)) == url


def test_resolve_without_cache(dao):
    resolver = URLResolver(dao)
    assert resolver.resolve(resolver.shorten('https://example.com/a')) == 'https://example.com/a'


def test_sequential_strategy_first_codes(resolver):
    first = resolver.shorten('https://example.com/a')
    second = resolver.shorten('https://example.com/b')

    assert first == encode_base62(1)
    assert second == encode_base62(2)
    assert resolver.resolve(first) == 'https://example.com/a'
    assert resolver.resolve(second) == 'https://example.com/b'


# -------------------------------
# 2. Read path
# -------------------------------


def test_cache_hit_does_not_touch_store():
    dao = MagicMock(spec=ShortURLBaseDAO)
    cache = MagicMock(spec=URLCacheBaseDAO)
    cache.get.return_value = 'https://example.com/cached'
    resolver = URLResolver(dao, cache=cache)

    assert resolver.resolve('abc123') == 'https://example.com/cached'
    dao.get.assert_not_called()


def test_cache_miss_populates_cache(dao, cache, resolver):
    shortcode = resolver.shorten('https://example.com/a')
    assert cache.get(shortcode) is None  # not populated on write

    resolver.resolve(shortcode)

    assert cache.get(shortcode) == 'https://example.com/a'


@freeze_time(NOW)
def test_cache_ttl_is_capped_by_mapping_expiry():
    dao = ShortURLMemoryDAO()
    cache = MagicMock(spec=URLCacheBaseDAO)
    cache.get.return_value = None
    resolver = URLResolver(dao, cache=cache, cache_ttl=86_400)

    shortcode = resolver.shorten('https://example.com/a', ttl=90)
    resolver.resolve(shortcode)

    cache.set.assert_called_once_with(shortcode, 'https://example.com/a', ttl=90)


@freeze_time(NOW)
def test_cache_ttl_without_mapping_expiry():
    dao = ShortURLMemoryDAO()
    cache = MagicMock(spec=URLCacheBaseDAO)
    cache.get.return_value = None
    resolver = URLResolver(dao, cache=cache, cache_ttl=600)

    shortcode = resolver.shorten('https://example.com/a')
    resolver.resolve(shortcode)

    cache.set.assert_called_once_with(shortcode, 'https://example.com/a', ttl=600)


def test_cache_is_skipped_when_mapping_expires_within_a_second():
    dao = MagicMock(spec=ShortURLBaseDAO)
    dao.get.return_value = ShortURLModel(
        target='https://example.com/a',
        shortcode='abc123',
        expires_at=datetime.now(UTC) + timedelta(milliseconds=300),
    )
    cache = MagicMock(spec=URLCacheBaseDAO)
    cache.get.return_value = None

    assert URLResolver(dao, cache=cache).resolve('abc123') == 'https://example.com/a'
    cache.set.assert_not_called()


def test_resolve_after_cache_ttl_expiry(resolver, cache, timer):
    shortcode = resolver.shorten('https://example.com/a')
    resolver.resolve(shortcode)

    timer.advance(86_400)
    assert cache.get(shortcode) is None

    assert resolver.resolve(shortcode) == 'https://example.com/a'


def test_resolve_after_cache_eviction(dao, timer):
    cache = URLMemoryCacheDAO(default_ttl=3600, eviction_policy='lru', max_entries=1, timer=timer)
    resolver = URLResolver(dao, cache=cache, cache_ttl=3600)
    first = resolver.shorten('https://example.com/a')
    second = resolver.shorten('https://example.com/b')

    resolver.resolve(first)
    resolver.resolve(second)  # evicts first

    assert cache.get(first) is None
    assert resolver.resolve(first) == 'https://example.com/a'


def test_resolve_never_issued_code(resolver):
    with pytest.raises(ShortURLNotFoundError, match="'nope' not found"):
        resolver.resolve('nope')


def test_resolve_expired_mapping_still_physically_present(dao, resolver):
    dao.insert(ShortURLModel(target='https://example.com/old', shortcode='old', expires_at=datetime.now(UTC) - timedelta(seconds=1)))

    assert dao.exists('old')
    with pytest.raises(ShortURLNotFoundError):
        resolver.resolve('old')


def test_store_failure_is_not_reported_as_not_found(cache):
    dao = MagicMock(spec=ShortURLBaseDAO)
    dao.get.side_effect = DataStoreError("Can't connect to Redis at redis:6379/0.")
    resolver = URLResolver(dao, cache=cache)

    with pytest.raises(DataStoreError):
        resolver.resolve('abc123')


def test_cache_failure_degrades_to_store(dao, unavailable_cache):
    resolver = URLResolver(dao, cache=unavailable_cache)
    shortcode = resolver.shorten('https://example.com/a')

    assert resolver.resolve(shortcode) == 'https://example.com/a'
    unavailable_cache.get.assert_called_once_with(shortcode)
    unavailable_cache.set.assert_called_once()


# -------------------------------
# 3. Write path
# -------------------------------


@pytest.mark.parametrize('url', ['', 'example.com', 'ftp://example.com', 'https://', 'https://exa mple.com'])
def test_shorten_rejects_invalid_urls_before_generating(url):
    dao = MagicMock(spec=ShortURLBaseDAO)
    generator = MagicMock(spec=ShortcodeGenerator)
    resolver = URLResolver(dao, generator=generator)

    with pytest.raises(InvalidURLError):
        resolver.shorten(url)

    generator.generate.assert_not_called()
    dao.count.assert_not_called()
    dao.insert.assert_not_called()


def test_shorten_rejects_invalid_alias_before_store():
    dao = MagicMock(spec=ShortURLBaseDAO)
    resolver = URLResolver(dao)

    with pytest.raises(InvalidAliasError):
        resolver.shorten('https://example.com', custom_alias='no/slashes')

    dao.insert.assert_not_called()


def test_custom_alias(resolver, dao):
    assert resolver.shorten('https://example.com/promo', custom_alias='promo') == 'promo'
    assert resolver.resolve('promo') == 'https://example.com/promo'
    assert dao.count() == 0  # no counter value consumed


def test_custom_alias_used_twice(resolver):
    resolver.shorten('https://example.com/1', custom_alias='promo')

    with pytest.raises(ShortURLAlreadyExistsError):
        resolver.shorten('https://example.com/2', custom_alias='promo')

    assert resolver.resolve('promo') == 'https://example.com/1'


def test_deleted_alias_is_retired(resolver):
    resolver.shorten('https://example.com/1', custom_alias='promo')
    resolver.delete('promo')

    with pytest.raises(ShortURLAlreadyExistsError):
        resolver.shorten('https://example.com/2', custom_alias='promo')


def test_sequential_code_taken_by_alias_is_skipped(resolver):
    resolver.shorten('https://example.com/alias', custom_alias='1')

    shortcode = resolver.shorten('https://example.com/generated')

    assert shortcode == '2'
    assert resolver.resolve('1') == 'https://example.com/alias'


def test_generated_collision_is_retried():
    dao = ShortURLMemoryDAO()
    dao.insert(ShortURLModel(target='https://example.com/taken', shortcode='taken'))
    generator = MagicMock(spec=ShortcodeGenerator)
    generator.generate.side_effect = ['taken', 'taken', 'fresh']
    resolver = URLResolver(dao, generator=generator, max_insert_attempts=5)

    assert resolver.shorten('https://example.com/new') == 'fresh'
    assert generator.generate.call_count == 3


def test_generated_collisions_exhaust_attempts():
    dao = ShortURLMemoryDAO()
    dao.insert(ShortURLModel(target='https://example.com/taken', shortcode='taken'))
    generator = MagicMock(spec=ShortcodeGenerator)
    generator.generate.return_value = 'taken'
    resolver = URLResolver(dao, generator=generator, max_insert_attempts=3)

    with pytest.raises(GenerationExhaustedError):
        resolver.shorten('https://example.com/new')
    assert generator.generate.call_count == 3


def test_random_generator_exhaustion_is_not_retried_by_resolver():
    dao = MagicMock(spec=ShortURLBaseDAO)
    dao.exists.return_value = True
    generator = RandomShortcodeGenerator(dao, length=6, max_retries=3)
    resolver = URLResolver(dao, generator=generator, max_insert_attempts=2)

    with pytest.raises(GenerationExhaustedError):
        resolver.shorten('https://example.com/new')
    assert dao.exists.call_count == 3
    dao.insert.assert_not_called()


def test_random_draws_are_bounded_by_attempts_times_retries():
    dao = MagicMock(spec=ShortURLBaseDAO)
    dao.exists.side_effect = [True, True, False] * 2
    dao.insert.side_effect = ShortURLAlreadyExistsError('Shortcode is taken.')
    generator = RandomShortcodeGenerator(dao, length=6, max_retries=3)
    resolver = URLResolver(dao, generator=generator, max_insert_attempts=2)

    with pytest.raises(GenerationExhaustedError):
        resolver.shorten('https://example.com/new')
    assert dao.exists.call_count == 2 * 3
    assert dao.insert.call_count == 2


@freeze_time(NOW)
def test_shorten_with_ttl(resolver):
    shortcode = resolver.shorten('https://example.com/a', ttl=3600)
    assert resolver.info(shortcode).expires_at == NOW + timedelta(hours=1)


@freeze_time(NOW)
def test_shorten_with_expires_at(resolver):
    expires_at = NOW + timedelta(days=7)
    shortcode = resolver.shorten('https://example.com/a', expires_at=expires_at)
    assert resolver.info(shortcode).expires_at == expires_at


@freeze_time(NOW)
def test_shorten_with_default_link_ttl(dao):
    resolver = URLResolver(dao, default_link_ttl_seconds=60)
    shortcode = resolver.shorten('https://example.com/a')
    assert resolver.info(shortcode).expires_at == NOW + timedelta(seconds=60)


@freeze_time(NOW)
@pytest.mark.parametrize(
    'kwargs',
    [
        {'ttl': 0},
        {'ttl': -5},
        {'expires_at': NOW},
        {'expires_at': NOW - timedelta(days=1)},
        {'expires_at': datetime(2030, 1, 1)},
        {'ttl': 60, 'expires_at': NOW + timedelta(days=1)},
    ],
)
def test_shorten_rejects_bad_expiry(resolver, dao, kwargs):
    with pytest.raises(ValidationError):
        resolver.shorten('https://example.com/a', **kwargs)
    assert dao.count() == 0


# -------------------------------
# 4. delete(), info() and reap_expired()
# -------------------------------


def test_delete_invalidates_cache(resolver, cache):
    shortcode = resolver.shorten('https://example.com/a')
    resolver.resolve(shortcode)
    assert cache.get(shortcode) is not None

    resolver.delete(shortcode)

    assert cache.get(shortcode) is None
    with pytest.raises(ShortURLNotFoundError):
        resolver.resolve(shortcode)


def test_delete_is_idempotent(resolver):
    resolver.delete('never-issued')
    resolver.delete('never-issued')


def test_delete_tolerates_unavailable_cache(dao, unavailable_cache):
    resolver = URLResolver(dao, cache=unavailable_cache)
    shortcode = resolver.shorten('https://example.com/a')

    resolver.delete(shortcode)

    assert dao.get(shortcode) is None


def test_info(resolver):
    shortcode = resolver.shorten('https://example.com/a')
    short_url = resolver.info(shortcode)

    assert short_url.shortcode == shortcode
    assert short_url.target == 'https://example.com/a'
    with pytest.raises(ShortURLNotFoundError):
        resolver.info('missing')


def test_reap_expired_invalidates_cache(dao, cache, resolver):
    with freeze_time(NOW):
        expiring = resolver.shorten('https://example.com/a', ttl=60)
        forever = resolver.shorten('https://example.com/b')
        resolver.resolve(expiring)
        assert cache.get(expiring) is not None

    reaped = resolver.reap_expired(NOW + timedelta(seconds=60))

    assert reaped == 1
    assert cache.get(expiring) is None
    assert not dao.get(expiring)
    assert resolver.resolve(forever) == 'https://example.com/b'


# -------------------------------
# 5. Concurrency
# -------------------------------


@pytest.mark.parametrize('strategy', ['sequential', 'random'])
def test_concurrent_shorten_never_shares_codes(dao, cache, strategy):
    generator = RandomShortcodeGenerator(dao, length=6) if strategy == 'random' else None
    resolver = URLResolver(dao, cache=cache, generator=generator)
    results = {}
    lock = threading.Lock()

    def worker(index):
        for j in range(50):
            url = f'https://example.com/{index}/{j}'
            shortcode = resolver.shorten(url)
            with lock:
                assert shortcode not in results
                results[shortcode] = url

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(results) == 400
    for shortcode, url in results.items():
        assert resolver.resolve(shortcode) == url


# -------------------------------
# 6. Cache consistency
# -------------------------------


class BlockingGetDAO(ShortURLMemoryDAO):
    """Memory store whose next get() pauses until released."""

    def __init__(self):
        super().__init__()
        self.armed = False
        self.loaded = threading.Event()
        self.release = threading.Event()

    def get(self, shortcode, **kwargs):
        short_url = super().get(shortcode, **kwargs)
        if self.armed:
            self.armed = False
            self.loaded.set()
            assert self.release.wait(timeout=5)
        return short_url


def test_delete_during_cache_populate_leaves_no_stale_entry(cache):
    dao = BlockingGetDAO()
    resolver = URLResolver(dao, cache=cache)
    shortcode = resolver.shorten('https://example.com/a')
    results = []

    dao.armed = True
    reader = threading.Thread(target=lambda: results.append(resolver.resolve(shortcode)))
    reader.start()
    assert dao.loaded.wait(timeout=5)

    # The reader holds the mapping but has not written the cache yet
    resolver.delete(shortcode)
    dao.release.set()
    reader.join(timeout=5)

    assert results == ['https://example.com/a']
    assert cache.get(shortcode) is None
    with pytest.raises(ShortURLNotFoundError):
        resolver.resolve(shortcode)


def test_cache_populate_is_revalidated_against_store():
    dao = MagicMock(spec=ShortURLBaseDAO)
    dao.get.side_effect = [ShortURLModel(target='https://example.com/a', shortcode='abc123'), None]
    cache = MagicMock(spec=URLCacheBaseDAO)
    cache.get.return_value = None
    resolver = URLResolver(dao, cache=cache)

    assert resolver.resolve('abc123') == 'https://example.com/a'
    cache.set.assert_called_once()
    cache.invalidate.assert_called_once_with('abc123')


def test_cache_populate_kept_when_mapping_still_exists(dao, cache, resolver):
    shortcode = resolver.shorten('https://example.com/a')

    assert resolver.resolve(shortcode) == 'https://example.com/a'
    assert cache.get(shortcode) == 'https://example.com/a'


def test_no_revalidation_without_cache_write(unavailable_cache):
    dao = MagicMock(spec=ShortURLBaseDAO)
    dao.get.return_value = ShortURLModel(target='https://example.com/a', shortcode='abc123')
    resolver = URLResolver(dao, cache=unavailable_cache)

    assert resolver.resolve('abc123') == 'https://example.com/a'
    assert dao.get.call_count == 1


# -------------------------------
# 7. Configuration
# -------------------------------


def test_constructor_validation(dao):
    with pytest.raises(ValueError):
        URLResolver(dao, cache_ttl=0)
    with pytest.raises(ValueError):
        URLResolver(dao, max_insert_attempts=0)
