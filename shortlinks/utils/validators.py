"""Input validation for the write path.

Both validators raise instead of returning a flag, so a rejected request never
reaches the generator or the data store.

Functions:
    validate_url(url, max_length=2048) -> str
        Ensure a target is a well-formed absolute http(s) URL.
    validate_alias(alias, max_length=64) -> str
        Ensure a custom alias only contains URL-safe characters.
"""

import re
from urllib.parse import urlsplit

from shortlinks.constants import Defaults
from shortlinks.exceptions import InvalidURLError, InvalidAliasError


ALLOWED_SCHEMES = frozenset({'http', 'https'})
ALIAS_PATTERN = re.compile(r'[0-9A-Za-z_-]+')


def validate_url(url: str, max_length: int = Defaults.MAX_URL_LENGTH) -> str:
    """Validate a target URL and return it unchanged.

    Raises:
        InvalidURLError:
            If the value is not a string, is empty or too long, has a scheme
            other than http/https, has no host, or contains whitespace.

    Example:
        >>> validate_url('https://example.com/a')
        'https://example.com/a'
        >>> validate_url('example.com')
        Traceback (most recent call last):
            ...
        shortlinks.exceptions.InvalidURLError: URL must use http or https scheme (given: 'example.com').
    """
    if not isinstance(url, str) or not url:
        raise InvalidURLError('URL is required.')
    if len(url) > max_length:
        raise InvalidURLError(f'URL is too long (max {max_length} characters).')
    if any(char.isspace() for char in url):
        raise InvalidURLError(f'URL must not contain whitespace (given: {url!r}).')

    try:
        components = urlsplit(url)
        hostname = components.hostname
        components.port  # noqa: B018 raises ValueError on a malformed port
    except ValueError as e:
        raise InvalidURLError(f'Malformed URL (given: {url!r}).') from e

    if components.scheme.lower() not in ALLOWED_SCHEMES:
        raise InvalidURLError(f'URL must use http or https scheme (given: {url!r}).')
    if not hostname:
        raise InvalidURLError(f'URL must have a host (given: {url!r}).')
    return url


def validate_alias(alias: str, max_length: int = Defaults.MAX_ALIAS_LENGTH) -> str:
    """Validate a caller-supplied alias and return it unchanged.

    Raises:
        InvalidAliasError:
            If the alias is empty, longer than max_length or contains anything
            besides letters, digits, '-' and '_'.
    """
    if not isinstance(alias, str) or not alias:
        raise InvalidAliasError('Custom alias must be a non-empty string.')
    if len(alias) > max_length:
        raise InvalidAliasError(f'Custom alias is too long (max {max_length} characters).')
    if not ALIAS_PATTERN.fullmatch(alias):
        raise InvalidAliasError(f"Custom alias may only contain letters, digits, '-' and '_' (given: {alias!r}).")
    return alias
