"""Exceptions related to Data Access Objects (DAO) operations.

Classes:
    DAOError:
        Generic base class for DAO-related exceptions.

    ShortURLNotFoundError:
        Raised when a short URL is missing or already expired.

    ShortURLAlreadyExistsError:
        Raised when attempting to insert a short URL whose code is live or retired.

    DataStoreError:
        Raised when the mapping store is unavailable (connection issues, timeouts, OOM, etc.).

    CacheError:
        Generic base class for read-through cache exceptions.

    CacheUnavailableError:
        Raised when the cache backend cannot be reached or times out.

Example:
    >>> from shortlinks.dao.exceptions import ShortURLNotFoundError
    >>> raise ShortURLNotFoundError("Short URL with code 'abc123' not found.")
    Traceback (most recent call last):
        ...
    shortlinks.dao.exceptions.ShortURLNotFoundError: Short URL with code 'abc123' not found.
"""


class DAOError(Exception):
    """Generic base class for DAO-related exceptions."""

    pass


class ShortURLNotFoundError(DAOError):
    """Exception raised when a short URL is not found (or expired) in the data store."""

    pass


class ShortURLAlreadyExistsError(DAOError):
    """Exception raised when attempting to insert a short URL whose code is already taken or retired."""

    pass


class DataStoreError(DAOError):
    """Exception raised when there is an error in the data store.

    e.g. connection issues, timeouts, OOM, etc.
    """

    pass


class CacheError(DAOError):
    """Generic base class for cache-related exceptions."""

    pass


class CacheUnavailableError(CacheError):
    """Exception raised when the cache backend is unreachable or times out."""

    pass
