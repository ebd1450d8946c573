"""Abstract base class for ShortURL data access objects (DAOs).

This class establishes a consistent contract for all mapping store
implementations, regardless of the underlying storage mechanism (e.g., Redis,
in-process memory, several shards).

Responsibilities:
    - Provide an interface for inserting, retrieving and deleting ShortURLModel objects.
    - Own the global counter used by the sequential shortcode strategy.
    - Remove expired mappings on demand (reaper sweep).
    - Standardize error handling across multiple data store implementations.

Expired and deleted codes are retired permanently: a retired code is reported
by exists() and can never be inserted again, so stale links are never
resurrected with a different target.

Example:
    Typical usage with a datastore-specific implementation:

        >>> from shortlinks.models import ShortURLModel
        >>> from shortlinks.dao.memory import ShortURLMemoryDAO

        >>> dao = ShortURLMemoryDAO()

        >>> short_url = ShortURLModel(
        ...     target="https://example.com/blog/article-123",
        ...     shortcode="a1b2c3",
        ... )
        >>> dao.insert(short_url)

        >>> retrieved = dao.get("a1b2c3")
        >>> print(retrieved.target)
        https://example.com/blog/article-123

        >>> print(dao.get("missing"))
        None
"""

from abc import ABC, abstractmethod
from datetime import datetime

from shortlinks.models import ShortURLModel


class ShortURLBaseDAO(ABC):
    """Interface for ShortURL data access objects (DAOs).

    Methods:
        insert(short_url: ShortURLModel, **kwargs) -> ShortURLBaseDAO:
            Insert a new ShortURLModel into the data store.
            Raises ShortURLAlreadyExistsError if the short code is live or retired.
            Raises DataStoreError on connection or write failure.

        get(shortcode: str, **kwargs) -> ShortURLModel | None:
            Retrieve a live ShortURLModel by short code.
            Returns None if missing or expired.
            Raises DataStoreError on connection or read failure.

        exists(shortcode: str, **kwargs) -> bool:
            True if the short code is taken (live, expired-pending-reap or retired).

        delete(shortcode: str, **kwargs) -> bool:
            Remove and retire a mapping. Idempotent.

        reap_expired(now: datetime | None = None, **kwargs) -> list[str]:
            Remove and retire every expired mapping, returning their short codes.

        count(increment: bool, **kwargs) -> int:
            Return counter from data store.
            Optionally increment counter (atomically) before retrieving.

    Subclassing:
        Datastore-specific implementations (e.g., ShortURLRedisDAO or
        ShortURLMemoryDAO) must extend this class and implement all
        abstract methods.
    """

    @abstractmethod
    def insert(self, short_url: ShortURLModel, **kwargs) -> 'ShortURLBaseDAO':
        """Insert a new ShortURLModel into the data store.

        The existence check and the write must form one atomic unit, so that
        two concurrent inserts of the same short code never both succeed.

        Args:
            short_url (ShortURLModel):
                The ShortURLModel instance to be inserted.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            ShortURLBaseDAO: self (for method chaining)

        Raises:
            ShortURLAlreadyExistsError:
                If the short code is already live or retired.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def get(self, shortcode: str, **kwargs) -> ShortURLModel | None:
        """Retrieve a live ShortURLModel from the data store by its short code.

        Mappings whose expiry has passed are not returned even if the reaper
        has not removed them yet.

        Args:
            shortcode (str):
                The short code of the ShortURLModel to be retrieved.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            ShortURLModel | None: The ShortURLModel instance if found and live, otherwise None.

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def exists(self, shortcode: str, **kwargs) -> bool:
        """Check whether a short code is taken.

        Returns:
            bool: True if the code has a mapping (even an expired one) or is retired.

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def delete(self, shortcode: str, **kwargs) -> bool:
        """Delete a mapping and retire its short code.

        Deleting a missing short code is not an error.

        Returns:
            bool: True if a mapping was removed, False if there was nothing to remove.

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def reap_expired(self, now: datetime | None = None, **kwargs) -> list[str]:
        """Remove every mapping whose expiry has passed.

        Args:
            now (datetime | None):
                Reference moment. Defaults to the current UTC time.

        Returns:
            list[str]: Short codes of the removed (and now retired) mappings.

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def count(self, increment: bool = False, **kwargs) -> int:
        """Retrieve the current counter value from the data store.

        Args:
            increment (bool):
                If True, atomically increment the counter by 1 before returning the value.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            int: The current counter value (0 if never incremented).

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass
