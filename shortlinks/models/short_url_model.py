from dataclasses import dataclass, field
from datetime import datetime, UTC


@dataclass(frozen=True)
class ShortURLModel:
    """Represent a shortened URL mapping.

    Attributes:
        target (str):
            The original long URL that the short code resolves to.
        shortcode (str):
            The unique short identifier representing the shortened URL.
        created_at (datetime):
            Creation timestamp (UTC). Defaults to the moment of construction.
        expires_at (datetime | None):
            Moment after which the mapping is no longer valid.
            None means the mapping never expires.

    Example:
        >>> from datetime import datetime, timedelta, UTC
        >>> url = ShortURLModel(
        ...     target="https://example.com/article/123",
        ...     shortcode="abc123",
        ...     expires_at=datetime.now(UTC) + timedelta(days=365)
        ... )
        >>> url.target
        'https://example.com/article/123'
        >>> url.is_expired()
        False
    """

    target: str
    shortcode: str
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    expires_at: datetime | None = None

    def is_expired(self, now: datetime | None = None) -> bool:
        """Return True if the mapping has an expiry which is not in the future."""
        if self.expires_at is None:
            return False
        return self.expires_at <= (now or datetime.now(UTC))

    def seconds_to_expiry(self, now: datetime | None = None) -> int | None:
        """Whole seconds left before expiry (never negative), None if the mapping never expires."""
        if self.expires_at is None:
            return None
        remaining = (self.expires_at - (now or datetime.now(UTC))).total_seconds()
        return max(int(remaining), 0)
