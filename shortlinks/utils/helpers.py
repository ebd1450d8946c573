"""Helper utilities shared across the package.

Functions:
    utc_now() -> datetime
        Current moment as a timezone-aware UTC datetime
    to_epoch(moment) -> float
        Convert a datetime into epoch seconds (microsecond precision)
    from_epoch(seconds) -> datetime
        Convert epoch seconds back into a UTC datetime
    require_environment(*names: str) -> Callable
        Decorator: Ensure required environment variables are present

Example:
    >>> from shortlinks.utils.helpers import to_epoch, from_epoch
    >>> moment = from_epoch(1_760_000_000)
    >>> moment.isoformat()
    '2025-10-09T08:53:20+00:00'
    >>> to_epoch(moment)
    1760000000.0
"""

import os
import functools
from datetime import datetime, UTC
from collections.abc import Callable

from shortlinks.exceptions import MissingEnvironmentVariableError


def utc_now() -> datetime:
    return datetime.now(UTC)


def to_epoch(moment: datetime) -> float:
    """Convert a datetime into epoch seconds, keeping microseconds.

    Naive datetimes are assumed to be in UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.timestamp()


def from_epoch(seconds: int | float | str) -> datetime:
    return datetime.fromtimestamp(float(seconds), tz=UTC)


def require_environment(*names: str) -> Callable:
    """Decorator ensuring required environment variables are present.

    Args:
        *names (str):
            Names of required environment variables.

    Raises:
        MissingEnvironmentVariableError:
            If any required environment variable is missing or empty.

    Example:
        >>> @require_environment('APPCONFIG_APP_ID', 'APPCONFIG_ENV_ID')
        ... def my_function():
        ...     pass
        >>> my_function()
        MissingEnvironmentVariableError: Missing required environment variables: 'APPCONFIG_APP_ID', 'APPCONFIG_ENV_ID'
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            missing = [name for name in names if not os.environ.get(name)]
            if missing:
                missing_list = ', '.join(f"'{name}'" for name in missing)
                raise MissingEnvironmentVariableError(f'Missing required environment variables: {missing_list}')
            return func(*args, **kwargs)

        return wrapper

    return decorator
