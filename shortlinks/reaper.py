"""Background reaper for expired short URL mappings

ExpiredLinkReaper runs `URLResolver.reap_expired()` on a fixed interval in a
daemon thread, independently of request traffic. A failed sweep is logged and
the next one runs on schedule. Deployments without long-lived processes use
the scheduled handler in `shortlinks.lambdas.reap_expired` instead.

Example:
    >>> reaper = ExpiredLinkReaper(resolver, interval_seconds=3600)
    >>> reaper.start()
    >>> ...
    >>> reaper.stop()
"""

import logging
import threading

from shortlinks.constants import Defaults
from shortlinks.dao.exceptions import DAOError
from shortlinks.resolver import URLResolver


logger = logging.getLogger(__name__)


class ExpiredLinkReaper:
    """Periodically remove expired mappings.

    Args:
        resolver (URLResolver):
            Resolver whose store (and cache) are swept.
        interval_seconds (float):
            Pause between the end of one sweep and the start of the next.
    """

    def __init__(self, resolver: URLResolver, interval_seconds: float = Defaults.REAP_INTERVAL_SECONDS):
        if interval_seconds <= 0:
            raise ValueError(f'Reap interval must be positive (given value: {interval_seconds}).')
        self.resolver = resolver
        self.interval_seconds = interval_seconds
        self._stopped = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(self) -> int:
        """Run one sweep; return the number of reaped mappings (0 if the sweep failed)."""
        try:
            return self.resolver.reap_expired()
        except DAOError as e:
            logger.exception('Reaper sweep failed.', extra={'reason': str(e), 'error': e.__class__.__name__})
            return 0

    def start(self) -> None:
        if self.running:
            raise RuntimeError('Reaper is already running.')
        self._stopped.clear()
        self._thread = threading.Thread(target=self._run, name='shortlinks-reaper', daemon=True)
        self._thread.start()
        logger.info('Started reaper.', extra={'intervalSeconds': self.interval_seconds})

    def stop(self, timeout: float | None = None) -> None:
        """Signal the reaper to stop and wait for the current sweep to finish."""
        self._stopped.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info('Stopped reaper.')

    def _run(self) -> None:
        while not self._stopped.is_set():
            self.run_once()
            self._stopped.wait(self.interval_seconds)
