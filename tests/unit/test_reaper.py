"""Unit tests for the ExpiredLinkReaper

Test coverage includes:
    1. run_once()
       - Returns the number of reaped mappings.
       - Store failures are logged and reported as 0 instead of raised.
    2. Background thread
       - Sweeps repeatedly until stopped, independent of traffic.
       - start() twice is an error; stop() is safe without start().
"""

import threading
from unittest.mock import MagicMock

import pytest

from shortlinks.dao.exceptions import DataStoreError
from shortlinks.reaper import ExpiredLinkReaper
from shortlinks.resolver import URLResolver


@pytest.fixture
def resolver():
    return MagicMock(spec=URLResolver)


# -------------------------------
# 1. run_once()
# -------------------------------


def test_run_once(resolver):
    resolver.reap_expired.return_value = 3
    assert ExpiredLinkReaper(resolver, interval_seconds=60).run_once() == 3


def test_run_once_logs_store_failures(resolver, caplog):
    resolver.reap_expired.side_effect = DataStoreError("Can't connect to Redis at redis:6379/0.")

    assert ExpiredLinkReaper(resolver, interval_seconds=60).run_once() == 0
    assert 'Reaper sweep failed.' in caplog.text


def test_rejects_non_positive_interval(resolver):
    with pytest.raises(ValueError):
        ExpiredLinkReaper(resolver, interval_seconds=0)


# -------------------------------
# 2. Background thread
# -------------------------------


def test_reaper_sweeps_until_stopped(resolver):
    swept = threading.Event()
    calls = []

    def reap_expired():
        calls.append(1)
        if len(calls) >= 3:
            swept.set()
        return 0

    resolver.reap_expired.side_effect = reap_expired
    reaper = ExpiredLinkReaper(resolver, interval_seconds=0.01)

    reaper.start()
    assert reaper.running
    assert swept.wait(timeout=5)
    reaper.stop(timeout=5)

    assert not reaper.running
    count = len(calls)
    assert count >= 3
    swept.clear()
    assert not swept.wait(timeout=0.05)
    assert len(calls) == count


def test_reaper_keeps_running_after_failures(resolver):
    swept = threading.Event()
    outcomes = iter([DataStoreError('down'), DataStoreError('down'), 5])

    def reap_expired():
        outcome = next(outcomes, 0)
        if isinstance(outcome, Exception):
            raise outcome
        swept.set()
        return outcome

    resolver.reap_expired.side_effect = reap_expired
    reaper = ExpiredLinkReaper(resolver, interval_seconds=0.01)

    reaper.start()
    try:
        assert swept.wait(timeout=5)
    finally:
        reaper.stop(timeout=5)


def test_start_twice(resolver):
    resolver.reap_expired.return_value = 0
    reaper = ExpiredLinkReaper(resolver, interval_seconds=60)

    reaper.start()
    try:
        with pytest.raises(RuntimeError):
            reaper.start()
    finally:
        reaper.stop(timeout=5)


def test_stop_without_start(resolver):
    ExpiredLinkReaper(resolver, interval_seconds=60).stop()
