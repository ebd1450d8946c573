from unittest.mock import MagicMock

import pytest
import redis
from pytest import MonkeyPatch

from shortlinks.constants import ENV


@pytest.fixture
def app_prefix() -> str:
    return 'testapp:test'


@pytest.fixture(autouse=True)
def _env(monkeypatch: MonkeyPatch) -> None:
    monkeypatch.setenv(ENV.ElastiCache.HOST_PARAM, '/test/elasticache/host')
    monkeypatch.setenv(ENV.ElastiCache.PORT_PARAM, '/test/elasticache/port')
    monkeypatch.setenv(ENV.ElastiCache.DB_PARAM, '/test/elasticache/db')
    monkeypatch.setenv(ENV.ElastiCache.USER_PARAM, '/test/elasticache/user')
    monkeypatch.setenv(ENV.ElastiCache.SECRET, 'test/elasticache/credentials')


@pytest.fixture
def redis_client() -> redis.Redis:
    """Mock a Redis client."""
    client = MagicMock(spec=redis.Redis)
    client.connection_pool = MagicMock(
        spec=redis.ConnectionPool,
        connection_kwargs={'host': 'redis.test', 'port': 6379, 'db': 0},
    )
    client.get.return_value = None
    return client


class FakeTimer:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def timer() -> FakeTimer:
    return FakeTimer()
