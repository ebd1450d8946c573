from enum import StrEnum


class TTL:
    """TTL durations in seconds."""

    # Read-through cache entry lifetime (24 hours in seconds)
    ONE_DAY = 86_400  # 60 * 60 * 24
    # Reaper sweep period (1 hour in seconds)
    ONE_HOUR = 3_600  # 60 * 60


class Defaults:
    """Default values for the configuration surface."""

    CODE_LENGTH = 7
    MIN_CODE_LENGTH = 6
    MAX_CODE_LENGTH = 8
    CODE_STRATEGY = 'sequential'
    CACHE_TTL_SECONDS = TTL.ONE_DAY
    CACHE_EVICTION_POLICY = 'lru'
    CACHE_MAX_ENTRIES = 10_000
    MAX_RANDOM_RETRIES = 5
    REAP_INTERVAL_SECONDS = TTL.ONE_HOUR
    STORE_TIMEOUT_SECONDS = 2.0
    CACHE_TIMEOUT_SECONDS = 0.5
    MAX_URL_LENGTH = 2048
    MAX_ALIAS_LENGTH = 64


class CodeStrategy(StrEnum):
    SEQUENTIAL = 'sequential'
    RANDOM = 'random'


class EvictionPolicy(StrEnum):
    NONE = 'none'
    LRU = 'lru'


class StoreBackend(StrEnum):
    MEMORY = 'memory'
    REDIS = 'redis'


class CacheBackend(StrEnum):
    NONE = 'none'
    MEMORY = 'memory'
    REDIS = 'redis'
    ELASTICACHE = 'elasticache'


class ENV:
    """Environment variable names."""

    class App(StrEnum):
        APP_ENV = 'APP_ENV'
        APP_NAME = 'APP_NAME'
        AWS_SAM_LOCAL = 'AWS_SAM_LOCAL'
        LOG_LEVEL = 'LOG_LEVEL'
        CONFIG_FILE = 'SHORTLINKS_CONFIG_FILE'

    class AppConfig(StrEnum):
        APP_ID = 'APPCONFIG_APP_ID'
        ENV_ID = 'APPCONFIG_ENV_ID'
        PROFILE_ID = 'APPCONFIG_PROFILE_ID'

    class ElastiCache(StrEnum):
        # SSM parameter paths for ElastiCache connection details
        HOST_PARAM = 'ELASTICACHE_HOST_PARAM'
        PORT_PARAM = 'ELASTICACHE_PORT_PARAM'
        DB_PARAM = 'ELASTICACHE_DB_PARAM'
        USER_PARAM = 'ELASTICACHE_USER_PARAM'
        # Secrets Manager name holding credentials JSON: {"username": "...", "password": "..."}
        SECRET = 'ELASTICACHE_SECRET'  # noqa: S105

    class LocalStack(StrEnum):
        ENDPOINT = 'LOCALSTACK_ENDPOINT'  # usually http://localstack:4566


# Reaper job status values
REAP_SUCCESS = 'success'
REAP_ERROR = 'error'
