"""Utility functions for application configuration management.

The shortener reads one configuration document. In deployed environments the
document is stored in **AWS AppConfig**: each environment (`APP_ENV`) has a
dedicated AppConfig *Environment* within the AppConfig *Application*, and the
document is deployed as a JSON configuration profile. For local runs the same
document can be kept in a YAML file referenced by `SHORTLINKS_CONFIG_FILE`.

The configuration document follows this (flat) structure:

    {
        "build": 12,
        "code_length": 7,
        "code_strategy": "sequential",
        "cache_backend": "redis",
        "cache_ttl_seconds": 86400,
        "cache_eviction_policy": "lru",
        "max_random_retries": 5,
        "reap_interval_seconds": 3600,
        "store_backend": "redis",
        "redis": {"host": "...", "port": 6379, "db": 0},
        "shards": [{"host": "..."}, {"host": "..."}]
    }

Every key is optional; missing keys take the defaults from
`shortlinks.constants.Defaults`.

Functions:
    app_env() -> str
        Return the current application environment (`APP_ENV`) value,
        defaulting to `'local'`.

    app_name() -> str | None
        Return the application name (`APP_NAME`), or None if not set.

    app_prefix() -> str | None
        Return the key prefix for DAOs, or None if `APP_NAME` is not set.

    load_config() -> dict
        Load the configuration document from a local YAML file or from
        AWS AppConfig and return it as a Python dictionary.

Classes:
    ShortenerConfig
        Validated, immutable view of the configuration document.

Example:
    Typical usage during service start-up:

        >>> from shortlinks.utils.config import load_config, ShortenerConfig
        >>> config = ShortenerConfig.from_mapping(load_config())
        >>> config.code_strategy
        <CodeStrategy.SEQUENTIAL: 'sequential'>
"""

import os
import json
import functools
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any
from collections.abc import Callable, Mapping

import boto3
import yaml

from shortlinks.constants import ENV, Defaults, CodeStrategy, EvictionPolicy, StoreBackend, CacheBackend
from shortlinks.exceptions import BadConfigurationError
from shortlinks.utils.helpers import require_environment


logger = logging.getLogger(__name__)


def app_env() -> str:
    """Return the current application environment by reading 'APP_ENV'

    Returns:
        str:
            Value of `APP_ENV` environment variable, `'local'` by default.

    Example:
        >>> os.environ['APP_ENV'] = 'dev'
        >>> app_env()
        'dev'
    """
    return os.environ.get(ENV.App.APP_ENV, 'local').lower()


def app_name() -> str | None:
    """Return the current application name by reading 'APP_NAME'

    Returns:
        str:
            Value of `APP_NAME` environment variable.
            None if variable is not set.
    """
    return os.environ.get(ENV.App.APP_NAME)


def app_prefix() -> str | None:
    """Return application prefix for DAOs

    Returns:
        str: app prefix as <app name>:<app env>.
             None if APP_NAME is not set.

    Example:
        >>> os.environ['APP_NAME'] = 'shortlinks'
        >>> os.environ['APP_ENV'] = 'local'
        >>> app_prefix()
        'shortlinks:local'
    """
    return None if app_name() is None else f'{app_name()}:{app_env()}'


def _load_local_config_file(func: Callable[[], dict]) -> Callable[[], dict]:
    """Decorator: load the configuration document from a YAML file when one is configured

    Behavior:
        - If `SHORTLINKS_CONFIG_FILE` is set, parse that file with yaml.safe_load().
        - Else, call the wrapped function (which pulls from AWS AppConfig via boto3).

    Raises:
        FileNotFoundError:
            If the configured file does not exist.
        BadConfigurationError:
            If the file does not hold a YAML mapping.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> dict:
        config_file = os.getenv(ENV.App.CONFIG_FILE)
        if not config_file:
            return func(*args, **kwargs)

        path = Path(config_file)
        logger.debug('Trying to load configuration from local file.', extra={'configFile': str(path)})
        with path.open('r', encoding='utf-8') as f:
            document = yaml.safe_load(f) or {}

        if not isinstance(document, dict):
            raise BadConfigurationError(f'Configuration file {path} must contain a mapping (given type: {type(document)}).')

        logger.debug('Loaded configuration from local file.', extra={'configFile': str(path), 'build': document.get('build')})
        return document

    return wrapper


@_load_local_config_file
@require_environment(ENV.AppConfig.APP_ID, ENV.AppConfig.ENV_ID, ENV.AppConfig.PROFILE_ID)
def load_config() -> dict:
    """Load the configuration document from AWS AppConfig

    Environment variables required:
        APPCONFIG_APP_ID       – AppConfig Application ID
        APPCONFIG_ENV_ID       – AppConfig Environment ID
        APPCONFIG_PROFILE_ID   – AppConfig Configuration Profile ID

    Returns:
        dict: The configuration document as a Python dictionary.

    Raises:
        MissingEnvironmentVariableError:
            If any AppConfig identifier is missing (and no local file is configured).
        botocore.exceptions.BotoCoreError / ClientError:
            On AWS AppConfig API failures.

    Example:
        >>> document = load_config()
        >>> document['code_strategy']
        'sequential'
    """
    logger.debug('Trying to load configuration from AWS AppConfig.')

    appconfig = boto3.client('appconfigdata')

    # Start an AppConfig data session
    session_token = appconfig.start_configuration_session(
        ApplicationIdentifier=os.environ[ENV.AppConfig.APP_ID],
        EnvironmentIdentifier=os.environ[ENV.AppConfig.ENV_ID],
        ConfigurationProfileIdentifier=os.environ[ENV.AppConfig.PROFILE_ID],
    )['InitialConfigurationToken']

    # Fetch the configuration
    response = appconfig.get_latest_configuration(ConfigurationToken=session_token)
    content = response['Configuration'].read()
    document = json.loads(content.decode('utf-8'))

    logger.debug('Loaded configuration from AWS AppConfig.', extra={'build': document.get('build')})
    return document


def _enum_option(enum_type: type, name: str, value: Any) -> Any:
    try:
        return enum_type(str(value).lower())
    except ValueError:
        choices = ', '.join(member.value for member in enum_type)
        raise BadConfigurationError(f"Option '{name}' must be one of: {choices} (given value: {value!r}).") from None


@dataclass(frozen=True)
class ShortenerConfig:
    """Validated configuration surface of the shortener core.

    Attributes:
        code_length (int):                  Code length for generated codes (6..8).
        code_strategy (CodeStrategy):       'sequential' (counter + Base62) or 'random' (draw + retry).
        cache_ttl_seconds (int):            Lifetime of read-through cache entries.
        cache_eviction_policy (EvictionPolicy): 'none' (TTL only) or 'lru' (bounded by cache_max_entries).
        cache_max_entries (int):            Size bound of the in-process cache when the policy is 'lru'.
        max_random_retries (int):           Collision retry bound of the random strategy, and the
                                            number of generated codes the resolver tries per shorten().
                                            With the random strategy at most max_random_retries ** 2 codes
                                            are drawn before GenerationExhaustedError.
        reap_interval_seconds (int):        Period of the expired-link reaper.
        default_link_ttl_seconds (int | None): Lifetime applied to new links without an explicit expiry.
        store_backend (StoreBackend):       'memory' or 'redis'.
        cache_backend (CacheBackend):       'none', 'memory', 'redis' or 'elasticache'.
        store_timeout_seconds (float):      Socket timeout of store calls.
        cache_timeout_seconds (float):      Socket timeout of cache calls.
        redis (dict):                       Connection parameters of the store (host, port, db, username, password).
        cache_redis (dict | None):          Connection parameters of the cache; defaults to `redis`.
        shards (tuple[dict, ...]):          Connection parameters of each shard when the store is sharded.
    """

    code_length: int = Defaults.CODE_LENGTH
    code_strategy: CodeStrategy = CodeStrategy(Defaults.CODE_STRATEGY)
    cache_ttl_seconds: int = Defaults.CACHE_TTL_SECONDS
    cache_eviction_policy: EvictionPolicy = EvictionPolicy(Defaults.CACHE_EVICTION_POLICY)
    cache_max_entries: int = Defaults.CACHE_MAX_ENTRIES
    max_random_retries: int = Defaults.MAX_RANDOM_RETRIES
    reap_interval_seconds: int = Defaults.REAP_INTERVAL_SECONDS
    default_link_ttl_seconds: int | None = None
    store_backend: StoreBackend = StoreBackend.MEMORY
    cache_backend: CacheBackend = CacheBackend.MEMORY
    store_timeout_seconds: float = Defaults.STORE_TIMEOUT_SECONDS
    cache_timeout_seconds: float = Defaults.CACHE_TIMEOUT_SECONDS
    redis: dict = field(default_factory=dict)
    cache_redis: dict | None = None
    shards: tuple[dict, ...] = ()

    def __post_init__(self):
        # Normalize enum options so that plain strings are accepted as well
        object.__setattr__(self, 'code_strategy', _enum_option(CodeStrategy, 'code_strategy', self.code_strategy))
        object.__setattr__(self, 'cache_eviction_policy', _enum_option(EvictionPolicy, 'cache_eviction_policy', self.cache_eviction_policy))
        object.__setattr__(self, 'store_backend', _enum_option(StoreBackend, 'store_backend', self.store_backend))
        object.__setattr__(self, 'cache_backend', _enum_option(CacheBackend, 'cache_backend', self.cache_backend))
        object.__setattr__(self, 'shards', tuple(self.shards))

        if not Defaults.MIN_CODE_LENGTH <= self.code_length <= Defaults.MAX_CODE_LENGTH:
            raise BadConfigurationError(
                f"Option 'code_length' must be between {Defaults.MIN_CODE_LENGTH} and {Defaults.MAX_CODE_LENGTH} "
                f'(given value: {self.code_length}).'
            )
        for name in ('cache_ttl_seconds', 'cache_max_entries', 'reap_interval_seconds'):
            if getattr(self, name) <= 0:
                raise BadConfigurationError(f"Option '{name}' must be a positive integer (given value: {getattr(self, name)}).")
        if self.max_random_retries < 1:
            raise BadConfigurationError(f"Option 'max_random_retries' must be at least 1 (given value: {self.max_random_retries}).")
        if self.default_link_ttl_seconds is not None and self.default_link_ttl_seconds <= 0:
            raise BadConfigurationError(
                f"Option 'default_link_ttl_seconds' must be a positive integer (given value: {self.default_link_ttl_seconds})."
            )
        if self.store_timeout_seconds <= 0 or self.cache_timeout_seconds <= 0:
            raise BadConfigurationError('Store and cache timeouts must be positive.')
        if self.shards and self.store_backend is not StoreBackend.REDIS:
            raise BadConfigurationError("Option 'shards' requires store_backend 'redis'.")

    @classmethod
    def from_mapping(cls, document: Mapping[str, Any]) -> 'ShortenerConfig':
        """Build a config from a configuration document (see module docstring).

        The 'build' key (AppConfig deployment number) is ignored; any other
        unknown key is rejected to catch typos early.

        Raises:
            BadConfigurationError: On unknown keys or invalid values.
        """
        known = {f.name for f in fields(cls)}
        options = {key: value for key, value in document.items() if key != 'build'}
        unknown = sorted(set(options) - known)
        if unknown:
            raise BadConfigurationError(f'Unknown configuration options: {", ".join(unknown)}')
        try:
            return cls(**options)
        except TypeError as e:
            raise BadConfigurationError(f'Invalid configuration document: {e}') from e

    @property
    def cache_connection(self) -> dict:
        return self.redis if self.cache_redis is None else self.cache_redis
