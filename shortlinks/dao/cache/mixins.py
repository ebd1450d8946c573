"""Cache mixin providing AWS-resolved ElastiCache client initialization.

Responsibilities:
    - Initialize a TLS-enabled Redis client targeting AWS ElastiCache.
    - Resolve connection parameters from AWS SSM Parameter Store.
    - Resolve credentials from AWS Secrets Manager.
    - Delegate key management and the rest of the DAO setup to the next class in the MRO.

Classes:
    - ElastiCacheClientMixin: Base mixin to inject AWS-resolved client setup (TLS + AUTH).
    - URLElastiCacheDAO: URLRedisCacheDAO whose client comes from ElastiCacheClientMixin.

Example:
    >>> cache = URLElastiCacheDAO(prefix="shortlinks:dev", default_ttl=86400)
    >>> cache.get('abc123')

Environment variables (paths/names to resolve at runtime):
    - ELASTICACHE_HOST_PARAM  : SSM parameter path for Redis host
    - ELASTICACHE_PORT_PARAM  : SSM parameter path for Redis port
    - ELASTICACHE_DB_PARAM    : SSM parameter path for Redis DB index
    - ELASTICACHE_USER_PARAM  : SSM parameter path for Redis username (optional)
    - ELASTICACHE_SECRET      : Secrets Manager name for {"username": "...", "password": "..."}
    - LOCALSTACK_ENDPOINT     : LocalStack endpoint URL for local development
"""

import json
import os
from typing import Any, Optional

import boto3
import redis

from shortlinks.constants import ENV
from shortlinks.dao.cache.url_redis_cache_dao import URLRedisCacheDAO
from shortlinks.types import SSMClient, SecretsManagerClient
from shortlinks.utils.helpers import require_environment
from shortlinks.utils.runtime import running_locally


class ElastiCacheClientMixin:
    """Mixin ElastiCache client setup using AWS SSM/Secrets with TLS by default.

    The resolved client is passed on as `redis_client` to the next initializer
    in the MRO, so this mixin must precede a RedisClientMixin-based DAO.

    Args:
        ssm_client (Optional[SSMClient]):
            boto3 SSM client to reuse. Created on demand (LocalStack in local mode).
        secrets_client (Optional[SecretsManagerClient]):
            boto3 Secrets Manager client to reuse. Created on demand (LocalStack in local mode).
        redis_socket_timeout (Optional[float]):
            Upper bound in seconds for connecting and for every command.
        tls_verify (bool):
            Require certificate verification (ssl_cert_reqs='required').
        ca_bundle_path (Optional[str]):
            CA bundle file used for verification.
        **kwargs:
            Forwarded to the next initializer (e.g. prefix, default_ttl).

    Raises:
        MissingEnvironmentVariableError:
            If required environment variables are missing.
        ValueError:
            If SSM values are malformed, the secret is not JSON, or the password
            is missing outside local runs.
        botocore.exceptions.BotoCoreError / ClientError:
            On AWS API failures while reading SSM or Secrets Manager.
    """

    def __init__(
        self,
        ssm_client: Optional[SSMClient] = None,
        secrets_client: Optional[SecretsManagerClient] = None,
        redis_socket_timeout: Optional[float] = None,
        tls_verify: bool = True,
        ca_bundle_path: Optional[str] = None,
        **kwargs,
    ):
        client_kwargs = self._connection_kwargs(ssm_client, secrets_client)
        client_kwargs.update(
            decode_responses=True,
            socket_timeout=redis_socket_timeout,
            socket_connect_timeout=redis_socket_timeout,
        )
        client_kwargs.update(self._tls_kwargs(client_kwargs['password'], tls_verify, ca_bundle_path))

        super().__init__(redis_client=redis.Redis(**client_kwargs), **kwargs)

    @classmethod
    def _connection_kwargs(cls, ssm_client: Optional[SSMClient], secrets_client: Optional[SecretsManagerClient]) -> dict[str, Any]:
        host, port, db, user_from_ssm = cls._resolve_ssm_params(ssm_client)
        username, password = cls._resolve_secret(secrets_client)
        return {
            'host': host,
            'port': port,
            'db': db,
            'username': username or user_from_ssm,  # secret wins over SSM
            'password': password,
        }

    @staticmethod
    def _tls_kwargs(password: Optional[str], tls_verify: bool, ca_bundle_path: Optional[str]) -> dict[str, Any]:
        if running_locally():
            return {'ssl': False}

        # ElastiCache requires TLS when AuthToken is enabled
        if not password:
            raise ValueError('ElastiCache secret must contain a non-empty "password" field')
        tls = {'ssl': True, 'ssl_cert_reqs': 'required' if tls_verify else None}
        if tls_verify and ca_bundle_path:
            tls['ssl_ca_certs'] = ca_bundle_path
        return tls

    @staticmethod
    def _aws_client(service_name: str, client: Optional[Any]) -> Any:
        if client is not None:
            return client
        if running_locally():
            return boto3.client(service_name, endpoint_url=os.environ.get(ENV.LocalStack.ENDPOINT, 'http://localhost:4566'))
        return boto3.client(service_name)

    @staticmethod
    @require_environment(ENV.ElastiCache.HOST_PARAM, ENV.ElastiCache.PORT_PARAM, ENV.ElastiCache.DB_PARAM)
    def _resolve_ssm_params(ssm_client: Optional[SSMClient]) -> tuple[str, int, int, Optional[str]]:
        """Resolve host, port, db and optional username from SSM Parameter Store.

        Returns:
            tuple[str, int, int, Optional[str]]: (host, port, db, user_from_ssm_or_none)
        """
        ssm = ElastiCacheClientMixin._aws_client('ssm', ssm_client)

        def parameter(env: str) -> str:
            try:
                return ssm.get_parameter(Name=os.environ[env])['Parameter']['Value']
            except KeyError as e:
                raise ValueError(f'Malformed SSM get_parameter response for {env}') from e

        host = parameter(ENV.ElastiCache.HOST_PARAM)
        port, db = parameter(ENV.ElastiCache.PORT_PARAM), parameter(ENV.ElastiCache.DB_PARAM)
        user = parameter(ENV.ElastiCache.USER_PARAM) if os.environ.get(ENV.ElastiCache.USER_PARAM) else None

        try:
            return host, int(port), int(db), user
        except (TypeError, ValueError) as e:
            raise ValueError(f'Invalid ElastiCache port/db values: port={port!r} db={db!r}') from e

    @staticmethod
    @require_environment(ENV.ElastiCache.SECRET)
    def _resolve_secret(secrets_client: Optional[SecretsManagerClient]) -> tuple[Optional[str], Optional[str]]:
        """Resolve optional username and password from Secrets Manager.

        The secret is a JSON object {"username": ..., "password": ...}. The
        username is usually absent for ElastiCache token auth.
        """
        sm = ElastiCacheClientMixin._aws_client('secretsmanager', secrets_client)
        raw = sm.get_secret_value(SecretId=os.environ[ENV.ElastiCache.SECRET]).get('SecretString')
        try:
            payload = json.loads(raw or '{}')
        except json.JSONDecodeError as e:
            raise ValueError('Invalid JSON in ElastiCache secret payload') from e

        return payload.get('username'), payload.get('password')


class URLElastiCacheDAO(ElastiCacheClientMixin, URLRedisCacheDAO):
    """URL cache on AWS ElastiCache; connection details come from SSM and Secrets Manager."""
