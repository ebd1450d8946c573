"""Unit tests for the ReapExpired AWS Lambda handler.

Verify that the Lambda sweeps expired short URLs and reports the outcome
as a JSON status document.

Test coverage includes:
    1. Successful sweep
       - Ensures URLResolver.reap_expired() is called and the count reported.
    2. Failure reporting
       - Ensures store and configuration errors are reported with reason and
         error class instead of crashing the handler.

Fixtures:
    - `event`: EventBridge scheduled event payload.
"""

import json
from unittest.mock import MagicMock

import pytest

from shortlinks.lambdas.reap_expired import app
from shortlinks.dao.exceptions import DataStoreError
from shortlinks.exceptions import BadConfigurationError, MissingEnvironmentVariableError


# -------------------------------
# Fixtures
# -------------------------------


@pytest.fixture()
def event():
    return {
        'source': 'aws.events',
        'detail-type': 'Scheduled Event',
        'detail': {},
    }


# -------------------------------
# 1. Successful sweep
# -------------------------------


def test_lambda_handler_reaps_expired(monkeypatch, event):
    """Ensure Lambda reaps expired mappings and reports how many."""
    resolver = MagicMock()
    resolver.reap_expired.return_value = 4
    monkeypatch.setattr(app, 'build_resolver', lambda: resolver)

    result = json.loads(app.lambda_handler(event, None))

    resolver.reap_expired.assert_called_once_with()
    assert result['status'] == 'success'
    assert result['reaped'] == 4
    assert result['message'] == 'Successfully reaped 4 expired short URLs'


def test_lambda_handler_nothing_to_reap(monkeypatch, event):
    resolver = MagicMock()
    resolver.reap_expired.return_value = 0
    monkeypatch.setattr(app, 'build_resolver', lambda: resolver)

    result = json.loads(app.lambda_handler(event, None))

    assert result['status'] == 'success'
    assert result['reaped'] == 0


# -------------------------------
# 2. Failure reporting
# -------------------------------


@pytest.mark.parametrize(
    'exception, expected_reason, expected_error',
    [
        (DataStoreError("Can't connect to Redis at redis:6379/0."), "Can't connect to Redis at redis:6379/0.", 'DataStoreError'),
        (BadConfigurationError('Unknown configuration options: cache_tll'), 'Unknown configuration options: cache_tll', 'BadConfigurationError'),
    ],
)
def test_lambda_handler_reports_reap_errors(monkeypatch, event, exception, expected_reason, expected_error):
    """Ensure failures during the sweep are reported in the response."""
    resolver = MagicMock()
    resolver.reap_expired.side_effect = exception
    monkeypatch.setattr(app, 'build_resolver', lambda: resolver)

    result = json.loads(app.lambda_handler(event, None))

    assert result['status'] == 'error'
    assert result['message'] == 'Failed to reap expired short URLs'
    assert result['reason'] == expected_reason
    assert result['error'] == expected_error


def test_lambda_handler_reports_build_errors(monkeypatch, event):
    """Ensure configuration failures while building the resolver are reported."""

    def build_resolver():
        raise MissingEnvironmentVariableError('APPCONFIG_APP_ID')

    monkeypatch.setattr(app, 'build_resolver', build_resolver)

    result = json.loads(app.lambda_handler(event, None))

    assert result['status'] == 'error'
    assert result['error'] == 'MissingEnvironmentVariableError'
