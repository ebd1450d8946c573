import json
import logging

from shortlinks.constants import REAP_SUCCESS, REAP_ERROR
from shortlinks.dao.exceptions import DAOError
from shortlinks.exceptions import ConfigurationError
from shortlinks.service import build_resolver
from shortlinks.types import LambdaEvent, LambdaContext
from shortlinks.utils.logging import initialize_logging


initialize_logging()
logger = logging.getLogger(__name__)


def response_success(*, reaped: int) -> str:
    return json.dumps(
        {
            'status': REAP_SUCCESS,
            'reaped': int(reaped),
            'message': f'Successfully reaped {reaped} expired short URLs',
        }
    )


def response_error(*, error: DAOError | ConfigurationError) -> str:
    return json.dumps(
        {
            'status': REAP_ERROR,
            'message': 'Failed to reap expired short URLs',
            'reason': str(error),
            'error': error.__class__.__name__,
        }
    )


def lambda_handler(event: LambdaEvent, context: LambdaContext) -> str:
    """Remove expired short URL mappings (scheduled by EventBridge)

    This Lambda handler follows this procedure:
    - Step 1: Build the resolver from the deployed configuration
    - Step 2: Reap expired mappings and invalidate their cache entries
    - Step 3: Respond with success or error

    Diagnostic responses:
        success:
            status: success
            reaped: <number of removed mappings>
            message: Successfully reaped <n> expired short URLs
        error:
            status: error
            message: Failed to reap expired short URLs
            reason: <reason>
            error: <error class name> (e.g. DataStoreError, BadConfigurationError)

    Args:
        event (dict):
            EventBridge scheduled event payload.
        context (LambdaContext):
            AWS Lambda context object containing runtime information.

    Returns:
        str: JSON status document.

    Example:
        >>> response = json.loads(lambda_handler({}, None))
        >>> response['status']
        'success'
    """
    try:
        resolver = build_resolver()
        reaped = resolver.reap_expired()
    except (DAOError, ConfigurationError) as error:
        logger.exception(
            'Failed to reap expired short URLs.',
            extra={'event': REAP_ERROR, 'reason': str(error), 'error': error.__class__.__name__},
        )
        return response_error(error=error)
    else:
        logger.info(
            'Successfully reaped %s expired short URLs.',
            reaped,
            extra={'event': REAP_SUCCESS, 'reaped': reaped},
        )
        return response_success(reaped=reaped)
