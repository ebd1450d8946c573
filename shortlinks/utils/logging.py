"""Application-wide logging initialization

IMPORTANT: Call `initialize_logging()` once at process start (service wiring,
scheduled handler module import) before any other logging is done.

Every record is one JSON document on stdout. Fields passed through `extra`
are attached at the top level:

    logger.info('Shortened URL.', extra={'shortcode': '1'})

{
    "timestamp": "2025-12-26T12:00:00.000Z",
    "level": "INFO",
    "logger": "shortlinks.resolver",
    "message": "Shortened URL.",
    "service": "shortlinks",
    "shortcode": "1"
}
"""

import os
import json
import logging
import logging.config
from datetime import datetime, UTC

from shortlinks.constants import ENV


# Attributes every LogRecord carries; anything else came in through `extra`
_RECORD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {'message', 'asctime', 'taskName'}

# Chatty third-party loggers kept at WARNING unless LOG_LEVEL is DEBUG
_QUIET_LOGGERS = ('botocore', 'boto3', 'urllib3')


class JsonFormatter(logging.Formatter):
    """Render LogRecords (and their `extra` fields) as single-line JSON."""

    def __init__(self, service: str | None = None):
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        log = {
            'timestamp': self._timestamp(record),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        if self.service:
            log['service'] = self.service

        log.update((key, value) for key, value in record.__dict__.items() if key not in _RECORD_ATTRS)

        if record.exc_info:
            log['exception'] = self.formatException(record.exc_info)
        if record.stack_info:
            log['stack'] = self.formatStack(record.stack_info)

        # Non-JSON extras (datetimes, enums) fall back to str()
        return json.dumps(log, default=str)

    @staticmethod
    def _timestamp(record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=UTC)
        return created.isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def initialize_logging(level: str | None = None) -> None:
    """Route all logging to stdout as JSON.

    Args:
        level (str | None):
            Root log level. Defaults to $LOG_LEVEL, then INFO.
    """
    log_level = (level or os.getenv(ENV.App.LOG_LEVEL, 'INFO')).upper()
    quiet_level = log_level if log_level == 'DEBUG' else 'WARNING'

    logging.config.dictConfig(
        {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {
                'json': {
                    '()': JsonFormatter,
                    'service': os.getenv(ENV.App.APP_NAME, 'shortlinks'),
                }
            },
            'handlers': {
                'stdout': {
                    'class': 'logging.StreamHandler',
                    'formatter': 'json',
                    'stream': 'ext://sys.stdout',
                }
            },
            'loggers': {name: {'level': quiet_level} for name in _QUIET_LOGGERS},
            'root': {
                'level': log_level,
                'handlers': ['stdout'],
            },
        }
    )
