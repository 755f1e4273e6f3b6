"""Application-wide logging initialization

IMPORTANT: Call `initialize_logging()` once at process start, before the
server or any store is created. Uvicorn's loggers are routed through the
same JSON handler.

Logging format (one JSON object per line):
{
    "timestamp": "2026-01-12T12:00:00.000Z",
    "level": "INFO",
    "logger": "shortener.api.routes.shorten_url",
    "message": "Short URL created.",
    "shortcode": "YBbxJEcQ9vq",
    "event": "SHORT_URL_CREATED"
}

Exceptions logged with `logger.exception()` are attached under the "exc_info" key.
"""

import json
import logging
import logging.config
from datetime import datetime, UTC

from shortener.constants import Defaults


LOG_LEVELS = frozenset({'debug', 'info', 'warning', 'warn', 'error', 'critical'})

# Attributes every LogRecord carries; anything else was passed through `extra`
_RECORD_ATTRS = frozenset(logging.LogRecord('', logging.INFO, '', 0, '', (), None).__dict__) | {'asctime', 'message', 'color_message'}


class JsonFormatter(logging.Formatter):
    """Render records as single-line JSON, merging `extra` fields into the top level"""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=UTC)
        entry = {
            'timestamp': created.isoformat(timespec='milliseconds').replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        entry.update((key, value) for key, value in record.__dict__.items() if key not in _RECORD_ATTRS)

        if record.exc_info:
            entry['exc_info'] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def resolve_log_level(level: str) -> str:
    """Map a configured level name to a logging module level name, falling back to INFO."""
    level = (level or Defaults.LOG_LEVEL).strip().lower()
    if level not in LOG_LEVELS:
        return 'INFO'
    return 'WARNING' if level == 'warn' else level.upper()


def initialize_logging(level: str = Defaults.LOG_LEVEL) -> None:
    resolved = resolve_log_level(level)
    logging.config.dictConfig(
        {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {'json': {'()': JsonFormatter}},
            'handlers': {
                'console': {
                    'class': 'logging.StreamHandler',
                    'formatter': 'json',
                    'stream': 'ext://sys.stdout',
                },
            },
            'loggers': {
                # Drop uvicorn's own handlers, let records reach the root logger
                'uvicorn': {'handlers': [], 'propagate': True},
                'uvicorn.error': {'handlers': [], 'propagate': True},
                'uvicorn.access': {'handlers': [], 'propagate': True},
            },
            'root': {'level': resolved, 'handlers': ['console']},
        }
    )
