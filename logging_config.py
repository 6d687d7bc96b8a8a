"""
Logging setup: readable console output plus an optional rotating JSON file.
"""
import json
import logging
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Optional

import config

# Attributes present on every LogRecord, excluded from the JSON extras dict
_LOG_RECORD_BUILTIN_ATTRS = {
    'args', 'asctime', 'created', 'exc_info', 'exc_text', 'filename',
    'funcName', 'levelname', 'levelno', 'lineno', 'message', 'module',
    'msecs', 'msg', 'name', 'pathname', 'process', 'processName',
    'relativeCreated', 'stack_info', 'thread', 'threadName', 'taskName',
}

CONSOLE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class JSONFormatter(logging.Formatter):
    """Formats log records as single-line JSON for machine-readable output."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        # Merge any extra={} fields passed by the caller
        for key, val in record.__dict__.items():
            if key not in _LOG_RECORD_BUILTIN_ATTRS and key not in entry:
                entry[key] = val
        return json.dumps(entry, default=str)


def configure_logging(
    level: Optional[str] = None,
    json_console: Optional[bool] = None,
    log_file: Optional[str] = None,
) -> list:
    """Install handlers on the root logger and return them.

    Arguments default to the values in ``config``.  Calling this again
    replaces the handlers from the previous call.
    """
    level = level or config.LOG_LEVEL
    json_console = config.LOG_JSON if json_console is None else json_console
    log_file = log_file or config.LOG_FILE

    console = logging.StreamHandler()
    console.setFormatter(
        JSONFormatter() if json_console else logging.Formatter(CONSOLE_FORMAT)
    )
    handlers = [console]

    if log_file:
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=config.LOG_MAX_BYTES,
            backupCount=config.LOG_BACKUP_COUNT,
            encoding='utf-8',
        )
        file_handler.setFormatter(JSONFormatter())
        handlers.append(file_handler)

    logging.basicConfig(level=level, handlers=handlers, force=True)
    return handlers
