"""
Logging configuration for xignore.

Provides logging that:
- Writes to stderr so stdout stays free for match results
- Outputs JSON when requested (for log collectors)
- Supports log rotation for file-based logging
- Includes custom TRACE level for per-pattern debugging
"""

import sys
import logging
import json
import os
from datetime import datetime, timezone
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Optional, Any

# Define TRACE level (lower number = more detailed)
TRACE_LEVEL = 5
logging.addLevelName(TRACE_LEVEL, "TRACE")

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


# Add a trace method to the logger
def trace(self, message, *args, **kwargs):
    if self.isEnabledFor(TRACE_LEVEL):
        self._log(TRACE_LEVEL, message, args, **kwargs)


def add_trace_to_logger():
    """Ensure trace method is available on all logger instances"""
    if not hasattr(logging.Logger, 'trace'):
        logging.Logger.trace = trace


add_trace_to_logger()


class JsonFormatter(logging.Formatter):
    """JSON formatter, one object per line"""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': record.levelname,
            'component': record.name,
            'message': record.getMessage(),
            'pid': os.getpid(),
        }

        # Context fields attached by log_with_context
        if hasattr(record, 'extra'):
            log_data.update(record.extra)

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def _resolve_level(level_str: str) -> int:
    if level_str.upper() == 'TRACE':
        return TRACE_LEVEL
    return getattr(logging, level_str.upper(), logging.WARNING)


def configure_logging(
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
    json_format: Optional[bool] = None,
    enable_rotation: bool = True,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
) -> None:
    """
    Configure root logging for the command line tool.

    Args:
        log_level: Override log level (defaults to XIGNORE_LOG_LEVEL, then LOG_LEVEL, then WARNING)
        log_file: Optional path to an additional log file
        json_format: Emit JSON lines (defaults to XIGNORE_LOG_FORMAT=json)
        enable_rotation: Enable log rotation for the file handler
        max_bytes: Maximum size of log file before rotation
        backup_count: Number of backup files to keep
    """
    level_str = (log_level or os.environ.get('XIGNORE_LOG_LEVEL')
                 or os.environ.get('LOG_LEVEL', 'WARNING'))
    level = _resolve_level(level_str)

    if json_format is None:
        json_format = os.environ.get('XIGNORE_LOG_FORMAT', '').lower() == 'json'

    formatter = JsonFormatter() if json_format else logging.Formatter(DEFAULT_FORMAT)

    # Clear any existing handlers
    root_logger = logging.getLogger()
    root_logger.handlers = []

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        if enable_rotation:
            file_handler = RotatingFileHandler(
                str(log_path),
                maxBytes=max_bytes,
                backupCount=backup_count
            )
        else:
            file_handler = logging.FileHandler(str(log_path))
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    root_logger.setLevel(level)

    logger = logging.getLogger('xignore')
    logger.debug(f"Logging configured - Level: {level_str.upper()}, JSON: {json_format}")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the given name.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger instance with the trace method available
    """
    add_trace_to_logger()
    return logging.getLogger(name)


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    **context: Any
) -> None:
    """
    Log a message with additional context fields.

    Args:
        logger: Logger instance
        level: Log level (e.g., logging.INFO)
        message: Log message
        **context: Additional fields to include in structured logs
    """
    extra = {'extra': context} if context else {}
    logger.log(level, message, extra=extra)
