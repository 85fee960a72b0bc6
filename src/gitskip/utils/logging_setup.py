"""
Logging configuration for gitskip.

Provides environment-aware logging that:
- Writes to stderr so generated commands on stdout stay clean
- Outputs JSON when GITSKIP_LOG_JSON is set (CI and editor integrations)
- Supports an optional rotating log file
- Includes custom TRACE level for per-line translation output
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


def trace(self, message, *args, **kwargs):
    if self.isEnabledFor(TRACE_LEVEL):
        self._log(TRACE_LEVEL, message, args, **kwargs)


logging.Logger.trace = trace


def add_trace_to_logger():
    """Ensure trace method is available on all logger instances"""
    if not hasattr(logging.Logger, 'trace'):
        logging.Logger.trace = trace


class JsonFormatter(logging.Formatter):
    """One JSON object per record, for machine consumers"""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'component': record.name,
            'message': record.getMessage(),
            'pid': os.getpid(),
        }

        if hasattr(record, 'extra'):
            log_data.update(record.extra)

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def _env_flag(name: str) -> bool:
    return os.environ.get(name, '').lower() in ('1', 'true', 'yes', 'on')


def configure_logging(
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
    enable_rotation: bool = True,
    max_bytes: int = 5 * 1024 * 1024,  # 5MB
    backup_count: int = 3,
    json_output: Optional[bool] = None,
) -> None:
    """
    Configure logging based on environment.

    Args:
        log_level: Override log level (defaults to GITSKIP_LOG_LEVEL, LOG_LEVEL or WARNING)
        log_file: Path to an additional log file (or GITSKIP_LOG_FILE)
        enable_rotation: Enable log rotation for the file handler
        max_bytes: Maximum size of log file before rotation
        backup_count: Number of backup files to keep
        json_output: Force JSON records (defaults to GITSKIP_LOG_JSON)
    """
    add_trace_to_logger()
    level_str = log_level or os.environ.get('GITSKIP_LOG_LEVEL') or os.environ.get('LOG_LEVEL', 'WARNING')

    if level_str.upper() == 'TRACE':
        level = TRACE_LEVEL
    else:
        level = getattr(logging, level_str.upper(), logging.WARNING)

    if json_output is None:
        json_output = _env_flag('GITSKIP_LOG_JSON')

    root_logger = logging.getLogger()
    root_logger.handlers = []

    handler = logging.StreamHandler(sys.stderr)
    if json_output:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    root_logger.addHandler(handler)

    log_file = log_file or os.environ.get('GITSKIP_LOG_FILE')
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
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))
        root_logger.addHandler(file_handler)

    root_logger.setLevel(level)

    # watchdog is chatty at DEBUG
    logging.getLogger('watchdog').setLevel(logging.WARNING)

    logger = logging.getLogger('gitskip')
    logger.debug(f"Logging configured - Level: {level_str.upper()}, JSON: {json_output}")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the given name.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured logger instance
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
