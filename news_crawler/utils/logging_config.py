"""Logging configuration for the news crawler."""

import logging
import os
import sys
from typing import Optional


LOG_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s'
FILE_LOG_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)s | %(filename)s:%(lineno)d | %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Libraries that log every connection or browser event at INFO/DEBUG
NOISY_LOGGERS = ('aiosqlite', 'asyncio', 'playwright', 'sqlalchemy.engine', 'urllib3')

_OPERATION_LEVELS = {
    'started': logging.INFO,
    'completed': logging.INFO,
    'failed': logging.ERROR,
}


class ColoredFormatter(logging.Formatter):
    """Colors the level name for terminal output."""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def format(self, record):
        original = record.levelname
        record.levelname = f"{self.COLORS.get(original, self.RESET)}{original}{self.RESET}"
        try:
            return super().format(record)
        finally:
            # Other handlers share the record
            record.levelname = original


def _console_handler(use_colors: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    formatter_class = ColoredFormatter if use_colors and sys.stdout.isatty() else logging.Formatter
    handler.setFormatter(formatter_class(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def _file_handler(log_file: str) -> logging.Handler:
    log_dir = os.path.dirname(log_file)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    handler = logging.FileHandler(log_file, encoding='utf-8')
    handler.setFormatter(logging.Formatter(fmt=FILE_LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logging(level: str = "INFO", log_file: Optional[str] = None, use_colors: bool = True) -> None:
    """
    Configure the root logger for a crawler process.

    Args:
        level: Log level name; unknown names fall back to INFO
        log_file: Also write to this file (with source locations)
        use_colors: Color level names when stdout is a terminal
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.handlers.clear()

    root_logger.addHandler(_console_handler(use_colors))
    if log_file:
        root_logger.addHandler(_file_handler(log_file))

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def log_operation(logger: logging.Logger, operation: str, status: str, **context):
    """
    Log one line ``operation | status | key=value | ...``.

    ``failed`` is logged as an error, ``started``/``completed`` as info,
    anything else at debug level.
    """
    parts = [operation, status]
    parts.extend(f"{key}={value}" for key, value in context.items())
    logger.log(_OPERATION_LEVELS.get(status, logging.DEBUG), " | ".join(parts))
