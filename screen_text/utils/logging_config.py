"""Logging setup for screen-text.

All log output goes to stderr and to a log file. stdout is reserved for the
MCP stdio stream and must never receive log records.
"""
import logging
import os
import sys
from typing import Optional

from .path_config import get_logs_dir

ROOT_LOGGER_NAME = "screen_text"
DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(level: str = "INFO", fmt: str = DEFAULT_FORMAT,
                  log_file: Optional[str] = "screen_text.log") -> logging.Logger:
    """Configure the package logger with stderr and file handlers."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    # Idempotent: reconfiguring replaces the handlers installed earlier
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(fmt)

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if log_file:
        try:
            file_handler = logging.FileHandler(os.path.join(get_logs_dir(), log_file))
        except OSError as e:
            logger.warning(f"File logging disabled, cannot open {log_file}: {e}")
        else:
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    logger.propagate = False
    return logger
