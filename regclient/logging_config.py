"""Centralized logging configuration for regclient.

Every module logs under the "regclient" logger namespace; applications call
``configure_regclient_logging`` once to attach handlers.
"""

import logging
import logging.handlers
import os
from pathlib import Path
from typing import Optional, Union

# Environment variables
DEBUG_MODE = os.getenv("REGCLIENT_DEBUG", "0") == "1"
LOG_LEVEL = os.getenv("REGCLIENT_LOG_LEVEL", "DEBUG" if DEBUG_MODE else "WARNING")
TRACE_REQUESTS = os.getenv("REGCLIENT_TRACE_REQUESTS", "0") == "1"

ROOT_LOGGER_NAME = "regclient"

DETAILED_FORMAT = (
    "[%(asctime)s] [%(levelname)-8s] [%(name)s] [%(filename)s:%(lineno)d] %(message)s"
)
SIMPLE_FORMAT = "[%(asctime)s] [%(levelname)-8s] [%(name)s] %(message)s"

# Use detailed format in debug mode
LOG_FORMAT = DETAILED_FORMAT if DEBUG_MODE else SIMPLE_FORMAT


def _get_file_handler(log_file: Path, level: int) -> logging.FileHandler:
    """Create a rotating file handler for the given log file."""
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,  # 10 MB
        backupCount=5,
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    return handler


def _get_console_handler(level: int) -> logging.StreamHandler:
    """Create a console handler for streaming logs."""
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    return handler


def configure_regclient_logging(
    log_level: Optional[str] = None,
    include_console: bool = True,
    log_file: Optional[Union[str, Path]] = None,
) -> logging.Logger:
    """
    Configure the regclient logger.

    Args:
        log_level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        include_console: Whether to log to stderr
        log_file: Optional path of a rotating log file

    Returns:
        Configured logger instance
    """
    if log_level is None:
        log_level = LOG_LEVEL

    level = getattr(logging, log_level.upper(), logging.WARNING)

    logger = get_regclient_logger()
    logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if log_file is not None:
        logger.addHandler(_get_file_handler(Path(log_file), level))

    if include_console:
        logger.addHandler(_get_console_handler(level))

    return logger


def configure_module_logging(module_name: str) -> logging.Logger:
    """
    Get a child logger under the "regclient" namespace.

    It inherits the handlers and level set by configure_regclient_logging.

    Args:
        module_name: Module name (e.g., "cli")
    """
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{module_name}")


def get_regclient_logger() -> logging.Logger:
    """Get the main regclient logger (creates if doesn't exist)."""
    return logging.getLogger(ROOT_LOGGER_NAME)


class StructuredLogContext:
    """Helper for adding key=value context to log messages."""

    def __init__(self, **context):
        self.context = context

    def __str__(self):
        items = [f"{k}={v}" for k, v in self.context.items()]
        return " | ".join(items)
