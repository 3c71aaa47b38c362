"""Tests for logging configuration."""

import logging
import logging.handlers

import pytest

from regclient.logging_config import (
    ROOT_LOGGER_NAME,
    StructuredLogContext,
    configure_module_logging,
    configure_regclient_logging,
    get_regclient_logger,
)

pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def restore_regclient_logger():
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    handlers, level = list(logger.handlers), logger.level
    yield
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        logger.addHandler(handler)
    logger.setLevel(level)


def test_console_only():
    """Test the default console configuration."""
    logger = configure_regclient_logging(log_level="info")
    assert logger is get_regclient_logger()
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0], logging.StreamHandler)


def test_file_handler(tmp_path):
    """Test that a rotating file handler is added and its directory created."""
    log_file = tmp_path / "logs" / "regclient.log"
    logger = configure_regclient_logging(
        log_level="DEBUG", include_console=False, log_file=log_file
    )
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0], logging.handlers.RotatingFileHandler)

    configure_module_logging("test").debug("hello file")
    logger.handlers[0].flush()
    assert "hello file" in log_file.read_text()


def test_package_logger_carries_configuration():
    """Test that the package logger is the one configure sets up."""
    configure_regclient_logging(log_level="ERROR", include_console=False)
    logger = get_regclient_logger()
    assert logger.name == ROOT_LOGGER_NAME
    assert logger.level == logging.ERROR
    assert logger.handlers == []


def test_reconfigure_does_not_duplicate_handlers():
    """Test that calling configure twice replaces the handlers."""
    configure_regclient_logging()
    logger = configure_regclient_logging()
    assert len(logger.handlers) == 1


def test_unknown_level_falls_back_to_warning():
    """Test that an unknown level name does not raise."""
    logger = configure_regclient_logging(log_level="chatty")
    assert logger.level == logging.WARNING


def test_module_logger_namespace():
    """Test that module loggers live under the regclient logger."""
    logger = configure_module_logging("cli_diagnose")
    assert logger.name == "regclient.cli_diagnose"
    assert logger.parent is get_regclient_logger()


def test_structured_log_context():
    """Test key=value rendering."""
    context = StructuredLogContext(method="GET", status=500)
    assert str(context) == "method=GET | status=500"
