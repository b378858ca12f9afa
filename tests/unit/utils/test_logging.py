"""Tests for logging setup."""

from __future__ import annotations

import logging

import pytest
from rich.logging import RichHandler

from cloudnuke.utils.logging import setup_logging


@pytest.fixture(autouse=True)
def restore_logger():
    """Restore the package logger after each test."""
    logger = logging.getLogger("cloudnuke")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    logger.handlers = handlers
    logger.setLevel(level)
    logger.propagate = propagate


class TestSetupLogging:
    """Test suite for setup_logging."""

    def test_configures_rich_handler(self) -> None:
        """Test a single Rich handler is installed at the requested level."""
        logger = setup_logging("DEBUG")
        setup_logging("DEBUG")

        rich_handlers = [h for h in logger.handlers if isinstance(h, RichHandler)]
        assert len(rich_handlers) == 1
        assert logger.level == logging.DEBUG

    def test_quiets_boto(self) -> None:
        """Test boto loggers are raised to WARNING unless verbose."""
        setup_logging("INFO")
        assert logging.getLogger("botocore").level == logging.WARNING

        setup_logging("INFO", verbose=True)
        assert logging.getLogger("botocore").level == logging.DEBUG

    def test_invalid_level(self) -> None:
        """Test an unknown level name raises ValueError."""
        with pytest.raises(ValueError, match="Invalid log level"):
            setup_logging("LOUD")
