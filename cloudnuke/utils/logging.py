"""Logging configuration."""

from __future__ import annotations

import logging

from rich.logging import RichHandler

LOGGER_NAME = "cloudnuke"

# Third-party loggers that are noisy at DEBUG
_QUIET_LOGGERS = ("boto3", "botocore", "urllib3", "s3transfer")


def setup_logging(level: str = "INFO", verbose: bool = False) -> logging.Logger:
    """Configure the cloudnuke logger with a Rich handler.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR)
        verbose: Show timestamps and source paths, and keep boto logging at DEBUG

    Returns:
        The configured package logger
    """
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level}")

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(numeric_level)
    logger.propagate = False

    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        level=numeric_level,
        show_time=verbose,
        show_path=verbose,
        rich_tracebacks=verbose,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if verbose else logging.WARNING)

    return logger
