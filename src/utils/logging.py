"""Structured logging setup for the quality kit.

Provides a centralized logging configuration with console and optional
file handlers. Log level and format are driven by config.yaml and can
be raised from the command line with -v.
"""

import logging
import sys
from typing import Optional

# Every module logs through logging.getLogger(__name__), so configuring
# the top-level package logger covers the whole tool.
PACKAGE_LOGGER = __name__.split(".")[0]


def resolve_level(level: str, verbosity: int = 0) -> int:
    """Turn a configured level name and a -v count into a numeric level.

    Args:
        level: Logging level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        verbosity: Number of -v flags given; each one lowers the threshold
            by one step, bottoming out at DEBUG.

    Returns:
        The numeric logging level.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    return max(logging.DEBUG, numeric_level - 10 * verbosity)


def setup_logging(
    level: str = "INFO",
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    log_file: Optional[str] = None,
    verbosity: int = 0,
) -> logging.Logger:
    """Configure the package logger with console and optional file output.

    Clears any existing handlers to prevent duplicate log entries across
    calls. Console output goes to stderr so that diffs and JSON written
    to stdout stay machine-readable.

    Args:
        level: Logging level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: Format string for log messages.
        log_file: Optional file path for log output. If None, logs only
            to the console.
        verbosity: Number of -v flags passed on the command line.

    Returns:
        The configured package logger instance.
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.handlers.clear()
    package_logger.propagate = False

    numeric_level = resolve_level(level, verbosity)
    package_logger.setLevel(numeric_level)

    formatter = logging.Formatter(log_format)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    package_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(formatter)
        package_logger.addHandler(file_handler)

    package_logger.debug(
        "Logging initialized at level %s", logging.getLevelName(numeric_level)
    )
    return package_logger
