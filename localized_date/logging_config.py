"""
Centralized logging configuration for localized_date.

Library modules only ask for loggers; handlers are installed by
setup_logging(), which the CLI calls.
"""

import logging
from pathlib import Path
from typing import Optional

from rich.logging import RichHandler

ROOT_LOGGER_NAME = "localized_date"


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None,
) -> logging.Logger:
    """
    Configure logging for all localized_date modules.

    Args:
        level: Logging level (default: INFO)
        log_file: Optional file path for log output
        format_string: Optional custom format string for the file handler

    Returns:
        The package root logger
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)

    # Avoid stacking handlers when called repeatedly
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    console_handler = RichHandler(
        level=level, show_path=False, rich_tracebacks=True, markup=False
    )
    console_handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(console_handler)

    if log_file:
        if format_string is None:
            format_string = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(format_string))
        file_handler.setLevel(level)
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger nested under the package root logger."""
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


# Library default: stay silent unless the application configures logging
logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())
