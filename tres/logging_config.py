"""Centralized logging configuration for tres."""

from __future__ import annotations

import logging
import sys

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def setup_logging(level: str = "WARNING", log_file: str | None = None) -> None:
    """Configure the ``tres`` logger.

    Diagnostics always go to stderr so that rendered output on stdout
    can be piped into files or other tools untouched.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR). Default: WARNING.
        log_file: Optional path to log file. If provided, logs are written to both
                  stderr and the file.

    Example:
        >>> setup_logging("DEBUG")  # Show every request
        >>> setup_logging("INFO", "tres.log")  # Progress messages + file logging
    """
    logger = logging.getLogger("tres")
    logger.setLevel(LEVELS.get(level.upper(), logging.WARNING))

    # Remove any existing handlers to avoid duplicates
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        logger.addHandler(file_handler)

    logger.propagate = False
