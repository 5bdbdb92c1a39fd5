"""
Logging configuration for top2csv.

Console output goes to stderr so that CSV written to stdout stays clean.
"""
import logging
import os
import sys
from pathlib import Path

LOGGER_NAME = "top2csv"
LEVEL_ENV_VAR = "TOP2CSV_LOG_LEVEL"


def default_level() -> int:
    """Log level from the environment, falling back to INFO."""
    name = os.environ.get(LEVEL_ENV_VAR, "").upper()
    level = logging.getLevelName(name) if name else logging.INFO
    return level if isinstance(level, int) else logging.INFO


def setup_logging(level: int = logging.INFO, log_file: Path | None = None) -> logging.Logger:
    """
    Configure and return the package logger.

    Args:
        level: Console logging level.
        log_file: Optional file receiving DEBUG output with timestamps.

    Returns:
        The configured "top2csv" logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if log_file else level)

    # Remove existing handlers to avoid duplicates
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(fmt="[%(levelname)s] %(message)s"))
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger
