"""Logging configuration for pixmill."""

from __future__ import annotations

import logging
import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

# Package-level logger name
LOGGER_NAME = "pixmill"

_LEVEL_PREFIXES = {
    logging.DEBUG: "[debug] ",
    logging.WARNING: "Warning: ",
    logging.ERROR: "Error: ",
    logging.CRITICAL: "Error: ",
}


def get_logger(name: str | None = None) -> logging.Logger:
    """Get a logger for a pixmill module.

    Args:
        name: Module name (e.g., __name__). If None, returns root pixmill logger.

    Returns:
        Logger instance
    """
    if name is None:
        return logging.getLogger(LOGGER_NAME)
    if name == LOGGER_NAME or name.startswith(f"{LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


class ConsoleFormatter(logging.Formatter):
    """Plain messages for INFO, short level prefixes for everything else."""

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        prefix = _LEVEL_PREFIXES.get(record.levelno, "")
        if record.exc_info and record.levelno >= logging.ERROR:
            return f"{prefix}{message}\n{self.formatException(record.exc_info)}"
        return f"{prefix}{message}"


class InfoFilter(logging.Filter):
    """Filter that only allows records below WARNING level."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < logging.WARNING


def setup_logging(
    verbosity: int = 0,
    quiet: bool = False,
    log_file: Path | None = None,
) -> logging.Logger:
    """Configure logging for the pixm CLI.

    Args:
        verbosity: 0=normal, 1=verbose (-v, per-step details), 2=debug (-vv)
        quiet: If True, suppress all output except errors
        log_file: Optional file path receiving every record

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if not isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)
            handler.close()

    if quiet:
        console_level = logging.ERROR
    elif verbosity >= 2:
        console_level = logging.DEBUG
    else:
        console_level = logging.INFO

    logger.setLevel(logging.DEBUG)

    # INFO/DEBUG go to stdout, WARNING and above to stderr
    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(console_level)
    stdout_handler.setFormatter(ConsoleFormatter())
    stdout_handler.addFilter(InfoFilter())
    logger.addHandler(stdout_handler)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.WARNING)
    stderr_handler.setFormatter(ConsoleFormatter())
    logger.addHandler(stderr_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


@contextmanager
def log_duration(logger: logging.Logger, label: str) -> Iterator[None]:
    """Log how long the wrapped block took, at DEBUG level."""
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.debug("%s took %.1f ms", label, elapsed_ms)
