"""Logging setup shared by the CLI and library consumers."""

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# HTTP client internals log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore")


def setup_logging(
    level: int | str = logging.INFO,
    log_file: Path | None = None,
    format_string: str = LOG_FORMAT,
) -> None:
    """Configure root logging for a scan or ingestion run.

    Args:
        level: Logging level, as a number or a name such as ``"DEBUG"``
        log_file: Optional UTF-8 log file, created with its parent directories
        format_string: Format for every handler
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {level}")

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(level=level, format=format_string, handlers=handlers, force=True)

    # Request lines are only useful when debugging the submission service
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(level if level <= logging.DEBUG else logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get the module logger (call with ``__name__``)."""
    return logging.getLogger(name)
