"""
Logging configuration shared by the CLI and the HTTP service.
Plain text by default, JSON lines when asked for.
"""

import logging
import sys
from typing import Optional, TextIO

from pythonjsonlogger import jsonlogger

DEFAULT_FORMAT = "%(levelname)s - %(name)s - %(message)s"


def setup_logging(
    level: str = "INFO",
    json_format: bool = False,
    stream: Optional[TextIO] = None,
    fmt: Optional[str] = None,
) -> None:
    """
    Configure the root logger with a single stream handler.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Emit one JSON object per record if True
        stream: Where to write; stderr by default so stdout stays clean for output
        fmt: Format string for plain text records
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    # Remove any existing handlers
    root_logger.handlers.clear()

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    if json_format:
        formatter = jsonlogger.JsonFormatter(
            "%(timestamp)s %(levelname)s %(name)s %(message)s",
            timestamp=True,
        )
    else:
        formatter = logging.Formatter(fmt or DEFAULT_FORMAT)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with a given name."""
    return logging.getLogger(name)
