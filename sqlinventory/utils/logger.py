"""Structured JSON logging configuration."""

import logging
import sys
from pathlib import Path
from typing import Union

from pythonjsonlogger import jsonlogger

LOG_FORMAT = '%(asctime)s %(name)s %(levelname)s %(message)s'


def _json_formatter() -> jsonlogger.JsonFormatter:
    return jsonlogger.JsonFormatter(LOG_FORMAT, timestamp=True)


def setup_logger(name: str = "sqlinventory", level: str = "INFO") -> logging.Logger:
    """
    Configure structured JSON logging.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        logging.Logger: Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))

    # Remove existing handlers to avoid duplicates
    logger.handlers = []

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_json_formatter())
    logger.addHandler(handler)

    # Don't propagate to root logger
    logger.propagate = False

    return logger


def add_transcript_handler(logger: logging.Logger, path: Union[str, Path]) -> logging.FileHandler:
    """
    Mirror everything the logger emits into a run transcript file.

    Args:
        logger: Logger returned by setup_logger
        path: Transcript file path (parent directories are created)

    Returns:
        logging.FileHandler: The attached handler, so callers can close it
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(_json_formatter())
    logger.addHandler(handler)
    return handler
