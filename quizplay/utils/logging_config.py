"""Logging configuration helpers for QuizPlay."""

from __future__ import annotations

import logging
from logging import Logger
import os

_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_QUIET_LOGGERS = ("httpx", "httpcore")


def configure_logging(level: int | str | None = None) -> Logger:
    """Configure logging for the server and the player and return the package logger.

    ``level`` defaults to ``QUIZPLAY_LOG_LEVEL`` (``INFO`` when unset). The HTTP
    client libraries only report warnings so request lines do not drown out
    session output.
    """
    if level is None:
        level = os.getenv("QUIZPLAY_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(level=level, format=_LOG_FORMAT)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return logging.getLogger("quizplay")
