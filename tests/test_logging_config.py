from __future__ import annotations

import logging

from quizplay.utils.logging_config import configure_logging


def test_returns_package_logger_and_quiets_http_client(monkeypatch):
    monkeypatch.setenv("QUIZPLAY_LOG_LEVEL", "debug")

    logger = configure_logging()

    assert logger.name == "quizplay"
    assert logging.getLogger("httpx").level == logging.WARNING
