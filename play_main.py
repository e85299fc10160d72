"""Entry point for playing a quiz in the terminal."""

from __future__ import annotations

import argparse
import sys

from PySide6.QtCore import QCoreApplication

from quizplay.client.api_client import QuizApiClient, QuizClientError
from quizplay.constants.ai_constants import (
    DEFAULT_GENERATED_QUESTIONS,
    DEFAULT_GENERATION_DIFFICULTY,
)
from quizplay.constants.network_constants import DEFAULT_API_URL
from quizplay.core.quiz_documents import QuizDocumentError, quiz_from_generated
from quizplay.player import ConsolePlayer, SessionDriver
from quizplay.utils.logging_config import configure_logging


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Play a QuizPlay quiz in the terminal.")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("quiz_id", nargs="?", help="id of a stored quiz")
    source.add_argument("--topic", help="generate a quick quiz about this topic instead")
    parser.add_argument("--questions", type=int, default=DEFAULT_GENERATED_QUESTIONS)
    parser.add_argument("--difficulty", default=DEFAULT_GENERATION_DIFFICULTY)
    parser.add_argument("--api-url", default=DEFAULT_API_URL)
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Load the quiz, then run the session on a Qt event loop until it ends."""
    logger = configure_logging()
    args = _parse_args(sys.argv[1:] if argv is None else argv)

    app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])
    driver = SessionDriver()
    player = ConsolePlayer(driver)

    with QuizApiClient(args.api_url) as client:
        if args.topic:
            try:
                generated = client.generate_quiz(args.topic, args.questions, args.difficulty)
                quiz = quiz_from_generated(generated)
            except (QuizClientError, QuizDocumentError) as exc:
                logger.error("Quick quiz generation failed: %s", exc)
                print(f"Error: {exc}", file=sys.stderr)
                return 1
            loaded = driver.start(quiz)
        else:
            loaded = driver.load(args.quiz_id, client.fetch_quiz)

    if not loaded:
        return 1

    player.start_reading()
    app.exec()
    return player.exit_code


if __name__ == "__main__":
    sys.exit(main())
