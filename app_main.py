"""Application entry point for the QuizPlay API server."""

from __future__ import annotations

from quizplay.constants.ai_constants import DEFAULT_CACHE_FILE, OPENAI_API_KEY
from quizplay.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from quizplay.core.quiz_manager import QuizManager
from quizplay.core.services.quiz_cache import QuizCache
from quizplay.core.services.quiz_generator import QuizGenerator
from quizplay.server.api_server import create_api_app, run_api_server
from quizplay.utils.logging_config import configure_logging


def main() -> None:
    """Initialize logging and configuration, then serve the API.

    Settings come from the environment, with a ``.env`` file in the working
    directory loaded by the constants modules.
    """
    logger = configure_logging()
    logger.info("Starting QuizPlay API server…")

    cache = QuizCache(DEFAULT_CACHE_FILE)
    generator = QuizGenerator(cache, api_key=OPENAI_API_KEY)
    quiz_manager = QuizManager(generator)
    app = create_api_app(quiz_manager, cache)

    logger.info("API available at http://%s:%d/api", DEFAULT_HOST, DEFAULT_PORT)
    try:
        run_api_server(app, host=DEFAULT_HOST, port=DEFAULT_PORT)
    finally:
        generator.close()


if __name__ == "__main__":
    main()
