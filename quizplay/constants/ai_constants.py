"""Settings for the AI quiz generator and its on-disk cache."""

import os
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

load_dotenv(find_dotenv(usecwd=True))

OPENAI_API_KEY: str | None = os.getenv("OPENAI_API_KEY")
OPENAI_API_URL: str = "https://api.openai.com/v1/chat/completions"
OPENAI_MODEL: str = "gpt-3.5-turbo"
OPENAI_TEMPERATURE: float = 0.4
OPENAI_MAX_TOKENS: int = 1000
OPENAI_TOP_P: float = 0.9
OPENAI_TIMEOUT_SECONDS: float = 60.0
SYSTEM_PROMPT: str = "Generate concise quiz content in exact JSON format. Focus on factual accuracy."

MIN_GENERATED_QUESTIONS: int = 3
MAX_GENERATED_QUESTIONS: int = 5
DEFAULT_GENERATED_QUESTIONS: int = 3
GENERATION_DIFFICULTIES: tuple[str, ...] = ("easy", "medium", "hard")
DEFAULT_GENERATION_DIFFICULTY: str = "medium"

DEFAULT_CACHE_FILE: Path = Path(os.getenv("QUIZPLAY_CACHE_FILE", "cache/quiz-cache.json"))
CACHE_FLUSH_INTERVAL_SECONDS: int = 5 * 60
