"""Network configuration constants for the quiz service and its clients."""

import os

from dotenv import find_dotenv, load_dotenv

load_dotenv(find_dotenv(usecwd=True))

DEFAULT_HOST: str = os.getenv("QUIZPLAY_HOST", "0.0.0.0")
DEFAULT_PORT: int = int(os.getenv("QUIZPLAY_PORT", "3001"))
CORS_ALLOWED_ORIGINS: tuple[str, ...] = tuple(
    origin.strip() for origin in os.getenv("QUIZPLAY_CORS_ORIGINS", "*").split(",") if origin.strip()
)

DEFAULT_API_URL: str = os.getenv("QUIZPLAY_API_URL", "http://localhost:3001/api")
API_TIMEOUT_SECONDS: float = 30.0
