"""Static metadata describing QuizPlay."""

APP_NAME = "QuizPlay"
APP_VERSION = "1.0.0"
APP_ABOUT_TEXT = (
    "QuizPlay is a quiz authoring and playing service built with FastAPI and Qt. "
    "Create quizzes, generate new ones with AI, and play them against the clock."
)

API_ENDPOINTS: tuple[str, ...] = (
    "/api/quizzes",
    "/api/users",
    "/api/ai/generate-quiz",
    "/health",
)
