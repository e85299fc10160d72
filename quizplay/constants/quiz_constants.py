"""Quiz-related constants shared across the player, client and server."""

DEFAULT_TIME_LIMIT_SECONDS: int = 15
FEEDBACK_COUNTDOWN_SECONDS: int = 3
TIMEOUT_ADVANCE_DELAY_SECONDS: int = 1
TICK_INTERVAL_MS: int = 1000

MIN_OPTIONS: int = 2
MAX_OPTIONS: int = 6
DIFFICULTY_LEVELS: tuple[str, ...] = ("Easy", "Medium", "Hard")
DEFAULT_DIFFICULTY: str = "Medium"
DEFAULT_CATEGORY: str = "General"
DEFAULT_AUTHOR: str = "Anonymous"
