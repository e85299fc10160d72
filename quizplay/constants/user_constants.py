"""Account rules for quiz authors."""

MIN_USERNAME_LENGTH: int = 3
MIN_PASSWORD_LENGTH: int = 6
PASSWORD_HASH_ROUNDS: int = 10
