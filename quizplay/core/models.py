"""Domain models for the quiz application."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from quizplay.constants.quiz_constants import (
    DEFAULT_AUTHOR,
    DEFAULT_CATEGORY,
    DEFAULT_DIFFICULTY,
    DEFAULT_TIME_LIMIT_SECONDS,
)


@dataclass(slots=True)
class QuizOption:
    """A single answer choice of a question."""

    text: str
    is_correct: bool = False


@dataclass(slots=True)
class QuizQuestion:
    """Multiple-choice question; exactly one option is expected to be correct."""

    id: str
    text: str
    options: list[QuizOption]
    image_url: str | None = None
    explanation: str = ""

    def correct_option_index(self) -> int | None:
        """Return the index of the first option flagged correct, if any."""
        return next((i for i, option in enumerate(self.options) if option.is_correct), None)


@dataclass(slots=True)
class QuizComment:
    """A reader comment attached to a quiz."""

    id: str
    text: str
    username: str
    created_at: datetime


@dataclass(slots=True)
class Quiz:
    """A quiz document as stored by the backend and played by a session."""

    id: str
    title: str
    questions: list[QuizQuestion]
    seconds_per_question: int = DEFAULT_TIME_LIMIT_SECONDS
    description: str = ""
    category: str = DEFAULT_CATEGORY
    difficulty: str = DEFAULT_DIFFICULTY
    created_by: str = DEFAULT_AUTHOR
    is_public: bool = True
    likes: int = 0
    comments: list[QuizComment] = field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(slots=True, frozen=True)
class EvaluationResult:
    """Outcome of answering (or timing out on) one question."""

    question_index: int
    selected_option_index: int | None
    correct_option_index: int
    is_correct: bool
    timed_out: bool = False


@dataclass(slots=True, frozen=True)
class SessionResult:
    """Final score reported when a session finishes."""

    score: int
    total: int


@dataclass(slots=True)
class User:
    """A registered quiz author. Only the bcrypt hash of the password is kept."""

    id: str
    username: str
    email: str
    password_hash: bytes
    created_at: datetime | None = None
    updated_at: datetime | None = None
