"""Service for managing the collection of stored quizzes."""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from quizplay.constants.quiz_constants import (
    DEFAULT_AUTHOR,
    DEFAULT_CATEGORY,
    DIFFICULTY_LEVELS,
    MAX_OPTIONS,
    MIN_OPTIONS,
)
from quizplay.core.models import Quiz, QuizComment, QuizOption, QuizQuestion
from quizplay.core.quiz_documents import new_document_id, utc_now


class QuizValidationError(ValueError):
    """Raised when a quiz does not satisfy the authoring rules."""


class QuizNotFoundError(LookupError):
    """Raised when no quiz (or comment) matches the requested id."""


_UPDATABLE_FIELDS = frozenset(
    {
        "title",
        "questions",
        "seconds_per_question",
        "description",
        "category",
        "difficulty",
        "created_by",
        "is_public",
    }
)


class QuizRepository:
    """Manages the lifecycle and storage of quizzes, their likes and comments."""

    def __init__(self) -> None:
        self._quizzes: dict[str, Quiz] = {}

    def list_quizzes(self) -> list[Quiz]:
        """Return all quizzes, newest first."""
        return sorted(
            self._quizzes.values(),
            key=lambda quiz: quiz.created_at or utc_now(),
            reverse=True,
        )

    def get_quiz(self, quiz_id: str) -> Quiz:
        quiz = self._quizzes.get(quiz_id)
        if quiz is None:
            raise QuizNotFoundError(f"Quiz {quiz_id} not found")
        return quiz

    def create_quiz(self, quiz: Quiz) -> Quiz:
        prepared = self._prepare_quiz(quiz)
        now = utc_now()
        stored = replace(prepared, id=new_document_id(), likes=0, comments=[], created_at=now, updated_at=now)
        self._quizzes[stored.id] = stored
        return stored

    def update_quiz(self, quiz_id: str, changes: dict[str, Any]) -> Quiz:
        """Apply a partial update and re-validate the result."""
        current = self.get_quiz(quiz_id)
        unknown = set(changes) - _UPDATABLE_FIELDS
        if unknown:
            raise QuizValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        prepared = self._prepare_quiz(replace(current, **changes))
        updated = replace(prepared, updated_at=utc_now())
        self._quizzes[quiz_id] = updated
        return updated

    def delete_quiz(self, quiz_id: str) -> None:
        self.get_quiz(quiz_id)
        del self._quizzes[quiz_id]

    def like_quiz(self, quiz_id: str) -> int:
        quiz = self.get_quiz(quiz_id)
        quiz.likes += 1
        return quiz.likes

    def add_comment(self, quiz_id: str, text: str, username: str | None = None) -> QuizComment:
        quiz = self.get_quiz(quiz_id)
        cleaned_text = text.strip()
        if not cleaned_text:
            raise QuizValidationError("Comment text is required.")
        comment = QuizComment(
            id=new_document_id(),
            text=cleaned_text,
            username=(username or "").strip() or DEFAULT_AUTHOR,
            created_at=utc_now(),
        )
        quiz.comments.append(comment)
        return comment

    def delete_comment(self, quiz_id: str, comment_id: str) -> None:
        quiz = self.get_quiz(quiz_id)
        index = next((i for i, c in enumerate(quiz.comments) if c.id == comment_id), -1)
        if index < 0:
            raise QuizNotFoundError(f"Comment {comment_id} not found")
        quiz.comments.pop(index)

    def clear(self) -> None:
        self._quizzes = {}

    def _prepare_quiz(self, quiz: Quiz) -> Quiz:
        """Validate and normalize a quiz before storage."""
        title = quiz.title.strip()
        if not title:
            raise QuizValidationError("Quiz title is required.")
        if not quiz.questions:
            raise QuizValidationError("Quiz must contain at least one question.")
        if quiz.difficulty not in DIFFICULTY_LEVELS:
            raise QuizValidationError(f"Difficulty must be one of {', '.join(DIFFICULTY_LEVELS)}.")

        return replace(
            quiz,
            title=title,
            description=quiz.description.strip(),
            category=quiz.category.strip() or DEFAULT_CATEGORY,
            created_by=quiz.created_by.strip() or DEFAULT_AUTHOR,
            seconds_per_question=self._normalize_time_limit(quiz.seconds_per_question),
            questions=[self._prepare_question(q, n) for n, q in enumerate(quiz.questions, start=1)],
        )

    def _prepare_question(self, question: QuizQuestion, number: int) -> QuizQuestion:
        cleaned_text = question.text.strip()
        if not cleaned_text:
            raise QuizValidationError(f"Question {number} text must not be empty.")
        options = self._validate_options(question.options, number)
        return QuizQuestion(
            id=question.id or new_document_id(),
            text=cleaned_text,
            options=options,
            image_url=question.image_url or None,
            explanation=question.explanation.strip(),
        )

    @staticmethod
    def _validate_options(options: list[QuizOption], number: int) -> list[QuizOption]:
        if not MIN_OPTIONS <= len(options) <= MAX_OPTIONS:
            raise QuizValidationError(
                f"Question {number} must have between {MIN_OPTIONS} and {MAX_OPTIONS} options."
            )
        cleaned = [QuizOption(text=option.text.strip(), is_correct=option.is_correct) for option in options]
        if any(not option.text for option in cleaned):
            raise QuizValidationError(f"Question {number} has an option without text.")
        correct_count = sum(1 for option in cleaned if option.is_correct)
        if correct_count != 1:
            raise QuizValidationError(f"Question {number} must have exactly one correct option.")
        return cleaned

    @staticmethod
    def _normalize_time_limit(time_limit_seconds: int) -> int:
        if not isinstance(time_limit_seconds, int) or isinstance(time_limit_seconds, bool):
            raise QuizValidationError("Time limit must be provided as an integer number of seconds.")
        if time_limit_seconds <= 0:
            raise QuizValidationError("Time limit must be a positive integer.")
        return time_limit_seconds
