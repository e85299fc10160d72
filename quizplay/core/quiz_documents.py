"""Conversion between quiz models and the JSON documents exchanged over HTTP.

Document shape (camelCase, as served by the backend):

    {
      "_id": "...", "title": "...", "description": "...",
      "category": "General", "difficulty": "Medium",
      "timePerQuestion": 15, "createdBy": "Anonymous", "isPublic": true,
      "likes": 0, "createdAt": "...", "updatedAt": "...",
      "questions": [
        {"_id": "...", "text": "...", "imageUrl": null, "explanation": "",
         "options": [{"text": "...", "isCorrect": true}, ...]}
      ],
      "comments": [{"_id": "...", "text": "...", "username": "...", "createdAt": "..."}]
    }

Generated quizzes coming from the AI proxy use a different, flatter shape
(``question``/``options``/``correctAnswer``) and are converted with
``quiz_from_generated``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from quizplay.constants.quiz_constants import (
    DEFAULT_AUTHOR,
    DEFAULT_CATEGORY,
    DEFAULT_DIFFICULTY,
    DEFAULT_TIME_LIMIT_SECONDS,
)
from quizplay.core.models import Quiz, QuizComment, QuizOption, QuizQuestion, User


class QuizDocumentError(ValueError):
    """Raised when a JSON document does not describe a quiz."""


def new_document_id() -> str:
    return uuid4().hex


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def quiz_from_document(document: dict[str, Any]) -> Quiz:
    """Build a ``Quiz`` from a backend document."""
    if not isinstance(document, dict):
        raise QuizDocumentError("Quiz document must be a JSON object.")
    raw_questions = document.get("questions")
    if not isinstance(raw_questions, list):
        raise QuizDocumentError("Quiz document has no question list.")

    seconds = document.get("timePerQuestion", document.get("secondsPerQuestion"))
    try:
        return Quiz(
            id=str(document.get("_id") or document.get("id") or ""),
            title=str(document.get("title", "")),
            questions=[_question_from_document(q) for q in raw_questions],
            seconds_per_question=int(seconds) if seconds else DEFAULT_TIME_LIMIT_SECONDS,
            description=document.get("description") or "",
            category=document.get("category") or DEFAULT_CATEGORY,
            difficulty=document.get("difficulty") or DEFAULT_DIFFICULTY,
            created_by=document.get("createdBy") or DEFAULT_AUTHOR,
            is_public=bool(document.get("isPublic", True)),
            likes=int(document.get("likes", 0)),
            comments=[comment_from_document(c) for c in document.get("comments") or []],
            created_at=_parse_timestamp(document.get("createdAt")),
            updated_at=_parse_timestamp(document.get("updatedAt")),
        )
    except (TypeError, ValueError, AttributeError) as exc:
        raise QuizDocumentError(f"Malformed quiz document: {exc}") from exc


def quiz_to_document(quiz: Quiz) -> dict[str, Any]:
    """Serialize a ``Quiz`` into the backend document shape."""
    return {
        "_id": quiz.id,
        "title": quiz.title,
        "description": quiz.description,
        "category": quiz.category,
        "difficulty": quiz.difficulty,
        "timePerQuestion": quiz.seconds_per_question,
        "createdBy": quiz.created_by,
        "isPublic": quiz.is_public,
        "likes": quiz.likes,
        "questions": [_question_to_document(q) for q in quiz.questions],
        "comments": [comment_to_document(c) for c in quiz.comments],
        "createdAt": _format_timestamp(quiz.created_at),
        "updatedAt": _format_timestamp(quiz.updated_at),
    }


def quiz_summary_document(quiz: Quiz) -> dict[str, Any]:
    """Listing view of a quiz, without questions or comments."""
    return {
        "_id": quiz.id,
        "title": quiz.title,
        "description": quiz.description,
        "category": quiz.category,
        "difficulty": quiz.difficulty,
        "createdAt": _format_timestamp(quiz.created_at),
    }


def comment_to_document(comment: QuizComment) -> dict[str, Any]:
    return {
        "_id": comment.id,
        "text": comment.text,
        "username": comment.username,
        "createdAt": _format_timestamp(comment.created_at),
    }


def user_to_document(user: User) -> dict[str, Any]:
    """Public view of a user; the password hash never leaves the server."""
    return {
        "_id": user.id,
        "username": user.username,
        "email": user.email,
        "createdAt": _format_timestamp(user.created_at),
    }


def quiz_from_generated(generated: dict[str, Any], seconds_per_question: int | None = None) -> Quiz:
    """Turn an AI-generated quiz payload into a playable ``Quiz``."""
    raw_questions = generated.get("questions")
    if not isinstance(raw_questions, list):
        raise QuizDocumentError("Generated quiz has no question list.")

    questions: list[QuizQuestion] = []
    for raw in raw_questions:
        options = raw.get("options") or []
        correct = raw.get("correctAnswer")
        questions.append(
            QuizQuestion(
                id=new_document_id(),
                text=str(raw.get("question", "")),
                options=[
                    QuizOption(text=str(text), is_correct=index == correct)
                    for index, text in enumerate(options)
                ],
                explanation=raw.get("explanation") or "",
            )
        )
    return Quiz(
        id=new_document_id(),
        title=str(generated.get("title", "")),
        questions=questions,
        seconds_per_question=seconds_per_question or DEFAULT_TIME_LIMIT_SECONDS,
        description=generated.get("description") or "",
    )


def _question_from_document(document: dict[str, Any]) -> QuizQuestion:
    return QuizQuestion(
        id=str(document.get("_id") or document.get("id") or new_document_id()),
        text=str(document.get("text", "")),
        options=[
            QuizOption(text=str(option.get("text", "")), is_correct=bool(option.get("isCorrect", False)))
            for option in document.get("options") or []
        ],
        image_url=document.get("imageUrl") or document.get("image"),
        explanation=document.get("explanation") or "",
    )


def _question_to_document(question: QuizQuestion) -> dict[str, Any]:
    return {
        "_id": question.id,
        "text": question.text,
        "imageUrl": question.image_url,
        "explanation": question.explanation,
        "options": [{"text": o.text, "isCorrect": o.is_correct} for o in question.options],
    }


def comment_from_document(document: dict[str, Any]) -> QuizComment:
    return QuizComment(
        id=str(document.get("_id") or document.get("id") or new_document_id()),
        text=str(document.get("text", "")),
        username=str(document.get("username", "")),
        created_at=_parse_timestamp(document.get("createdAt")) or utc_now(),
    )


def _parse_timestamp(value: Any) -> datetime | None:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def _format_timestamp(value: datetime | None) -> str | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()
