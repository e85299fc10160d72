from __future__ import annotations

import pytest

from quizplay.core.models import Quiz, QuizOption, QuizQuestion


def make_question(text: str, correct_index: int | None = 0, option_count: int = 4) -> QuizQuestion:
    return QuizQuestion(
        id=f"q-{text}",
        text=text,
        options=[
            QuizOption(text=f"{text} option {i + 1}", is_correct=i == correct_index)
            for i in range(option_count)
        ],
    )


def make_quiz(question_count: int = 3, seconds_per_question: int = 3) -> Quiz:
    return Quiz(
        id="quiz-1",
        title="Capitals",
        questions=[make_question(f"Q{n}", correct_index=n % 4) for n in range(question_count)],
        seconds_per_question=seconds_per_question,
    )


@pytest.fixture
def three_question_quiz() -> Quiz:
    return make_quiz()


@pytest.fixture(scope="session")
def qt_app():
    from PySide6.QtCore import QCoreApplication

    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def quiz_factory():
    return make_quiz


@pytest.fixture
def question_factory():
    return make_question


@pytest.fixture
def quiz_document() -> dict:
    return {
        "_id": "abc123",
        "title": "Capitals",
        "description": "European capitals",
        "category": "Geography",
        "difficulty": "Easy",
        "timePerQuestion": 20,
        "createdBy": "alice",
        "isPublic": True,
        "likes": 4,
        "createdAt": "2024-03-01T10:00:00.000Z",
        "updatedAt": "2024-03-02T10:00:00.000Z",
        "questions": [
            {
                "_id": "q1",
                "text": "Capital of France?",
                "imageUrl": None,
                "explanation": "Paris has been the capital since 987.",
                "options": [
                    {"text": "Lyon", "isCorrect": False},
                    {"text": "Paris", "isCorrect": True},
                ],
            }
        ],
        "comments": [
            {"_id": "c1", "text": "Fun!", "username": "bob", "createdAt": "2024-03-03T10:00:00Z"}
        ],
    }
