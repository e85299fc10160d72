"""HTTP client for the quiz backend."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from quizplay.constants.ai_constants import DEFAULT_GENERATED_QUESTIONS, DEFAULT_GENERATION_DIFFICULTY
from quizplay.constants.network_constants import API_TIMEOUT_SECONDS, DEFAULT_API_URL
from quizplay.core.models import Quiz, QuizComment
from quizplay.core.quiz_documents import (
    QuizDocumentError,
    comment_from_document,
    quiz_from_document,
    quiz_to_document,
)

logger = logging.getLogger(__name__)


class QuizClientError(Exception):
    """Base class for failures talking to the quiz backend."""


class NotFoundError(QuizClientError):
    """The requested quiz, comment or user does not exist."""


class NetworkError(QuizClientError):
    """The backend could not be reached or answered with an unexpected status."""


class InvalidQuizError(QuizClientError):
    """The backend returned a document that cannot be played."""


class QuizApiClient:
    """Thin wrapper around the quiz REST API."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        timeout: float = API_TIMEOUT_SECONDS,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._http = httpx.Client(base_url=base_url.rstrip("/"), timeout=timeout, transport=transport)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "QuizApiClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def fetch_quiz(self, quiz_id: str) -> Quiz:
        """Fetch a playable quiz by id."""
        document = self._request("GET", f"/quizzes/{quiz_id}")
        try:
            quiz = quiz_from_document(document)
        except QuizDocumentError as exc:
            raise InvalidQuizError(str(exc)) from exc
        if not quiz.questions:
            raise InvalidQuizError("Invalid quiz data or no questions found.")
        empty = next((n for n, question in enumerate(quiz.questions, start=1) if not question.options), None)
        if empty is not None:
            raise InvalidQuizError(f"Question {empty} has no answer options.")
        logger.info("Fetched quiz %s with %d questions", quiz.id, len(quiz.questions))
        return quiz

    def list_quizzes(self) -> list[dict[str, Any]]:
        return self._request("GET", "/quizzes")

    def create_quiz(self, quiz: Quiz) -> str:
        """Create a quiz and return its id."""
        document = quiz_to_document(quiz)
        for key in ("_id", "likes", "comments", "createdAt", "updatedAt"):
            document.pop(key, None)
        created = self._request("POST", "/quizzes", json=document)
        return str(created["id"])

    def delete_quiz(self, quiz_id: str) -> None:
        self._request("DELETE", f"/quizzes/{quiz_id}")

    def like_quiz(self, quiz_id: str) -> int:
        return int(self._request("POST", f"/quizzes/{quiz_id}/like")["likes"])

    def add_comment(self, quiz_id: str, text: str, username: str | None = None) -> QuizComment:
        payload: dict[str, Any] = {"text": text}
        if username:
            payload["username"] = username
        return comment_from_document(self._request("POST", f"/quizzes/{quiz_id}/comments", json=payload))

    def delete_comment(self, quiz_id: str, comment_id: str) -> None:
        self._request("DELETE", f"/quizzes/{quiz_id}/comments/{comment_id}")

    def list_users(self) -> list[dict[str, Any]]:
        return self._request("GET", "/users")

    def get_user(self, user_id: str) -> dict[str, Any]:
        return self._request("GET", f"/users/{user_id}")

    def create_user(self, username: str, email: str, password: str) -> str:
        """Register a user and return its id."""
        created = self._request(
            "POST",
            "/users",
            json={"username": username, "email": email, "password": password},
        )
        return str(created["id"])

    def update_user(self, user_id: str, **changes: str) -> dict[str, Any]:
        return self._request("PUT", f"/users/{user_id}", json=changes)

    def delete_user(self, user_id: str) -> None:
        self._request("DELETE", f"/users/{user_id}")

    def generate_quiz(
        self,
        topic: str,
        num_questions: int = DEFAULT_GENERATED_QUESTIONS,
        difficulty: str = DEFAULT_GENERATION_DIFFICULTY,
    ) -> dict[str, Any]:
        """Ask the backend's AI proxy for a quiz; returns the generated payload."""
        return self._request(
            "POST",
            "/ai/generate-quiz",
            json={"topic": topic, "numQuestions": num_questions, "difficulty": difficulty},
        )

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = self._http.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("%s %s failed: %s", method, path, exc)
            raise NetworkError(f"Unable to reach the quiz server: {exc}") from exc

        if response.status_code == 404:
            raise NotFoundError(_error_message(response, "Quiz not found"))
        if response.is_error:
            message = _error_message(response, f"Unexpected status {response.status_code}")
            logger.error("%s %s returned %d: %s", method, path, response.status_code, message)
            raise NetworkError(message)
        try:
            return response.json()
        except ValueError as exc:
            raise InvalidQuizError("Server returned invalid JSON.") from exc


def _error_message(response: httpx.Response, default: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return default
    if isinstance(body, dict):
        return str(body.get("message") or body.get("detail") or default)
    return default
