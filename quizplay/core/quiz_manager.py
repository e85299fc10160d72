"""Business logic shared by the HTTP layer: quiz storage, users and AI generation."""

from __future__ import annotations

from threading import Lock
from typing import Any

from quizplay.core.models import Quiz, QuizComment, User
from quizplay.core.services.quiz_generator import QuizGenerator
from quizplay.core.services.quiz_repository import QuizRepository
from quizplay.core.services.user_repository import UserRepository


class QuizManager:
    """Facade for quiz services: Repository, Users and Generator."""

    def __init__(
        self,
        generator: QuizGenerator,
        repository: QuizRepository | None = None,
        users: UserRepository | None = None,
    ) -> None:
        self._lock = Lock()
        self._repository = repository or QuizRepository()
        self._users = users or UserRepository()
        self._generator = generator

    # --- Quiz Repository Delegation ---

    def list_quizzes(self) -> list[Quiz]:
        with self._lock:
            return self._repository.list_quizzes()

    def get_quiz(self, quiz_id: str) -> Quiz:
        with self._lock:
            return self._repository.get_quiz(quiz_id)

    def create_quiz(self, quiz: Quiz) -> Quiz:
        with self._lock:
            return self._repository.create_quiz(quiz)

    def update_quiz(self, quiz_id: str, changes: dict[str, Any]) -> Quiz:
        with self._lock:
            return self._repository.update_quiz(quiz_id, changes)

    def delete_quiz(self, quiz_id: str) -> None:
        with self._lock:
            self._repository.delete_quiz(quiz_id)

    # --- Likes & Comments ---

    def like_quiz(self, quiz_id: str) -> int:
        with self._lock:
            return self._repository.like_quiz(quiz_id)

    def add_comment(self, quiz_id: str, text: str, username: str | None = None) -> QuizComment:
        with self._lock:
            return self._repository.add_comment(quiz_id, text, username)

    def delete_comment(self, quiz_id: str, comment_id: str) -> None:
        with self._lock:
            self._repository.delete_comment(quiz_id, comment_id)

    # --- Users ---

    def list_users(self) -> list[User]:
        with self._lock:
            return self._users.list_users()

    def get_user(self, user_id: str) -> User:
        with self._lock:
            return self._users.get_user(user_id)

    def create_user(self, username: str, email: str, password: str) -> User:
        with self._lock:
            return self._users.create_user(username, email, password)

    def update_user(self, user_id: str, changes: dict[str, Any]) -> User:
        with self._lock:
            return self._users.update_user(user_id, changes)

    def delete_user(self, user_id: str) -> None:
        with self._lock:
            self._users.delete_user(user_id)

    # --- Generator Delegation ---

    # Not serialized by the manager lock; QuizCache locks its own entries.
    def generate_quiz(self, topic: str | None, num_questions: int, difficulty: str) -> dict[str, Any]:
        return self._generator.generate(topic, num_questions, difficulty)
