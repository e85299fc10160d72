"""Service for managing registered users and their password hashes."""

from __future__ import annotations

from dataclasses import replace
import logging
from typing import Any

import bcrypt

from quizplay.constants.user_constants import (
    MIN_PASSWORD_LENGTH,
    MIN_USERNAME_LENGTH,
    PASSWORD_HASH_ROUNDS,
)
from quizplay.core.models import User
from quizplay.core.quiz_documents import new_document_id, utc_now

logger = logging.getLogger(__name__)


class UserValidationError(ValueError):
    """Raised when user details do not satisfy the account rules."""


class UserNotFoundError(LookupError):
    """Raised when no user matches the requested id."""


_UPDATABLE_FIELDS = frozenset({"username", "email", "password"})


def hash_password(password: str) -> bytes:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=PASSWORD_HASH_ROUNDS))


def check_password(user: User, password: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), user.password_hash)


class UserRepository:
    """Stores users keyed by id; emails are unique regardless of case."""

    def __init__(self) -> None:
        self._users: dict[str, User] = {}

    def list_users(self) -> list[User]:
        return list(self._users.values())

    def get_user(self, user_id: str) -> User:
        user = self._users.get(user_id)
        if user is None:
            raise UserNotFoundError(f"User {user_id} not found")
        return user

    def create_user(self, username: str, email: str, password: str) -> User:
        username = self._validate_username(username)
        email = self._validate_email(email)
        self._validate_password(password)
        now = utc_now()
        user = User(
            id=new_document_id(),
            username=username,
            email=email,
            password_hash=hash_password(password),
            created_at=now,
            updated_at=now,
        )
        self._users[user.id] = user
        logger.info("Created user %s (%s)", user.id, user.username)
        return user

    def update_user(self, user_id: str, changes: dict[str, Any]) -> User:
        """Apply a partial update; a new password is re-hashed."""
        current = self.get_user(user_id)
        unknown = set(changes) - _UPDATABLE_FIELDS
        if unknown:
            raise UserValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        fields: dict[str, Any] = {}
        if "username" in changes:
            fields["username"] = self._validate_username(changes["username"])
        if "email" in changes:
            fields["email"] = self._validate_email(changes["email"], ignore_id=user_id)
        if "password" in changes:
            self._validate_password(changes["password"])
            fields["password_hash"] = hash_password(changes["password"])

        updated = replace(current, updated_at=utc_now(), **fields)
        self._users[user_id] = updated
        return updated

    def delete_user(self, user_id: str) -> None:
        self.get_user(user_id)
        del self._users[user_id]

    def _validate_username(self, username: str) -> str:
        cleaned = (username or "").strip()
        if len(cleaned) < MIN_USERNAME_LENGTH:
            raise UserValidationError(f"Username must be at least {MIN_USERNAME_LENGTH} characters.")
        return cleaned

    def _validate_email(self, email: str, ignore_id: str | None = None) -> str:
        cleaned = (email or "").strip()
        if "@" not in cleaned:
            raise UserValidationError("A valid email address is required.")
        taken = any(
            user.email.lower() == cleaned.lower() and user.id != ignore_id for user in self._users.values()
        )
        if taken:
            raise UserValidationError("Email is already registered.")
        return cleaned

    @staticmethod
    def _validate_password(password: str) -> None:
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise UserValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
