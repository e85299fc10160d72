from __future__ import annotations

import pytest

from quizplay.core.services.user_repository import (
    UserNotFoundError,
    UserRepository,
    UserValidationError,
    check_password,
)


@pytest.fixture
def repository() -> UserRepository:
    return UserRepository()


def test_password_is_stored_as_bcrypt_hash(repository):
    user = repository.create_user(" alice ", "alice@example.com", "secret1")

    assert user.username == "alice"
    assert user.password_hash != b"secret1"
    assert user.password_hash.startswith(b"$2")
    assert check_password(user, "secret1")
    assert not check_password(user, "wrong-password")


@pytest.mark.parametrize(
    ("username", "email", "password"),
    [
        ("al", "alice@example.com", "secret1"),
        ("alice", "not-an-email", "secret1"),
        ("alice", "alice@example.com", "12345"),
    ],
)
def test_account_rules(repository, username, email, password):
    with pytest.raises(UserValidationError):
        repository.create_user(username, email, password)


def test_email_must_be_unique(repository):
    repository.create_user("alice", "alice@example.com", "secret1")

    with pytest.raises(UserValidationError, match="already registered"):
        repository.create_user("alice2", "ALICE@example.com", "secret2")


def test_update_rehashes_password(repository):
    user = repository.create_user("alice", "alice@example.com", "secret1")

    updated = repository.update_user(user.id, {"password": "newsecret"})

    assert check_password(updated, "newsecret")
    assert not check_password(updated, "secret1")
    assert updated.email == "alice@example.com"


def test_update_keeps_own_email_and_rejects_unknown_fields(repository):
    user = repository.create_user("alice", "alice@example.com", "secret1")

    assert repository.update_user(user.id, {"email": "alice@example.com"}).email == "alice@example.com"
    with pytest.raises(UserValidationError, match="cannot be updated"):
        repository.update_user(user.id, {"password_hash": b"x"})


def test_delete_user(repository):
    user = repository.create_user("alice", "alice@example.com", "secret1")

    repository.delete_user(user.id)

    with pytest.raises(UserNotFoundError):
        repository.get_user(user.id)
    with pytest.raises(UserNotFoundError):
        repository.delete_user(user.id)
