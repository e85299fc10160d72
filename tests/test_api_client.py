from __future__ import annotations

import json

import httpx
import pytest

from quizplay.client.api_client import InvalidQuizError, NetworkError, NotFoundError, QuizApiClient


def _client(handler) -> QuizApiClient:
    return QuizApiClient("http://quiz.test/api", transport=httpx.MockTransport(handler))


def test_fetch_quiz_parses_document(quiz_document):
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.path)
        return httpx.Response(200, json=quiz_document)

    with _client(handler) as client:
        quiz = client.fetch_quiz("abc123")

    assert seen == ["/api/quizzes/abc123"]
    assert quiz.id == "abc123"
    assert quiz.seconds_per_question == 20
    assert quiz.questions[0].correct_option_index() == 1


def test_fetch_missing_quiz_raises_not_found():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"error": True, "message": "Quiz not found"})

    with _client(handler) as client, pytest.raises(NotFoundError, match="Quiz not found"):
        client.fetch_quiz("missing")


def test_fetch_quiz_without_questions_is_invalid(quiz_document):
    quiz_document["questions"] = []

    with _client(lambda request: httpx.Response(200, json=quiz_document)) as client:
        with pytest.raises(InvalidQuizError):
            client.fetch_quiz("abc123")


def test_fetch_quiz_with_optionless_question_is_invalid(quiz_document):
    quiz_document["questions"][0]["options"] = []

    with _client(lambda request: httpx.Response(200, json=quiz_document)) as client:
        with pytest.raises(InvalidQuizError, match="Question 1 has no answer options"):
            client.fetch_quiz("abc123")


def test_fetch_non_quiz_document_is_invalid():
    with _client(lambda request: httpx.Response(200, json={"title": "no questions key"})) as client:
        with pytest.raises(InvalidQuizError):
            client.fetch_quiz("abc123")


def test_non_json_body_is_invalid():
    with _client(lambda request: httpx.Response(200, text="<html>oops</html>")) as client:
        with pytest.raises(InvalidQuizError):
            client.fetch_quiz("abc123")


def test_server_error_raises_network_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"error": True, "message": "Server error"})

    with _client(handler) as client, pytest.raises(NetworkError, match="Server error"):
        client.fetch_quiz("abc123")


def test_connection_failure_raises_network_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with _client(handler) as client, pytest.raises(NetworkError):
        client.fetch_quiz("abc123")


def test_generate_quiz_posts_request_body():
    captured: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/ai/generate-quiz"
        captured.append(json.loads(request.content))
        return httpx.Response(200, json={"title": "Rome Quiz", "questions": []})

    with _client(handler) as client:
        generated = client.generate_quiz("Rome", 4, "hard")

    assert captured == [{"topic": "Rome", "numQuestions": 4, "difficulty": "hard"}]
    assert generated["title"] == "Rome Quiz"


def test_like_and_comment(quiz_document):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/like"):
            return httpx.Response(200, json={"likes": 5})
        body = json.loads(request.content)
        return httpx.Response(
            201,
            json={"_id": "c9", "text": body["text"], "username": "Anonymous", "createdAt": "2024-03-03T10:00:00Z"},
        )

    with _client(handler) as client:
        assert client.like_quiz("abc123") == 5
        comment = client.add_comment("abc123", "Great")

    assert comment.id == "c9"
    assert comment.text == "Great"
    assert comment.created_at.year == 2024


def test_create_quiz_strips_server_fields(quiz_document):
    from quizplay.core.quiz_documents import quiz_from_document

    sent: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        sent.append(json.loads(request.content))
        return httpx.Response(201, json={"id": "new-id", "title": "Capitals", "message": "Quiz created successfully"})

    with _client(handler) as client:
        quiz_id = client.create_quiz(quiz_from_document(quiz_document))

    assert quiz_id == "new-id"
    assert "_id" not in sent[0]
    assert "likes" not in sent[0]
    assert sent[0]["timePerQuestion"] == 20


def test_user_operations_use_users_endpoint():
    calls: list[tuple[str, str, dict | None]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        calls.append((request.method, request.url.path, body))
        if request.method == "POST":
            return httpx.Response(201, json={"id": "u1", "username": body["username"], "email": body["email"]})
        if request.method == "DELETE":
            return httpx.Response(200, json={"message": "User deleted successfully"})
        return httpx.Response(200, json={"_id": "u1", "username": "carol", "email": "carol@example.com"})

    with _client(handler) as client:
        assert client.create_user("carol", "carol@example.com", "secret1") == "u1"
        assert client.update_user("u1", username="carol")["username"] == "carol"
        client.delete_user("u1")

    assert calls[0] == ("POST", "/api/users", {"username": "carol", "email": "carol@example.com", "password": "secret1"})
    assert calls[1] == ("PUT", "/api/users/u1", {"username": "carol"})
    assert calls[2][:2] == ("DELETE", "/api/users/u1")


def test_missing_user_raises_not_found():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"error": True, "message": "User not found"})

    with _client(handler) as client, pytest.raises(NotFoundError, match="User not found"):
        client.get_user("nobody")
