"""FastAPI server exposing the quiz, comment, user and AI generation endpoints."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager, suppress
import logging
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

from quizplay.constants.about import API_ENDPOINTS, APP_ABOUT_TEXT, APP_NAME, APP_VERSION
from quizplay.constants.ai_constants import (
    CACHE_FLUSH_INTERVAL_SECONDS,
    DEFAULT_GENERATED_QUESTIONS,
    DEFAULT_GENERATION_DIFFICULTY,
)
from quizplay.constants.network_constants import CORS_ALLOWED_ORIGINS, DEFAULT_HOST, DEFAULT_PORT
from quizplay.constants.quiz_constants import (
    DEFAULT_AUTHOR,
    DEFAULT_CATEGORY,
    DEFAULT_DIFFICULTY,
    DEFAULT_TIME_LIMIT_SECONDS,
)
from quizplay.constants.user_constants import MIN_PASSWORD_LENGTH, MIN_USERNAME_LENGTH
from quizplay.core.models import Quiz, QuizOption, QuizQuestion
from quizplay.core.quiz_documents import (
    comment_to_document,
    new_document_id,
    quiz_summary_document,
    quiz_to_document,
    user_to_document,
)
from quizplay.core.quiz_manager import QuizManager
from quizplay.core.services.quiz_cache import QuizCache
from quizplay.core.services.quiz_generator import (
    GenerationRequestError,
    GeneratorConfigurationError,
    QuizGenerationError,
    QuizParseError,
)
from quizplay.core.services.quiz_repository import QuizNotFoundError, QuizValidationError
from quizplay.core.services.user_repository import UserNotFoundError, UserValidationError

logger = logging.getLogger(__name__)


class OptionPayload(BaseModel):
    """Answer option as sent by authoring clients."""

    model_config = ConfigDict(populate_by_name=True)

    text: str
    is_correct: bool = Field(False, alias="isCorrect")


class QuestionPayload(BaseModel):
    """Question as sent by authoring clients."""

    model_config = ConfigDict(populate_by_name=True)

    text: str = ""
    image_url: str | None = Field(None, alias="imageUrl")
    explanation: str = ""
    options: list[OptionPayload] = Field(default_factory=list)

    def to_model(self) -> QuizQuestion:
        return QuizQuestion(
            id=new_document_id(),
            text=self.text,
            options=[QuizOption(text=o.text, is_correct=o.is_correct) for o in self.options],
            image_url=self.image_url,
            explanation=self.explanation,
        )


class QuizPayload(BaseModel):
    """Payload schema for creating a quiz."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = ""
    description: str = ""
    category: str = DEFAULT_CATEGORY
    difficulty: str = DEFAULT_DIFFICULTY
    time_per_question: int = Field(DEFAULT_TIME_LIMIT_SECONDS, alias="timePerQuestion")
    created_by: str = Field(DEFAULT_AUTHOR, alias="createdBy")
    is_public: bool = Field(True, alias="isPublic")
    questions: list[QuestionPayload] = Field(default_factory=list)

    def to_model(self) -> Quiz:
        return Quiz(
            id="",
            title=self.title,
            questions=[q.to_model() for q in self.questions],
            seconds_per_question=self.time_per_question,
            description=self.description,
            category=self.category,
            difficulty=self.difficulty,
            created_by=self.created_by,
            is_public=self.is_public,
        )


class QuizUpdatePayload(BaseModel):
    """Payload schema for partial quiz updates; omitted fields stay unchanged."""

    model_config = ConfigDict(populate_by_name=True)

    title: str | None = None
    description: str | None = None
    category: str | None = None
    difficulty: str | None = None
    time_per_question: int | None = Field(None, alias="timePerQuestion")
    created_by: str | None = Field(None, alias="createdBy")
    is_public: bool | None = Field(None, alias="isPublic")
    questions: list[QuestionPayload] | None = None

    def to_changes(self) -> dict[str, Any]:
        changes: dict[str, Any] = {}
        for name in self.model_fields_set:
            value = getattr(self, name)
            if value is None:
                continue
            if name == "questions":
                changes["questions"] = [q.to_model() for q in value]
            elif name == "time_per_question":
                changes["seconds_per_question"] = value
            else:
                changes[name] = value
        return changes


class CommentPayload(BaseModel):
    """Payload schema for adding a comment."""

    text: str = ""
    username: str | None = None


class GenerateQuizPayload(BaseModel):
    """Payload schema for the AI quiz generator."""

    model_config = ConfigDict(populate_by_name=True)

    topic: str | None = None
    num_questions: int = Field(DEFAULT_GENERATED_QUESTIONS, alias="numQuestions")
    difficulty: str = DEFAULT_GENERATION_DIFFICULTY


class UserPayload(BaseModel):
    """Payload schema for registering a user."""

    username: str = Field(min_length=MIN_USERNAME_LENGTH)
    email: EmailStr
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)


class UserUpdatePayload(BaseModel):
    """Payload schema for partial user updates; omitted fields stay unchanged."""

    username: str | None = Field(None, min_length=MIN_USERNAME_LENGTH)
    email: EmailStr | None = None
    password: str | None = Field(None, min_length=MIN_PASSWORD_LENGTH)

    def to_changes(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in self.model_fields_set if getattr(self, name) is not None}


def _get_quiz_manager_dependency(quiz_manager: QuizManager):
    def dependency() -> QuizManager:
        return quiz_manager

    return dependency


async def _flush_periodically(cache: QuizCache, interval_seconds: float) -> None:
    while True:
        await asyncio.sleep(interval_seconds)
        if not cache.is_dirty():
            continue
        try:
            await asyncio.to_thread(cache.flush)
        except OSError:
            # Logged by QuizCache.flush; the next interval retries.
            continue


def _build_lifespan(cache: QuizCache, flush_interval_seconds: float):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        flush_task = asyncio.create_task(_flush_periodically(cache, flush_interval_seconds))
        try:
            yield
        finally:
            flush_task.cancel()
            with suppress(asyncio.CancelledError):
                await flush_task
            cache.flush()

    return lifespan


def _not_found(exc: LookupError, message: str = "Quiz not found") -> HTTPException:
    logger.info("%s", exc)
    return HTTPException(status_code=404, detail=message)


def create_api_app(
    quiz_manager: QuizManager,
    cache: QuizCache,
    flush_interval_seconds: float = CACHE_FLUSH_INTERVAL_SECONDS,
) -> FastAPI:
    """Create a FastAPI application wired to the provided quiz manager and cache."""
    app = FastAPI(
        title=f"{APP_NAME} API",
        description=APP_ABOUT_TEXT,
        version=APP_VERSION,
        lifespan=_build_lifespan(cache, flush_interval_seconds),
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(CORS_ALLOWED_ORIGINS),
        allow_credentials=True,
        allow_methods=["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE"],
        allow_headers=["*"],
    )
    quiz_manager_dep = _get_quiz_manager_dependency(quiz_manager)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": True, "message": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        message = errors[0]["msg"] if errors else "Invalid request"
        return JSONResponse(status_code=400, content={"error": True, "message": message})

    @app.get("/")
    def root() -> dict[str, Any]:
        return {
            "message": f"{APP_NAME} API is running",
            "version": APP_VERSION,
            "endpoints": list(API_ENDPOINTS),
        }

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "OK", "message": "Server is running"}

    # --- Quizzes ---

    @app.get("/api/quizzes")
    def list_quizzes(manager: QuizManager = Depends(quiz_manager_dep)) -> list[dict[str, Any]]:
        return [quiz_summary_document(quiz) for quiz in manager.list_quizzes()]

    @app.get("/api/quizzes/{quiz_id}")
    def get_quiz(quiz_id: str, manager: QuizManager = Depends(quiz_manager_dep)) -> dict[str, Any]:
        try:
            return quiz_to_document(manager.get_quiz(quiz_id))
        except QuizNotFoundError as exc:
            raise _not_found(exc) from exc

    @app.post("/api/quizzes", status_code=201)
    def create_quiz(payload: QuizPayload, manager: QuizManager = Depends(quiz_manager_dep)) -> dict[str, Any]:
        try:
            quiz = manager.create_quiz(payload.to_model())
        except QuizValidationError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        logger.info("Created quiz %s (%s)", quiz.id, quiz.title)
        return {"id": quiz.id, "title": quiz.title, "message": "Quiz created successfully"}

    @app.put("/api/quizzes/{quiz_id}")
    def update_quiz(
        quiz_id: str,
        payload: QuizUpdatePayload,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, Any]:
        try:
            quiz = manager.update_quiz(quiz_id, payload.to_changes())
        except QuizNotFoundError as exc:
            raise _not_found(exc) from exc
        except QuizValidationError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return {"id": quiz.id, "title": quiz.title, "message": "Quiz updated successfully"}

    @app.delete("/api/quizzes/{quiz_id}")
    def delete_quiz(quiz_id: str, manager: QuizManager = Depends(quiz_manager_dep)) -> dict[str, str]:
        try:
            manager.delete_quiz(quiz_id)
        except QuizNotFoundError as exc:
            raise _not_found(exc) from exc
        return {"message": "Quiz deleted successfully"}

    # --- Likes & Comments ---

    @app.post("/api/quizzes/{quiz_id}/like")
    def like_quiz(quiz_id: str, manager: QuizManager = Depends(quiz_manager_dep)) -> dict[str, int]:
        try:
            return {"likes": manager.like_quiz(quiz_id)}
        except QuizNotFoundError as exc:
            raise _not_found(exc) from exc

    @app.post("/api/quizzes/{quiz_id}/comments", status_code=201)
    def add_comment(
        quiz_id: str,
        payload: CommentPayload,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, Any]:
        try:
            comment = manager.add_comment(quiz_id, payload.text, payload.username)
        except QuizNotFoundError as exc:
            raise _not_found(exc) from exc
        except QuizValidationError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return comment_to_document(comment)

    @app.delete("/api/quizzes/{quiz_id}/comments/{comment_id}")
    def delete_comment(
        quiz_id: str,
        comment_id: str,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, str]:
        try:
            manager.delete_comment(quiz_id, comment_id)
        except QuizNotFoundError as exc:
            raise _not_found(exc, str(exc)) from exc
        return {"message": "Comment deleted successfully"}

    # --- Users ---

    @app.get("/api/users")
    def list_users(manager: QuizManager = Depends(quiz_manager_dep)) -> list[dict[str, Any]]:
        return [user_to_document(user) for user in manager.list_users()]

    @app.get("/api/users/{user_id}")
    def get_user(user_id: str, manager: QuizManager = Depends(quiz_manager_dep)) -> dict[str, Any]:
        try:
            return user_to_document(manager.get_user(user_id))
        except UserNotFoundError as exc:
            raise _not_found(exc, "User not found") from exc

    @app.post("/api/users", status_code=201)
    def create_user(payload: UserPayload, manager: QuizManager = Depends(quiz_manager_dep)) -> dict[str, Any]:
        try:
            user = manager.create_user(payload.username, payload.email, payload.password)
        except UserValidationError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return {"id": user.id, "username": user.username, "email": user.email}

    @app.put("/api/users/{user_id}")
    def update_user(
        user_id: str,
        payload: UserUpdatePayload,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, Any]:
        try:
            return user_to_document(manager.update_user(user_id, payload.to_changes()))
        except UserNotFoundError as exc:
            raise _not_found(exc, "User not found") from exc
        except UserValidationError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

    @app.delete("/api/users/{user_id}")
    def delete_user(user_id: str, manager: QuizManager = Depends(quiz_manager_dep)) -> dict[str, str]:
        try:
            manager.delete_user(user_id)
        except UserNotFoundError as exc:
            raise _not_found(exc, "User not found") from exc
        return {"message": "User deleted successfully"}

    # --- AI ---

    @app.post("/api/ai/generate-quiz")
    def generate_quiz(
        payload: GenerateQuizPayload,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, Any]:
        try:
            return manager.generate_quiz(payload.topic, payload.num_questions, payload.difficulty)
        except GenerationRequestError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        except GeneratorConfigurationError as exc:
            raise HTTPException(status_code=500, detail="Server configuration error") from exc
        except QuizParseError as exc:
            raise HTTPException(status_code=500, detail="Failed to parse AI-generated quiz") from exc
        except QuizGenerationError as exc:
            raise HTTPException(status_code=500, detail="Quiz generation failed. Please try again.") from exc

    return app


def run_api_server(app: FastAPI, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT) -> None:
    """Serve the API in the foreground until interrupted."""
    config = uvicorn.Config(app=app, host=host, port=port, log_level="info")
    server = uvicorn.Server(config)
    server.run()
