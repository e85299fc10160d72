"""Quiz generation through the OpenAI chat-completions API, fronted by ``QuizCache``."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

import httpx

from quizplay.constants.ai_constants import (
    DEFAULT_GENERATED_QUESTIONS,
    DEFAULT_GENERATION_DIFFICULTY,
    GENERATION_DIFFICULTIES,
    MAX_GENERATED_QUESTIONS,
    MIN_GENERATED_QUESTIONS,
    OPENAI_API_URL,
    OPENAI_MAX_TOKENS,
    OPENAI_MODEL,
    OPENAI_TEMPERATURE,
    OPENAI_TIMEOUT_SECONDS,
    OPENAI_TOP_P,
    SYSTEM_PROMPT,
)
from quizplay.core.services.quiz_cache import QuizCache, generate_cache_key

logger = logging.getLogger(__name__)

_FENCED_JSON = re.compile(r"```json([\s\S]*?)```")
_BRACED_JSON = re.compile(r"{[\s\S]*}")

_DIFFICULTY_GUIDELINES = {
    "easy": "basic concepts accessible to beginners",
    "medium": "moderate knowledge and some specific details",
    "hard": "advanced concepts and detailed knowledge",
}


class GenerationRequestError(ValueError):
    """The generation parameters are invalid."""


class QuizGenerationError(Exception):
    """The model could not be reached or did not return a usable quiz."""


class GeneratorConfigurationError(QuizGenerationError):
    """No API key is configured."""


class QuizParseError(QuizGenerationError):
    """The model reply did not contain a quiz in the expected JSON format."""


def create_prompt(topic: str, num_questions: int, difficulty: str) -> str:
    return f"""Create a {difficulty} difficulty {num_questions}-question quiz about "{topic}".
Format as JSON:
{{
  "title":"{topic} Quiz",
  "description":"A {difficulty} difficulty quiz on {topic}",
  "questions":[{{
    "question":"Question text",
    "options":["A","B","C","D"],
    "correctAnswer":0,
    "explanation":"Why A is correct"
  }}]
}}
Requirements:
1. {num_questions} questions on {topic} at {difficulty} level
2. Each question: 4 options, exactly one correct
3. correctAnswer = index of correct option (0-3)
4. Brief explanation for correct answer
5. Focus on {_DIFFICULTY_GUIDELINES.get(difficulty, "appropriate difficulty level")}"""


def parse_quiz_reply(message: str, topic: str, difficulty: str) -> dict[str, Any]:
    """Extract the quiz JSON from a model reply."""
    match = _FENCED_JSON.search(message) or _BRACED_JSON.search(message)
    if match:
        json_text = match.group(1) if match.re is _FENCED_JSON else match.group(0)
    else:
        json_text = message
    try:
        quiz = json.loads(json_text.strip())
    except json.JSONDecodeError as exc:
        raise QuizParseError(f"Could not parse JSON from AI response: {exc}") from exc

    if not isinstance(quiz, dict) or not quiz.get("title") or not isinstance(quiz.get("questions"), list):
        raise QuizParseError("Invalid quiz format")
    if not quiz.get("description"):
        quiz["description"] = f"A {difficulty} quiz about {topic}"
    return quiz


class QuizGenerator:
    """Generates quizzes with OpenAI, returning cached results when available."""

    def __init__(
        self,
        cache: QuizCache,
        api_key: str | None,
        api_url: str = OPENAI_API_URL,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._cache = cache
        self._api_key = api_key
        self._http = httpx.Client(timeout=OPENAI_TIMEOUT_SECONDS, transport=transport)
        self._api_url = api_url

    def close(self) -> None:
        self._http.close()

    def generate(
        self,
        topic: str | None,
        num_questions: int = DEFAULT_GENERATED_QUESTIONS,
        difficulty: str = DEFAULT_GENERATION_DIFFICULTY,
    ) -> dict[str, Any]:
        if not topic or not topic.strip():
            raise GenerationRequestError("Quiz topic is required")
        if not MIN_GENERATED_QUESTIONS <= num_questions <= MAX_GENERATED_QUESTIONS:
            raise GenerationRequestError(
                f"Number of questions must be between {MIN_GENERATED_QUESTIONS} and {MAX_GENERATED_QUESTIONS}"
            )
        difficulty = difficulty.strip().lower()
        if difficulty not in GENERATION_DIFFICULTIES:
            raise GenerationRequestError("Difficulty must be easy, medium, or hard")

        cache_key = generate_cache_key(topic, num_questions, difficulty)
        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.info("Cache hit for quiz: %s (%s, %d questions)", topic, difficulty, num_questions)
            return cached
        logger.info("Cache miss for quiz: %s (%s, %d questions)", topic, difficulty, num_questions)

        if not self._api_key:
            logger.error("OpenAI API key is missing")
            raise GeneratorConfigurationError("Server configuration error")

        message = self._complete(create_prompt(topic, num_questions, difficulty))
        try:
            quiz = parse_quiz_reply(message, topic, difficulty)
        except QuizParseError:
            logger.error("Error parsing OpenAI response. Raw response: %s", message)
            raise
        self._cache.set(cache_key, quiz)
        return quiz

    def _complete(self, prompt: str) -> str:
        try:
            response = self._http.post(
                self._api_url,
                json={
                    "model": OPENAI_MODEL,
                    "messages": [
                        {"role": "system", "content": SYSTEM_PROMPT},
                        {"role": "user", "content": prompt},
                    ],
                    "temperature": OPENAI_TEMPERATURE,
                    "max_tokens": OPENAI_MAX_TOKENS,
                    "top_p": OPENAI_TOP_P,
                },
                headers={"Authorization": f"Bearer {self._api_key}"},
            )
            response.raise_for_status()
            return response.json()["choices"][0]["message"]["content"]
        except (httpx.HTTPError, KeyError, IndexError, ValueError) as exc:
            logger.error("Error generating quiz: %s", exc)
            raise QuizGenerationError("Quiz generation failed. Please try again.") from exc
