"""Service driving one timed attempt at a quiz, from loading to the final score.

The session is a plain state machine. It never starts timers itself: a driver
(see ``quizplay.player.session_driver``) calls ``tick()`` once per second and
forwards user input to ``select_answer()``, ``advance()`` and ``quit()``.

    LOADING  -> ERROR           fetch failed or quiz has no questions
                                or a question has no options
    LOADING  -> QUESTION(0)
    QUESTION -> FEEDBACK        answer selected or time ran out
    FEEDBACK -> QUESTION(i+1)   countdown reached zero or advance()
    FEEDBACK -> FINISHED        same, on the last question
    LOADING | QUESTION | FEEDBACK -> ABORTED   quit()
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
import logging

from quizplay.client.api_client import QuizClientError
from quizplay.constants.quiz_constants import (
    DEFAULT_TIME_LIMIT_SECONDS,
    FEEDBACK_COUNTDOWN_SECONDS,
    TIMEOUT_ADVANCE_DELAY_SECONDS,
)
from quizplay.core.models import EvaluationResult, Quiz, QuizQuestion, SessionResult

logger = logging.getLogger(__name__)


class SessionPhase(Enum):
    LOADING = "loading"
    ERROR = "error"
    QUESTION = "question"
    FEEDBACK = "feedback"
    FINISHED = "finished"
    ABORTED = "aborted"


_TERMINAL_PHASES = frozenset({SessionPhase.ERROR, SessionPhase.FINISHED, SessionPhase.ABORTED})


class PlaySession:
    """Manages the state of a single quiz attempt."""

    def __init__(
        self,
        *,
        on_evaluated: Callable[[EvaluationResult], None] | None = None,
        on_finished: Callable[[SessionResult], None] | None = None,
        feedback_seconds: int = FEEDBACK_COUNTDOWN_SECONDS,
        timeout_advance_seconds: int = TIMEOUT_ADVANCE_DELAY_SECONDS,
    ) -> None:
        self._on_evaluated = on_evaluated
        self._on_finished = on_finished
        self._feedback_seconds = feedback_seconds
        self._timeout_advance_seconds = timeout_advance_seconds

        self._phase = SessionPhase.LOADING
        self._quiz: Quiz | None = None
        self._error_message: str | None = None
        self._current_index: int = 0
        self._seconds_per_question: int = DEFAULT_TIME_LIMIT_SECONDS
        self._remaining_seconds: int = 0
        self._selected_option_index: int | None = None
        self._results: list[bool] = []
        self._score: int = 0
        self._countdown: int = 0
        self._last_evaluation: EvaluationResult | None = None
        self._result: SessionResult | None = None

    # --- Loading ---

    def load(self, quiz_id: str, fetch_quiz: Callable[[str], Quiz]) -> bool:
        """Fetch the quiz and start the first question. Returns False on failure."""
        if self._phase is not SessionPhase.LOADING:
            raise RuntimeError("Session has already been loaded.")
        try:
            quiz = fetch_quiz(quiz_id)
        except QuizClientError as exc:
            logger.error("Could not load quiz %s: %s", quiz_id, exc)
            self.fail(str(exc))
            return False
        return self.start(quiz)

    def start(self, quiz: Quiz) -> bool:
        if self._phase is not SessionPhase.LOADING:
            raise RuntimeError("Session has already been loaded.")
        if not quiz.questions:
            self.fail("Invalid quiz data or no questions found.")
            return False
        unanswerable = next((n for n, q in enumerate(quiz.questions, start=1) if not q.options), None)
        if unanswerable is not None:
            self.fail(f"Question {unanswerable} has no answer options.")
            return False

        self._quiz = quiz
        self._seconds_per_question = quiz.seconds_per_question if quiz.seconds_per_question > 0 else DEFAULT_TIME_LIMIT_SECONDS
        self._results = [False] * len(quiz.questions)
        self._score = 0
        self._show_question(0)
        logger.info("Started quiz '%s' with %d questions", quiz.title, len(quiz.questions))
        return True

    def fail(self, message: str) -> None:
        if self._phase is not SessionPhase.LOADING:
            return
        self._error_message = message
        self._phase = SessionPhase.ERROR

    # --- Input ---

    def tick(self) -> None:
        """Advance the clock by one second."""
        if self._phase is SessionPhase.QUESTION:
            if not self.is_timer_active():
                return
            self._remaining_seconds -= 1
            if self._remaining_seconds <= 0:
                self._remaining_seconds = 0
                self._expire()
        elif self._phase is SessionPhase.FEEDBACK:
            self._countdown -= 1
            if self._countdown <= 0:
                self._countdown = 0
                self.advance()

    def select_answer(self, option_index: int) -> EvaluationResult | None:
        """Evaluate the chosen option. Returns None when the input is ignored."""
        if self._phase is not SessionPhase.QUESTION or self._selected_option_index is not None:
            logger.debug("Ignoring answer %s; question already answered", option_index)
            return None

        question = self.current_question()
        if not 0 <= option_index < len(question.options):
            raise ValueError(f"Option index {option_index} out of range")

        self._selected_option_index = option_index
        return self._evaluate(option_index, timed_out=False)

    def advance(self) -> None:
        """Leave the feedback stage: next question, or finish after the last one."""
        if self._phase is not SessionPhase.FEEDBACK:
            return
        next_index = self._current_index + 1
        if next_index < self.get_total_questions():
            self._show_question(next_index)
        else:
            self._finish()

    def quit(self) -> None:
        """Abandon the session without reporting a score."""
        if self._phase in _TERMINAL_PHASES:
            return
        logger.info("Session abandoned at question %d", self._current_index + 1)
        self._phase = SessionPhase.ABORTED

    # --- State ---

    def get_phase(self) -> SessionPhase:
        return self._phase

    def is_terminal(self) -> bool:
        return self._phase in _TERMINAL_PHASES

    def is_timer_active(self) -> bool:
        return (
            self._phase is SessionPhase.QUESTION
            and self._selected_option_index is None
            and self._remaining_seconds > 0
        )

    def get_quiz(self) -> Quiz | None:
        return self._quiz

    def get_error_message(self) -> str | None:
        return self._error_message

    def get_current_index(self) -> int:
        return self._current_index

    def get_total_questions(self) -> int:
        return len(self._quiz.questions) if self._quiz else 0

    def current_question(self) -> QuizQuestion:
        if self._quiz is None:
            raise RuntimeError("No quiz loaded.")
        return self._quiz.questions[self._current_index]

    def get_remaining_seconds(self) -> int:
        return self._remaining_seconds

    def get_selected_option_index(self) -> int | None:
        return self._selected_option_index

    def get_results(self) -> list[bool]:
        return list(self._results)

    def get_score(self) -> int:
        return self._score

    def get_countdown(self) -> int:
        return self._countdown

    def get_last_evaluation(self) -> EvaluationResult | None:
        return self._last_evaluation

    def get_result(self) -> SessionResult | None:
        return self._result

    # --- Transitions ---

    def _show_question(self, index: int) -> None:
        self._current_index = index
        self._remaining_seconds = self._seconds_per_question
        self._selected_option_index = None
        self._countdown = 0
        self._phase = SessionPhase.QUESTION

    def _expire(self) -> None:
        logger.info("Time ran out on question %d", self._current_index + 1)
        self._evaluate(None, timed_out=True)

    def _evaluate(self, option_index: int | None, timed_out: bool) -> EvaluationResult:
        question = self.current_question()
        correct_index = question.correct_option_index()
        if correct_index is None:
            logger.warning(
                "No correct option flagged for question %d (%s); treating option 1 as correct",
                self._current_index + 1,
                question.text,
            )
            correct_index = 0

        is_correct = option_index is not None and option_index == correct_index
        self._results[self._current_index] = is_correct
        self._score = sum(1 for result in self._results if result)

        evaluation = EvaluationResult(
            question_index=self._current_index,
            selected_option_index=option_index,
            correct_option_index=correct_index,
            is_correct=is_correct,
            timed_out=timed_out,
        )
        self._last_evaluation = evaluation
        self._countdown = self._timeout_advance_seconds if timed_out else self._feedback_seconds
        self._phase = SessionPhase.FEEDBACK
        if self._on_evaluated is not None:
            self._on_evaluated(evaluation)
        return evaluation

    def _finish(self) -> None:
        self._result = SessionResult(
            score=sum(1 for result in self._results if result),
            total=len(self._results),
        )
        self._phase = SessionPhase.FINISHED
        logger.info("Quiz finished with score %d/%d", self._result.score, self._result.total)
        if self._on_finished is not None:
            self._on_finished(self._result)
