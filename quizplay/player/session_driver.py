"""Qt driver that runs a ``PlaySession`` on the event loop."""

from __future__ import annotations

from collections.abc import Callable
import logging

from PySide6.QtCore import QObject, QTimer, Signal

from quizplay.constants.quiz_constants import TICK_INTERVAL_MS
from quizplay.core.models import EvaluationResult, Quiz, SessionResult
from quizplay.core.services.play_session import PlaySession, SessionPhase

logger = logging.getLogger(__name__)


class SessionDriver(QObject):
    """Owns the one-second tick timer of a play session and reports its progress.

    The timer runs only while the session is in a question or feedback stage,
    and is stopped for good once the session reaches a terminal phase.
    """

    state_changed = Signal()
    answer_evaluated = Signal(object)
    finished = Signal(object)
    aborted = Signal()
    failed = Signal(str)

    def __init__(self, parent: QObject | None = None, tick_interval_ms: int = TICK_INTERVAL_MS) -> None:
        super().__init__(parent)
        self._session = PlaySession(
            on_evaluated=self._handle_evaluated,
            on_finished=self._handle_finished,
        )
        self._tick_timer = QTimer(self)
        self._tick_timer.setInterval(tick_interval_ms)
        self._tick_timer.timeout.connect(self._on_tick)
        self._last_stage: tuple[SessionPhase, int] | None = None

    @property
    def session(self) -> PlaySession:
        return self._session

    def is_ticking(self) -> bool:
        return self._tick_timer.isActive()

    def load(self, quiz_id: str, fetch_quiz: Callable[[str], Quiz]) -> bool:
        loaded = self._session.load(quiz_id, fetch_quiz)
        self._after_transition()
        return loaded

    def start(self, quiz: Quiz) -> bool:
        started = self._session.start(quiz)
        self._after_transition()
        return started

    def select_answer(self, option_index: int) -> EvaluationResult | None:
        evaluation = self._session.select_answer(option_index)
        if evaluation is not None:
            self._after_transition()
        return evaluation

    def advance(self) -> None:
        self._session.advance()
        self._after_transition()

    def quit(self) -> None:
        if self._session.is_terminal():
            return
        self._session.quit()
        self._after_transition()

    def _on_tick(self) -> None:
        self._session.tick()
        self._after_transition()

    def _after_transition(self) -> None:
        phase = self._session.get_phase()
        stage = (phase, self._session.get_current_index())
        if phase in (SessionPhase.QUESTION, SessionPhase.FEEDBACK):
            # Each new stage gets a full first second.
            if stage != self._last_stage or not self._tick_timer.isActive():
                self._tick_timer.start()
        else:
            self._tick_timer.stop()
        self._last_stage = stage

        self.state_changed.emit()
        if phase is SessionPhase.ERROR:
            self.failed.emit(self._session.get_error_message() or "Could not load quiz data.")
        elif phase is SessionPhase.ABORTED:
            self.aborted.emit()

    def _handle_evaluated(self, evaluation: EvaluationResult) -> None:
        self.answer_evaluated.emit(evaluation)

    def _handle_finished(self, result: SessionResult) -> None:
        self.finished.emit(result)
