"""Terminal front end for playing a quiz with ``SessionDriver``."""

from __future__ import annotations

import sys
from threading import Thread
from typing import TextIO

from PySide6.QtCore import QCoreApplication, QObject, Signal

from quizplay.core.models import EvaluationResult, SessionResult
from quizplay.core.services.play_session import SessionPhase
from quizplay.player.session_driver import SessionDriver

_COUNTDOWN_WARNING_SECONDS = 5
_HELP_TEXT = "Type the option number and press Enter. 'c' continues, 'q' quits."


class ConsolePlayer(QObject):
    """Renders session progress as text and turns input lines into session commands."""

    line_received = Signal(str)

    def __init__(self, driver: SessionDriver, output: TextIO | None = None, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self.driver = driver
        self._output = output or sys.stdout
        self._shown_stage: tuple[SessionPhase, int] | None = None
        self._shown_remaining: int | None = None
        self.exit_code: int = 0

        self.line_received.connect(self.handle_line)
        driver.state_changed.connect(self._render_state)
        driver.answer_evaluated.connect(self._render_evaluation)
        driver.finished.connect(self._render_finished)
        driver.aborted.connect(self._render_aborted)
        driver.failed.connect(self._render_failure)

    def start_reading(self, stream: TextIO | None = None) -> Thread:
        """Read lines from ``stream`` on a background thread and queue them to the event loop."""
        source = stream or sys.stdin

        def read_lines() -> None:
            for line in source:
                self.line_received.emit(line)
            self.line_received.emit("q")

        thread = Thread(target=read_lines, name="ConsoleInput", daemon=True)
        thread.start()
        return thread

    def handle_line(self, line: str) -> None:
        command = line.strip().lower()
        session = self.driver.session
        if not command or session.is_terminal():
            return
        if command == "q":
            self.driver.quit()
        elif command == "c":
            self.driver.advance()
        elif command.isdigit():
            try:
                if self.driver.select_answer(int(command) - 1) is None:
                    self._write("You have already answered this question!")
            except ValueError:
                self._write(f"Choose an option between 1 and {len(session.current_question().options)}.")
        else:
            self._write(_HELP_TEXT)

    def _render_state(self) -> None:
        session = self.driver.session
        phase = session.get_phase()
        stage = (phase, session.get_current_index())
        if phase is SessionPhase.QUESTION:
            if stage != self._shown_stage:
                self._render_question()
            elif session.is_timer_active():
                remaining = session.get_remaining_seconds()
                if remaining <= _COUNTDOWN_WARNING_SECONDS and remaining != self._shown_remaining:
                    self._write(f"  {remaining}s remaining")
                    self._shown_remaining = remaining
        self._shown_stage = stage

    def _render_question(self) -> None:
        session = self.driver.session
        question = session.current_question()
        self._write("")
        self._write(f"Question {session.get_current_index() + 1}/{session.get_total_questions()}")
        self._write(question.text)
        if question.image_url:
            self._write(f"[image: {question.image_url}]")
        for number, option in enumerate(question.options, start=1):
            self._write(f"  {number}. {option.text}")
        self._write(f"You have {session.get_remaining_seconds()} seconds.")
        self._shown_remaining = session.get_remaining_seconds()

    def _render_evaluation(self, evaluation: EvaluationResult) -> None:
        question = self.driver.session.current_question()
        correct_text = question.options[evaluation.correct_option_index].text
        if evaluation.timed_out:
            self._write(f"Time's up! The correct answer was: {correct_text}")
            return
        if evaluation.is_correct:
            self._write("Correct!")
        else:
            self._write(f"Incorrect. The correct answer was: {correct_text}")
        if question.explanation:
            self._write(question.explanation)
        self._write(f"Score: {self.driver.session.get_score()}. Next question in {self.driver.session.get_countdown()}s ('c' to continue).")

    def _render_finished(self, result: SessionResult) -> None:
        self._write("")
        self._write(f"Quiz Finished. Your score: {result.score}/{result.total}")
        self._exit(0)

    def _render_aborted(self) -> None:
        self._write("Quiz abandoned.")
        self._exit(0)

    def _render_failure(self, message: str) -> None:
        self._write(f"Error: {message}")
        self._exit(1)

    def _exit(self, code: int) -> None:
        self.exit_code = code
        app = QCoreApplication.instance()
        if app is not None:
            app.exit(code)

    def _write(self, text: str) -> None:
        print(text, file=self._output, flush=True)
