from __future__ import annotations

import logging

import pytest

from quizplay.client.api_client import InvalidQuizError, NotFoundError
from quizplay.core.models import EvaluationResult, Quiz, SessionResult
from quizplay.core.services.play_session import PlaySession, SessionPhase


class Recorder:
    def __init__(self) -> None:
        self.evaluations: list[EvaluationResult] = []
        self.results: list[SessionResult] = []

    def session(self) -> PlaySession:
        return PlaySession(on_evaluated=self.evaluations.append, on_finished=self.results.append)


def _tick(session: PlaySession, times: int) -> None:
    for _ in range(times):
        session.tick()


def test_start_initializes_results_for_every_question(three_question_quiz):
    session = PlaySession()
    assert session.get_phase() is SessionPhase.LOADING

    assert session.start(three_question_quiz)

    assert session.get_phase() is SessionPhase.QUESTION
    assert session.get_results() == [False, False, False]
    assert session.get_current_index() == 0
    assert session.get_remaining_seconds() == 3
    assert session.is_timer_active()


def test_load_uses_fetcher(three_question_quiz):
    session = PlaySession()
    requested: list[str] = []

    def fetch(quiz_id: str) -> Quiz:
        requested.append(quiz_id)
        return three_question_quiz

    assert session.load("quiz-1", fetch)
    assert requested == ["quiz-1"]
    assert session.get_total_questions() == 3


def test_zero_question_quiz_enters_error_state(quiz_factory):
    session = PlaySession()

    assert not session.load("empty", lambda _id: quiz_factory(question_count=0))

    assert session.get_phase() is SessionPhase.ERROR
    assert session.get_error_message()
    session.tick()
    assert session.get_phase() is SessionPhase.ERROR


@pytest.mark.parametrize("error", [NotFoundError("Quiz not found"), InvalidQuizError("no questions")])
def test_fetch_failure_enters_error_state(error):
    session = PlaySession()

    def fetch(quiz_id: str) -> Quiz:
        raise error

    assert not session.load("missing", fetch)
    assert session.get_phase() is SessionPhase.ERROR
    assert session.get_error_message() == str(error)


def test_tick_counts_down_remaining_time(three_question_quiz):
    session = PlaySession()
    session.start(three_question_quiz)

    _tick(session, 2)

    assert session.get_remaining_seconds() == 1
    assert session.get_phase() is SessionPhase.QUESTION


def test_correct_answer_updates_score_and_enters_feedback(three_question_quiz):
    recorder = Recorder()
    session = recorder.session()
    session.start(three_question_quiz)

    evaluation = session.select_answer(0)

    assert evaluation is not None and evaluation.is_correct
    assert session.get_results() == [True, False, False]
    assert session.get_score() == 1
    assert session.get_phase() is SessionPhase.FEEDBACK
    assert session.get_countdown() == 3
    assert not session.is_timer_active()


def test_selecting_twice_is_ignored(three_question_quiz):
    recorder = Recorder()
    session = recorder.session()
    session.start(three_question_quiz)

    session.select_answer(1)
    second = session.select_answer(0)

    assert second is None
    assert len(recorder.evaluations) == 1
    assert session.get_selected_option_index() == 1
    assert session.get_results() == [False, False, False]


def test_ticks_after_answering_do_not_consume_question_time(three_question_quiz):
    session = PlaySession()
    session.start(three_question_quiz)
    session.tick()

    session.select_answer(0)
    session.tick()

    assert session.get_remaining_seconds() == 2
    assert session.get_countdown() == 2


def test_out_of_range_option_raises_and_leaves_question_open(three_question_quiz):
    session = PlaySession()
    session.start(three_question_quiz)

    with pytest.raises(ValueError):
        session.select_answer(7)

    assert session.get_selected_option_index() is None
    assert session.get_phase() is SessionPhase.QUESTION


def test_timeout_is_recorded_as_incorrect_exactly_once(three_question_quiz):
    recorder = Recorder()
    session = recorder.session()
    session.start(three_question_quiz)

    _tick(session, 3)

    assert session.get_remaining_seconds() == 0
    assert session.get_phase() is SessionPhase.FEEDBACK
    assert len(recorder.evaluations) == 1
    evaluation = recorder.evaluations[0]
    assert evaluation.timed_out
    assert not evaluation.is_correct
    assert evaluation.selected_option_index is None
    assert session.get_countdown() == 1
    assert session.select_answer(0) is None
    assert len(recorder.evaluations) == 1


def test_timeout_advances_after_one_second(three_question_quiz):
    session = PlaySession()
    session.start(three_question_quiz)
    _tick(session, 3)

    session.tick()

    assert session.get_phase() is SessionPhase.QUESTION
    assert session.get_current_index() == 1
    assert session.get_remaining_seconds() == 3
    assert session.get_selected_option_index() is None


def test_feedback_countdown_advances_to_next_question(three_question_quiz):
    session = PlaySession()
    session.start(three_question_quiz)
    session.select_answer(0)

    _tick(session, 2)
    assert session.get_phase() is SessionPhase.FEEDBACK
    session.tick()

    assert session.get_phase() is SessionPhase.QUESTION
    assert session.get_current_index() == 1


def test_continue_skips_remaining_feedback(three_question_quiz):
    session = PlaySession()
    session.start(three_question_quiz)
    session.select_answer(0)

    session.advance()

    assert session.get_phase() is SessionPhase.QUESTION
    assert session.get_current_index() == 1


def test_advance_outside_feedback_is_ignored(three_question_quiz):
    session = PlaySession()
    session.start(three_question_quiz)

    session.advance()

    assert session.get_current_index() == 0
    assert session.get_phase() is SessionPhase.QUESTION


def test_right_wrong_timeout_scores_one_of_three(three_question_quiz):
    recorder = Recorder()
    session = recorder.session()
    session.start(three_question_quiz)

    session.select_answer(0)  # Q0: correct option is 0
    _tick(session, 3)
    session.select_answer(0)  # Q1: correct option is 1
    session.advance()
    _tick(session, 3)  # Q2 times out
    session.tick()

    assert session.get_phase() is SessionPhase.FINISHED
    assert recorder.results == [SessionResult(score=1, total=3)]
    assert session.get_result() == SessionResult(score=1, total=3)
    assert session.get_results() == [True, False, False]


def test_score_always_matches_results(quiz_factory):
    session = PlaySession()
    session.start(quiz_factory(question_count=4))

    for index in range(4):
        session.select_answer(index % 4 if index % 2 == 0 else (index + 1) % 4)
        assert session.get_score() == sum(session.get_results())
        assert len(session.get_results()) == 4
        session.advance()

    assert session.get_result() == SessionResult(score=2, total=4)


def test_quit_mid_session_reports_nothing(three_question_quiz):
    recorder = Recorder()
    session = recorder.session()
    session.start(three_question_quiz)
    session.select_answer(0)
    session.advance()

    session.quit()
    _tick(session, 10)

    assert session.get_phase() is SessionPhase.ABORTED
    assert recorder.results == []
    assert session.get_result() is None


def test_quit_after_finish_keeps_result(quiz_factory):
    session = PlaySession()
    session.start(quiz_factory(question_count=1))
    session.select_answer(0)
    session.advance()

    session.quit()

    assert session.get_phase() is SessionPhase.FINISHED
    assert session.get_result() == SessionResult(score=1, total=1)


def test_missing_correct_flag_falls_back_to_first_option(question_factory, caplog):
    quiz = Quiz(id="q", title="Broken", questions=[question_factory("Q", correct_index=None)])
    session = PlaySession()
    session.start(quiz)

    with caplog.at_level(logging.WARNING, logger="quizplay.core.services.play_session"):
        evaluation = session.select_answer(0)

    assert evaluation is not None
    assert evaluation.correct_option_index == 0
    assert evaluation.is_correct
    assert "No correct option flagged" in caplog.text


def test_non_positive_time_budget_uses_default(quiz_factory):
    session = PlaySession()
    session.start(quiz_factory(seconds_per_question=0))

    assert session.get_remaining_seconds() == 15


def test_question_without_options_enters_error_state(question_factory):
    quiz = Quiz(id="q", title="Empty options", questions=[question_factory("Q", option_count=0)], seconds_per_question=1)
    session = PlaySession()

    assert not session.start(quiz)

    assert session.get_phase() is SessionPhase.ERROR
    assert session.get_error_message() == "Question 1 has no answer options."
    session.tick()
    assert session.get_phase() is SessionPhase.ERROR
