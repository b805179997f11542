"""Tests for the daily fill-in attempt."""

from __future__ import annotations

import pytest

from fanfrenzy.errors import ValidationError
from fanfrenzy.gameplay.attempt import Attempt, AttemptState, AttemptStateError, FillInAttempt
from fanfrenzy.gameplay.moments import GameContent
from fanfrenzy.gameplay.timers import DEFAULT_HINT_DEBOUNCE_SECONDS, ManualScheduler


def _content(*moments: dict) -> GameContent:
    return GameContent.from_payload(
        {
            "gameId": "rutgers-vs-louisville-2006",
            "title": "Rutgers vs. Louisville",
            "moments": [
                {"index": 0, "type": "start", "context": "Louisville leads late."},
                *moments,
                {"index": 99, "type": "end", "context": "Rutgers wins."},
            ],
        }
    )


RICE = {"index": 1, "type": "fill-in", "prompt": "Who scored?", "answer": "Ray Rice", "importance": 9}
UNDERWOOD = {"index": 2, "type": "fillIn", "prompt": "Who caught it?", "answer": "Tiquan Underwood", "importance": 8.8}
ITO = {"index": 3, "type": "fillIn", "prompt": "Who kicked it?", "answer": "Jeremy Ito"}


def _attempt(*moments: dict) -> tuple[FillInAttempt, ManualScheduler]:
    scheduler = ManualScheduler()
    attempt = FillInAttempt(scheduler=scheduler)
    attempt.load(_content(*moments))
    return attempt, scheduler


class TestFillInAttempt:
    def test_correct_answer_locks_scores_and_finishes(self) -> None:
        """Typing 'ray rice' locks the only item, adds 90 and finishes."""
        attempt, _ = _attempt(RICE)
        finished: list[FillInAttempt] = []
        attempt.on_finish(finished.append)

        assert attempt.edit(0, "ray rice") is True

        assert attempt.locked == (True,)
        assert attempt.feedback == ["Correct!"]
        assert attempt.score == 90
        assert attempt.state is AttemptState.FINISHED
        assert finished == [attempt]

    def test_missing_importance_scores_one(self) -> None:
        attempt, _ = _attempt(RICE, ITO)

        attempt.edit(1, "jeremy ito")

        assert attempt.score == 1
        assert attempt.state is AttemptState.ACTIVE

    def test_variant_answer_is_correct(self) -> None:
        attempt, _ = _attempt({"index": 1, "type": "fill-in", "prompt": "Result?", "answer": "Touchdown", "importance": 5})

        attempt.edit(0, "TD")

        assert attempt.locked == (True,)
        assert attempt.score == 50

    def test_hint_appears_after_debounce(self) -> None:
        attempt, scheduler = _attempt(RICE, UNDERWOOD)

        attempt.edit(1, "tiquan under")
        assert attempt.feedback[1] == ""
        scheduler.advance(0.5)
        assert attempt.feedback[1] == ""
        scheduler.advance(0.25)

        assert attempt.feedback[1] == "Close! Keep going..."

    def test_hint_delay_is_configurable(self) -> None:
        scheduler = ManualScheduler()
        attempt = FillInAttempt(scheduler=scheduler, hint_delay=2.0)
        attempt.load(_content(RICE, UNDERWOOD))

        attempt.edit(1, "tiquan under")
        scheduler.advance(DEFAULT_HINT_DEBOUNCE_SECONDS)
        assert attempt.feedback[1] == ""
        scheduler.advance(1.25)

        assert attempt.feedback[1] == "Close! Keep going..."

    def test_needs_full_name_hint(self) -> None:
        attempt, scheduler = _attempt(RICE, ITO)

        attempt.edit(1, "ito")
        scheduler.advance(0.75)

        assert attempt.feedback[1] == "Need full name?"

    def test_new_edit_supersedes_pending_hint(self) -> None:
        attempt, scheduler = _attempt(RICE, UNDERWOOD)

        attempt.edit(1, "tiquan under")
        scheduler.advance(0.5)
        attempt.edit(1, "zz")
        scheduler.advance(0.5)
        assert attempt.feedback[1] == ""
        scheduler.advance(0.25)

        assert attempt.feedback[1] == ""
        assert len(scheduler.pending) == 0

    def test_short_input_clears_feedback_and_timer(self) -> None:
        attempt, scheduler = _attempt(RICE, UNDERWOOD)
        attempt.edit(1, "tiquan under")
        scheduler.advance(0.75)
        assert attempt.feedback[1] == "Close! Keep going..."

        attempt.edit(1, "t")

        assert attempt.feedback[1] == ""
        assert scheduler.pending == []

    def test_locks_are_monotonic(self) -> None:
        attempt, _ = _attempt(RICE, UNDERWOOD)
        attempt.edit(0, "Ray Rice")

        assert attempt.edit(0, "something else") is False

        assert attempt.locked == (True, False)
        assert attempt.inputs[0] == "Ray Rice"
        assert attempt.score == 90

    def test_give_up_cancels_timers_and_finishes_once(self) -> None:
        attempt, scheduler = _attempt(RICE, UNDERWOOD)
        calls: list[int] = []
        attempt.on_finish(lambda a: calls.append(a.score))
        attempt.edit(1, "tiquan under")

        attempt.give_up()
        scheduler.advance(1.0)

        assert scheduler.pending == []
        assert attempt.feedback[1] == ""
        assert calls == [0]
        with pytest.raises(AttemptStateError):
            attempt.give_up()

    def test_edit_after_finish_raises(self) -> None:
        attempt, _ = _attempt(RICE)
        attempt.edit(0, "Ray Rice")

        with pytest.raises(AttemptStateError):
            attempt.edit(0, "Ray Rice")

    def test_edit_before_load_raises(self) -> None:
        attempt = FillInAttempt(scheduler=ManualScheduler())

        with pytest.raises(AttemptStateError):
            attempt.edit(0, "x")

    def test_load_twice_raises(self) -> None:
        attempt, _ = _attempt(RICE)

        with pytest.raises(AttemptStateError):
            attempt.load(_content(RICE))

    def test_out_of_range_item(self) -> None:
        attempt, _ = _attempt(RICE)

        with pytest.raises(ValidationError):
            attempt.edit(5, "x")

    def test_content_without_fill_ins_rejected(self) -> None:
        attempt = FillInAttempt(scheduler=ManualScheduler())

        with pytest.raises(ValidationError):
            attempt.load(_content())

    def test_submission_payload(self) -> None:
        scheduler = ManualScheduler()
        attempt = FillInAttempt(scheduler=scheduler, attempt_id="attempt-1", player_name="Sam")
        attempt.load(_content(RICE, ITO))
        attempt.edit(0, "ray rice")

        submission = attempt.submission()

        assert submission.to_payload() == {
            "gameId": "rutgers-vs-louisville-2006",
            "mode": "daily",
            "score": 90,
            "metadata": {"totalMoments": 2, "correctCount": 1, "playerName": "Sam"},
            "attemptId": "attempt-1",
        }


class TestAttemptBase:
    def test_base_attempt_is_abstract(self) -> None:
        with pytest.raises(TypeError):
            Attempt(scheduler=ManualScheduler())

    def test_subclass_must_define_metadata(self) -> None:
        class NoMetadata(Attempt):
            def _setup(self, content: GameContent) -> int:
                return 0

        with pytest.raises(TypeError):
            NoMetadata(scheduler=ManualScheduler())
