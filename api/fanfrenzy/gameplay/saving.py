"""Persisting a finished attempt's score."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

from ..errors import FanFrenzyError
from ..scores.models import ScoreSubmission
from .attempt import Attempt
from .timers import Scheduler

logger = logging.getLogger(__name__)

SubmitScore = Callable[[ScoreSubmission], Awaitable[Any]]


class ScoreSaver:
    """Saves an attempt's score once, when it finishes.

    Only authenticated viewers save. A failed save leaves the attempt's
    score untouched; ``retry()`` resubmits the same payload, including its
    ``attemptId``, so the server can drop a duplicate.
    """

    def __init__(self, submit: SubmitScore, scheduler: Scheduler, is_authenticated: bool | Callable[[], bool]) -> None:
        self._submit = submit
        self.scheduler = scheduler
        self._is_authenticated = is_authenticated
        self.has_saved = False
        self.is_saving = False
        self.save_success: bool | None = None
        self.error: Exception | None = None
        self.result: Any = None
        self.payload: ScoreSubmission | None = None

    @property
    def is_authenticated(self) -> bool:
        value = self._is_authenticated
        return value() if callable(value) else bool(value)

    def attach(self, attempt: Attempt) -> None:
        attempt.on_finish(self._on_finish)

    def _on_finish(self, attempt: Attempt) -> None:
        if not self.is_authenticated:
            logger.info("score_save_skipped_anonymous", extra={"attempt_id": attempt.attempt_id})
            return
        self.trigger(attempt)

    def trigger(self, attempt: Attempt) -> Any:
        """Start a save unless one is running or already succeeded."""
        if self.has_saved or self.is_saving:
            return None
        self.payload = attempt.submission()
        return self._start(self.payload)

    def retry(self) -> Any:
        if self.payload is None or self.has_saved or self.is_saving:
            return None
        return self._start(self.payload)

    def _start(self, payload: ScoreSubmission) -> Any:
        self.is_saving = True
        return self.scheduler.spawn(self._save(payload))

    async def _save(self, payload: ScoreSubmission) -> None:
        try:
            self.result = await self._submit(payload)
        except FanFrenzyError as exc:
            self.save_success = False
            self.error = exc
            logger.warning(
                "score_save_failed",
                extra={"attempt_id": payload.attempt_id, "error_type": type(exc).__name__, "error": exc.message},
            )
        except Exception as exc:
            self.save_success = False
            self.error = exc
            logger.exception(
                "score_save_failed",
                extra={"attempt_id": payload.attempt_id, "error_type": type(exc).__name__, "error": str(exc)},
            )
        else:
            self.has_saved = True
            self.save_success = True
            self.error = None
        finally:
            self.is_saving = False
