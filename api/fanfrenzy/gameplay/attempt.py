"""Attempt state machines.

An attempt is one player's run through one GameContent. It starts ``idle``,
becomes ``active`` on ``load()`` and ends ``finished``; finished is terminal.
All mutation is synchronous. The only deferred work is the per-item hint
debounce, which runs through the attempt's ``Scheduler``.
"""

from __future__ import annotations

import logging
import random
import uuid
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable, Sequence

from ..db.scores import GameMode
from ..errors import ValidationError
from ..scores.models import ScoreSubmission
from .matching import evaluate, hint, hint_message
from .moments import FillInMoment, GameContent, MultipleChoiceMoment, ScorableMoment, moment_context, points_for
from .ordering import AdjacencyPolicy, DistancePolicy, ItemStatus, OrderingResult, ScoringPolicy, ensure_same_items
from .timers import DEFAULT_HINT_DEBOUNCE_SECONDS, AsyncioScheduler, HintTimers, Scheduler

logger = logging.getLogger(__name__)

CORRECT_FEEDBACK = "Correct!"
DAILY_ORDERING_GUESSES = 3
SHUFFLE_GUESSES = 1


class AttemptState(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    FINISHED = "finished"


class AttemptStateError(Exception):
    """An action was taken in a state that does not allow it."""


FinishListener = Callable[["Attempt"], None]


class Attempt(ABC):
    """Shared lifecycle, locks, feedback and finish notification."""

    mode: GameMode

    def __init__(
        self,
        scheduler: Scheduler | None = None,
        attempt_id: str | None = None,
        hint_delay: float = DEFAULT_HINT_DEBOUNCE_SECONDS,
    ) -> None:
        self.scheduler = scheduler or AsyncioScheduler()
        self.timers = HintTimers(self.scheduler, hint_delay)
        self.attempt_id = attempt_id or str(uuid.uuid4())
        self.state = AttemptState.IDLE
        self.score = 0
        self.content: GameContent | None = None
        self.feedback: list[str] = []
        self._locked: list[bool] = []
        self._finish_listeners: list[FinishListener] = []

    @property
    def locked(self) -> tuple[bool, ...]:
        return tuple(self._locked)

    @property
    def is_finished(self) -> bool:
        return self.state is AttemptState.FINISHED

    def on_finish(self, listener: FinishListener) -> None:
        self._finish_listeners.append(listener)

    def load(self, content: GameContent) -> None:
        if self.state is not AttemptState.IDLE:
            raise AttemptStateError(f"cannot load content into a {self.state.value} attempt")
        self.content = content
        count = self._setup(content)
        self._locked = [False] * count
        self.feedback = [""] * count
        self.state = AttemptState.ACTIVE
        logger.debug("attempt_loaded", extra={"attempt_id": self.attempt_id, "game_id": content.game_id, "items": count})

    def give_up(self) -> None:
        self._require_active()
        self._finish()

    def submission(self) -> ScoreSubmission:
        """Score payload for this attempt, keyed by ``attempt_id``."""
        if self.content is None:
            raise AttemptStateError("no content loaded")
        return ScoreSubmission(
            game_id=self.content.game_id,
            mode=self.mode,
            score=self.score,
            metadata=self.metadata(),
            attempt_id=self.attempt_id,
        )

    @abstractmethod
    def metadata(self) -> dict[str, Any]:
        """Mode-specific score metadata."""

    @abstractmethod
    def _setup(self, content: GameContent) -> int:
        """Initialise per-item state; return the item count."""

    def _require_active(self) -> None:
        if self.state is not AttemptState.ACTIVE:
            raise AttemptStateError(f"attempt is {self.state.value}")

    def _check_item(self, i: int, field: str = "index") -> None:
        if not 0 <= i < len(self._locked):
            raise ValidationError(field, f"{i} is out of range")

    def _lock(self, i: int) -> None:
        # Locks only ever go from False to True.
        self._locked[i] = True
        self.timers.cancel(i)

    def _finish(self) -> None:
        if self.state is AttemptState.FINISHED:
            return
        self.state = AttemptState.FINISHED
        self.timers.cancel_all()
        logger.info(
            "attempt_finished",
            extra={"attempt_id": self.attempt_id, "mode": self.mode.value, "score": self.score},
        )
        for listener in self._finish_listeners:
            listener(self)


class FillInAttempt(Attempt):
    """Daily fill-in-the-blank: type answers until every blank is locked."""

    mode = GameMode.daily

    def __init__(self, *args: Any, player_name: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.player_name = player_name
        self.items: list[FillInMoment] = []
        self.inputs: list[str] = []

    def _setup(self, content: GameContent) -> int:
        self.items = [m for m in content.quiz_moments if isinstance(m, FillInMoment)]
        if not self.items:
            raise ValidationError("moments", "content has no fill-in moments")
        self.inputs = [""] * len(self.items)
        return len(self.items)

    def edit(self, i: int, text: str) -> bool:
        """Record typed text for item ``i``; return True if it locked the item."""
        self._require_active()
        self._check_item(i)
        if self._locked[i]:
            return False

        self.timers.cancel(i)
        self.inputs[i] = text
        moment = self.items[i]

        if evaluate(text, moment.answer).is_correct:
            self._lock(i)
            self.feedback[i] = CORRECT_FEEDBACK
            self.score += points_for(moment.importance)
            if all(self._locked):
                self._finish()
            return True

        if len(text.strip()) >= 2:
            self.timers.schedule(i, lambda: self._show_hint(i))
        else:
            self.feedback[i] = ""
        return False

    def _show_hint(self, i: int) -> None:
        if self.is_finished or self._locked[i]:
            return
        self.feedback[i] = hint_message(hint(self.inputs[i], self.items[i].answer))

    def metadata(self) -> dict[str, Any]:
        data: dict[str, Any] = {"totalMoments": len(self.items), "correctCount": sum(self._locked)}
        if self.player_name:
            data["playerName"] = self.player_name
        return data


class MultipleChoiceAttempt(Attempt):
    """Rewind quiz: one question at a time, reveal or skip."""

    mode = GameMode.rewind

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.items: list[MultipleChoiceMoment] = []
        self.answers: list[int | None] = []
        self.current = 0
        self.selected: int | None = None
        self.correct_count = 0
        self.skipped_count = 0

    def _setup(self, content: GameContent) -> int:
        self.items = [m for m in content.quiz_moments if isinstance(m, MultipleChoiceMoment)]
        if not self.items:
            raise ValidationError("moments", "content has no multiple-choice moments")
        self.answers = [None] * len(self.items)
        return len(self.items)

    @property
    def current_moment(self) -> MultipleChoiceMoment | None:
        return self.items[self.current] if self.current < len(self.items) else None

    def select(self, option: int) -> None:
        self._require_active()
        moment = self.items[self.current]
        if not 0 <= option < len(moment.options):
            raise ValidationError("option", f"{option} is out of range")
        self.selected = option

    def reveal(self) -> bool:
        """Score the staged choice and move on; return whether it was correct."""
        self._require_active()
        if self.selected is None:
            raise AttemptStateError("select an option before revealing")
        moment = self.items[self.current]
        correct = self.selected == moment.correct_option_index
        self.answers[self.current] = self.selected
        self._lock(self.current)
        if correct:
            self.correct_count += 1
            self.score += points_for(moment.importance)
            self.feedback[self.current] = CORRECT_FEEDBACK
        else:
            self.feedback[self.current] = moment.explanation or f"Answer: {moment.correct_option}"
        self._advance()
        return correct

    def skip(self) -> None:
        self._require_active()
        self.skipped_count += 1
        self._advance()

    def _advance(self) -> None:
        self.current += 1
        self.selected = None
        if self.current >= len(self.items):
            self._finish()

    def metadata(self) -> dict[str, Any]:
        return {
            "totalMoments": len(self.items),
            "correctCount": self.correct_count,
            "skippedCount": self.skipped_count,
        }


class OrderingAttempt(Attempt):
    """Put moments in chronological order within a fixed number of guesses.

    Item ids are moment indices. Locked items keep their slots; moves only
    permute the unlocked items among the unlocked slots.
    """

    def __init__(
        self,
        policy: ScoringPolicy,
        max_guesses: int,
        mode: GameMode,
        *args: Any,
        rng: random.Random | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(*args, **kwargs)
        self.policy = policy
        self.max_guesses = max_guesses
        self.mode = mode
        self.guesses_remaining = max_guesses
        self.rng = rng or random.Random()
        self.items: list[ScorableMoment] = []
        self.correct_order: list[int] = []
        self.order: list[int] = []
        self.last_result: OrderingResult | None = None
        self.can_submit = False
        self._requested_order: Sequence[int] | None = None
        self._position_of: dict[int, int] = {}

    @classmethod
    def daily(cls, *args: Any, **kwargs: Any) -> "OrderingAttempt":
        return cls(AdjacencyPolicy(), DAILY_ORDERING_GUESSES, GameMode.daily, *args, **kwargs)

    @classmethod
    def shuffle(cls, *args: Any, **kwargs: Any) -> "OrderingAttempt":
        return cls(DistancePolicy(), SHUFFLE_GUESSES, GameMode.shuffle, *args, **kwargs)

    def load(self, content: GameContent, order: Sequence[int] | None = None) -> None:
        """Load content; ``order`` fixes the starting arrangement instead of shuffling."""
        self._requested_order = order
        super().load(content)

    def _setup(self, content: GameContent) -> int:
        self.items = [m for m in content.quiz_moments if moment_context(m)]
        if len(self.items) < 2:
            raise ValidationError("moments", "ordering needs at least two moments")
        self.correct_order = [m.index for m in self.items]
        self._position_of = {item_id: k for k, item_id in enumerate(self.correct_order)}

        if self._requested_order is not None:
            ensure_same_items(self.correct_order, list(self._requested_order))
            self.order = list(self._requested_order)
        else:
            self.order = list(self.correct_order)
            self.rng.shuffle(self.order)
        return len(self.items)

    @property
    def locked_ids(self) -> frozenset:
        return frozenset(item_id for item_id in self.correct_order if self._locked[self._position_of[item_id]])

    def is_slot_locked(self, slot: int) -> bool:
        return self._locked[self._position_of[self.order[slot]]]

    def move(self, source: int, target: int) -> bool:
        """Move the item at ``source`` to ``target``; return False if a locked slot is involved."""
        self._require_active()
        self._check_item(source, "source")
        self._check_item(target, "target")
        if source == target or self.is_slot_locked(source) or self.is_slot_locked(target):
            return False

        free_slots = [slot for slot in range(len(self.order)) if not self.is_slot_locked(slot)]
        free_items = [self.order[slot] for slot in free_slots]
        item = free_items.pop(free_slots.index(source))
        free_items.insert(free_slots.index(target), item)
        for slot, item_id in zip(free_slots, free_items):
            self.order[slot] = item_id

        self.last_result = None
        self.can_submit = True
        return True

    def submit(self) -> OrderingResult:
        """Score the current arrangement as one guess."""
        self._require_active()
        if not self.can_submit:
            raise AttemptStateError("reorder at least one item before submitting")
        if self.guesses_remaining <= 0:
            raise AttemptStateError("no guesses remaining")

        result = self.policy.score(
            self.correct_order,
            self.order,
            {m.index: m.importance for m in self.items},
            locked=self.locked_ids,
        )
        self.guesses_remaining -= 1
        self.can_submit = False
        self.last_result = result
        self.score = result.total

        for item in result.per_item:
            k = self._position_of[item.item_id]
            if item.status in (ItemStatus.LOCKED, ItemStatus.CORRECT):
                self._lock(k)
            self.feedback[k] = item.status.value

        logger.debug(
            "ordering_guess_scored",
            extra={"attempt_id": self.attempt_id, "total": result.total, "guesses_remaining": self.guesses_remaining},
        )
        if all(self._locked) or self.guesses_remaining == 0:
            self._finish()
        return result

    def metadata(self) -> dict[str, Any]:
        if self.mode is GameMode.shuffle:
            correct = 0
            bonus = False
            if self.last_result is not None:
                correct = sum(1 for item in self.last_result.per_item if item.status is ItemStatus.CORRECT)
                bonus = self.last_result.most_important_bonus_applied
            return {"totalMoments": len(self.items), "correctPositions": correct, "bonusEarned": bonus}
        return {
            "totalMoments": len(self.items),
            "correctCount": sum(self._locked),
            "guessesUsed": self.max_guesses - self.guesses_remaining,
        }
