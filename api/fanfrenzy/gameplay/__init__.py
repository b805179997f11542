"""Gameplay engine: moments, answer matching, ordering scores and attempts."""

from .attempt import (
    Attempt,
    AttemptState,
    AttemptStateError,
    FillInAttempt,
    MultipleChoiceAttempt,
    OrderingAttempt,
)
from .matching import Hint, MatchResult, evaluate, hint, hint_message, normalize_answer
from .moments import (
    EndMoment,
    FillInMoment,
    GameContent,
    Moment,
    MultipleChoiceMoment,
    ShuffleItemMoment,
    StartMoment,
    parse_moment,
)
from .ordering import AdjacencyPolicy, DistancePolicy, ItemStatus, OrderingResult, ensure_same_items
from .saving import ScoreSaver
from .timers import AsyncioScheduler, HintTimers, ManualScheduler, Scheduler

__all__ = [
    "AdjacencyPolicy",
    "AsyncioScheduler",
    "Attempt",
    "AttemptState",
    "AttemptStateError",
    "DistancePolicy",
    "EndMoment",
    "FillInAttempt",
    "FillInMoment",
    "GameContent",
    "Hint",
    "HintTimers",
    "ItemStatus",
    "ManualScheduler",
    "MatchResult",
    "Moment",
    "MultipleChoiceAttempt",
    "MultipleChoiceMoment",
    "OrderingAttempt",
    "OrderingResult",
    "Scheduler",
    "ScoreSaver",
    "ShuffleItemMoment",
    "StartMoment",
    "ensure_same_items",
    "evaluate",
    "hint",
    "hint_message",
    "normalize_answer",
    "parse_moment",
]
