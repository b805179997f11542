"""Fuzzy matching of typed answers against a canonical answer."""

from __future__ import annotations

import re
from enum import Enum
from typing import Mapping, Sequence

from ..errors import MatchEvaluationError

_WHITESPACE = re.compile(r"\s+")

# Normalised canonical answer -> accepted alternates.
ANSWER_VARIATIONS: dict[str, tuple[str, ...]] = {
    "incomplete pass": ("incompletion",),
    "no gain": ("0 yards", "nothing"),
    "home run": ("homer",),
    "interception": ("pick", "picked off"),
    "touchdown": ("td",),
}

CLOSE_MIN_LENGTH = 4


class MatchResult(str, Enum):
    EXACT = "exact"
    VARIANT = "variant"
    NONE = "none"

    @property
    def is_correct(self) -> bool:
        return self is not MatchResult.NONE


class Hint(str, Enum):
    NONE = "none"
    CLOSE = "close"
    NEEDS_FULL_FORM = "needs_full_form"


HINT_MESSAGES: dict[Hint, str] = {
    Hint.NONE: "",
    Hint.CLOSE: "Close! Keep going...",
    Hint.NEEDS_FULL_FORM: "Need full name?",
}


def _require_text(value: object, name: str) -> str:
    if not isinstance(value, str):
        raise MatchEvaluationError(f"{name} must be a string, got {type(value).__name__}")
    return value


def normalize_answer(text: str) -> str:
    """Trim, lowercase and collapse internal whitespace."""
    return _WHITESPACE.sub(" ", _require_text(text, "text").strip().lower())


def evaluate(
    user_text: str,
    canonical_answer: str,
    variants: Mapping[str, Sequence[str]] = ANSWER_VARIATIONS,
) -> MatchResult:
    """Classify ``user_text`` against ``canonical_answer``."""
    guess = normalize_answer(_require_text(user_text, "user_text"))
    answer = normalize_answer(_require_text(canonical_answer, "canonical_answer"))

    if not guess:
        return MatchResult.NONE
    if guess == answer:
        return MatchResult.EXACT

    for key, alternates in variants.items():
        if normalize_answer(key) != answer:
            continue
        if any(normalize_answer(alt) == guess for alt in alternates):
            return MatchResult.VARIANT
    return MatchResult.NONE


def hint(user_text: str, canonical_answer: str) -> Hint:
    """Suggest how a wrong answer could get closer.

    ``CLOSE`` wins over ``NEEDS_FULL_FORM`` when both apply.
    """
    guess = normalize_answer(_require_text(user_text, "user_text"))
    answer = normalize_answer(_require_text(canonical_answer, "canonical_answer"))
    if not guess:
        return Hint.NONE

    if guess in answer and len(guess) >= max(CLOSE_MIN_LENGTH, len(answer) / 2):
        return Hint.CLOSE
    if " " in answer and " " not in guess and answer.endswith(" " + guess):
        return Hint.NEEDS_FULL_FORM
    return Hint.NONE


def hint_message(value: Hint) -> str:
    return HINT_MESSAGES[value]
