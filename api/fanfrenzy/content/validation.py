"""Checks applied to generated (and cached) quiz content."""

from __future__ import annotations

from typing import Any

from ..errors import InvalidGeneratedContent, ValidationError
from ..gameplay.moments import MULTIPLE_CHOICE_OPTION_COUNT, GameContent, MultipleChoiceMoment
from .prompts import GameRequest

MIN_GENERATED_QUIZ_MOMENTS = 2
MAX_GENERATED_QUIZ_MOMENTS = 15


def is_usable_quiz_item(moment: Any) -> bool:
    return (
        isinstance(moment, MultipleChoiceMoment)
        and len(moment.options) == MULTIPLE_CHOICE_OPTION_COUNT
        and 0 <= moment.correct_option_index < MULTIPLE_CHOICE_OPTION_COUNT
    )


def has_current_schema(content: GameContent) -> bool:
    """A cached entry is current when its first quiz item is a 4-option multiple choice."""
    quiz = content.quiz_moments
    return bool(quiz) and is_usable_quiz_item(quiz[0])


def validate_generated(payload: Any, request: GameRequest) -> GameContent:
    """Turn the model's JSON into GameContent or raise ``InvalidGeneratedContent``."""
    if not isinstance(payload, dict):
        raise InvalidGeneratedContent("generated content is not a JSON object")
    moments = payload.get("moments")
    if not isinstance(moments, list):
        raise InvalidGeneratedContent("generated content has no moments list")

    event_data = payload.get("eventData")
    try:
        content = GameContent.from_payload(
            {
                "gameId": request.game_id,
                "title": request.title,
                "eventData": event_data if isinstance(event_data, dict) else None,
                "moments": moments,
            }
        )
    except ValidationError as exc:
        raise InvalidGeneratedContent(f"generated content is malformed: {exc.message}") from exc

    quiz = content.quiz_moments
    for moment in quiz:
        if not is_usable_quiz_item(moment):
            raise InvalidGeneratedContent(
                f"moment {moment.index} is not a multiple choice question with {MULTIPLE_CHOICE_OPTION_COUNT} options"
            )
    if not MIN_GENERATED_QUIZ_MOMENTS <= len(quiz) <= MAX_GENERATED_QUIZ_MOMENTS:
        raise InvalidGeneratedContent(
            f"expected {MIN_GENERATED_QUIZ_MOMENTS}-{MAX_GENERATED_QUIZ_MOMENTS} quiz moments, got {len(quiz)}"
        )
    return content
