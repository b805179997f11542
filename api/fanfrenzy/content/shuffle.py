"""Projection of quiz content into the shuffle game's unlabelled moments."""

from __future__ import annotations

from typing import assert_never

from ..errors import ContentUnavailable
from ..gameplay.moments import (
    EndMoment,
    FillInMoment,
    GameContent,
    Moment,
    MultipleChoiceMoment,
    ShuffleItemMoment,
    StartMoment,
)
from ..utils.redaction import sanitize_context

MIN_SHUFFLE_MOMENTS = 2


def _as_shuffle_item(moment: Moment) -> ShuffleItemMoment | None:
    if isinstance(moment, (StartMoment, EndMoment, FillInMoment)):
        return None
    if isinstance(moment, (MultipleChoiceMoment, ShuffleItemMoment)):
        if not moment.context or not moment.context.strip():
            return None
        # Only index, context and importance carry over; questions and
        # options would give the order away.
        return ShuffleItemMoment(
            index=moment.index,
            importance=moment.importance,
            context=sanitize_context(moment.context),
        )
    assert_never(moment)


def to_shuffle_content(content: GameContent) -> GameContent:
    """Shuffle-ready copy of ``content`` with redacted contexts.

    Raises:
        ContentUnavailable: Fewer than two moments have usable context.
    """
    items = [item for item in (_as_shuffle_item(m) for m in content.moments) if item is not None]
    if len(items) < MIN_SHUFFLE_MOMENTS:
        raise ContentUnavailable(f"{content.game_id} has too few moments to shuffle")
    return GameContent(
        game_id=content.game_id,
        title=content.title,
        event_data=None,
        moments=tuple(sorted(items, key=lambda m: m.index)),
    )
