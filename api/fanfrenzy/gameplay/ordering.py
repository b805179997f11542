"""Scoring of a submitted chronological order.

Two policies share one interface. ``AdjacencyPolicy`` rewards correct
neighbours and drives the daily ordering game's per-item locks;
``DistancePolicy`` rewards exact placement and penalises large misses for
the shuffle game.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Hashable, Mapping, Protocol, Sequence

from ..errors import ValidationError

ItemId = Hashable


class ItemStatus(str, Enum):
    LOCKED = "locked"
    CLOSE = "close"
    FAR = "far"
    CORRECT = "correct"
    FAR_OFF = "far_off"


@dataclass(frozen=True)
class ItemScore:
    item_id: ItemId
    points: int
    status: ItemStatus
    position: int
    correct_position: int


@dataclass(frozen=True)
class OrderingResult:
    per_item: tuple[ItemScore, ...]
    total: int
    most_important_bonus_applied: bool = False

    def points_by_id(self) -> dict[ItemId, int]:
        return {item.item_id: item.points for item in self.per_item}


class ScoringPolicy(Protocol):
    max_item_points: int

    def score(
        self,
        correct_order: Sequence[ItemId],
        submitted_order: Sequence[ItemId],
        importance_by_id: Mapping[ItemId, float | None],
        locked: frozenset = frozenset(),
    ) -> OrderingResult: ...


def ensure_same_items(correct_order: Sequence[ItemId], submitted_order: Sequence[ItemId]) -> None:
    """Raise ``ValidationError`` unless both orders hold the same ids."""
    if len(submitted_order) != len(correct_order):
        raise ValidationError("order", f"expected {len(correct_order)} items, got {len(submitted_order)}")
    if Counter(submitted_order) != Counter(correct_order):
        raise ValidationError("order", "submitted items do not match the game's items")


class AdjacencyPolicy:
    """Up to 4 points per item: one per correct neighbour, two for the exact slot.

    The top and bottom edges count as correct neighbours for the items that
    belong there.
    """

    max_item_points = 4

    def score(
        self,
        correct_order: Sequence[ItemId],
        submitted_order: Sequence[ItemId],
        importance_by_id: Mapping[ItemId, float | None],
        locked: frozenset = frozenset(),
    ) -> OrderingResult:
        correct_position = {item_id: pos for pos, item_id in enumerate(correct_order)}
        last = len(submitted_order) - 1
        per_item: list[ItemScore] = []

        for i, item_id in enumerate(submitted_order):
            want = correct_position[item_id]
            if item_id in locked:
                per_item.append(ItemScore(item_id, self.max_item_points, ItemStatus.LOCKED, i, want))
                continue

            points = 0
            if i > 0:
                if correct_position[submitted_order[i - 1]] == want - 1:
                    points += 1
            elif want == 0:
                points += 1

            if i < last:
                if correct_position[submitted_order[i + 1]] == want + 1:
                    points += 1
            elif want == last:
                points += 1

            if i == want:
                points += 2

            per_item.append(ItemScore(item_id, points, _adjacency_status(points), i, want))

        return OrderingResult(tuple(per_item), sum(item.points for item in per_item))


def _adjacency_status(points: int) -> ItemStatus:
    if points >= AdjacencyPolicy.max_item_points:
        return ItemStatus.LOCKED
    if points >= 2:
        return ItemStatus.CLOSE
    return ItemStatus.FAR


CORRECT_POINTS = 10
MOST_IMPORTANT_BONUS = 5
FAR_OFF_PENALTY = -2
CLOSE_DISTANCE = 2


class DistancePolicy:
    """+10 for the exact slot, 0 within two slots, -2 beyond; +5 once for the key moment."""

    max_item_points = CORRECT_POINTS + MOST_IMPORTANT_BONUS

    def score(
        self,
        correct_order: Sequence[ItemId],
        submitted_order: Sequence[ItemId],
        importance_by_id: Mapping[ItemId, float | None],
        locked: frozenset = frozenset(),
    ) -> OrderingResult:
        correct_position = {item_id: pos for pos, item_id in enumerate(correct_order)}
        key_moment = most_important_item(correct_order, importance_by_id)
        bonus_applied = False
        per_item: list[ItemScore] = []

        for i, item_id in enumerate(submitted_order):
            want = correct_position[item_id]
            diff = abs(i - want)
            if diff == 0:
                points = CORRECT_POINTS
                if item_id == key_moment and not bonus_applied:
                    points += MOST_IMPORTANT_BONUS
                    bonus_applied = True
                status = ItemStatus.CORRECT
            elif diff <= CLOSE_DISTANCE:
                points, status = 0, ItemStatus.CLOSE
            else:
                points, status = FAR_OFF_PENALTY, ItemStatus.FAR_OFF
            per_item.append(ItemScore(item_id, points, status, i, want))

        total = max(0, sum(item.points for item in per_item))
        return OrderingResult(tuple(per_item), total, bonus_applied)


def most_important_item(correct_order: Sequence[ItemId], importance_by_id: Mapping[ItemId, float | None]) -> ItemId | None:
    """The item with the highest importance; ties go to the earliest correct position."""
    best: ItemId | None = None
    best_importance = float("-inf")
    for item_id in correct_order:
        importance = importance_by_id.get(item_id)
        value = importance if importance is not None else 0.0
        if value > best_importance:
            best, best_importance = item_id, value
    return best
