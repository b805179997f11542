"""Tests for the ordering scorers."""

from __future__ import annotations

from itertools import permutations

import pytest

from fanfrenzy.errors import ValidationError
from fanfrenzy.gameplay.ordering import (
    AdjacencyPolicy,
    DistancePolicy,
    ItemStatus,
    ensure_same_items,
    most_important_item,
)

FOUR = ["A", "B", "C", "D"]
NO_IMPORTANCE: dict[str, float | None] = {}


class TestAdjacencyPolicy:
    def test_perfect_order_scores_four_per_item(self) -> None:
        result = AdjacencyPolicy().score(FOUR, FOUR, NO_IMPORTANCE)

        assert [item.points for item in result.per_item] == [4, 4, 4, 4]
        assert {item.status for item in result.per_item} == {ItemStatus.LOCKED}
        assert result.total == 16

    def test_correct_position_with_wrong_neighbours_scores_two(self) -> None:
        result = AdjacencyPolicy().score(FOUR, ["C", "B", "A", "D"], NO_IMPORTANCE)
        points = result.points_by_id()

        assert points["B"] == 2
        assert points["A"] == 0
        assert points["C"] == 0
        # Correctly last: bottom edge plus exact slot
        assert points["D"] == 3
        assert result.total == 5

    def test_status_bands(self) -> None:
        result = AdjacencyPolicy().score(FOUR, ["C", "B", "A", "D"], NO_IMPORTANCE)
        status = {item.item_id: item.status for item in result.per_item}

        assert status["A"] is ItemStatus.FAR
        assert status["B"] is ItemStatus.CLOSE
        assert status["D"] is ItemStatus.CLOSE

    def test_edges_count_only_for_items_that_belong_there(self) -> None:
        result = AdjacencyPolicy().score(FOUR, ["B", "A", "C", "D"], NO_IMPORTANCE)
        points = result.points_by_id()

        # B sits on top but is not the first item
        assert points["B"] == 0
        assert points["C"] == 4 - 1  # predecessor wrong, successor right, exact slot

    def test_locked_items_keep_four_without_rescoring(self) -> None:
        result = AdjacencyPolicy().score(FOUR, ["B", "A", "C", "D"], NO_IMPORTANCE, locked=frozenset({"C"}))
        by_id = {item.item_id: item for item in result.per_item}

        assert by_id["C"].points == 4
        assert by_id["C"].status is ItemStatus.LOCKED
        assert by_id["D"].points == 4
        assert result.total == 8

    def test_item_maximum_is_four_for_every_arrangement(self) -> None:
        policy = AdjacencyPolicy()
        for submitted in permutations(FOUR):
            result = policy.score(FOUR, list(submitted), NO_IMPORTANCE)
            assert all(0 <= item.points <= 4 for item in result.per_item)
            assert result.total == sum(item.points for item in result.per_item)

    def test_positions_reported(self) -> None:
        result = AdjacencyPolicy().score(FOUR, ["D", "A", "B", "C"], NO_IMPORTANCE)
        first = result.per_item[0]

        assert (first.item_id, first.position, first.correct_position) == ("D", 0, 3)


class TestDistancePolicy:
    FIVE = ["A", "B", "C", "D", "E"]

    def test_diff_two_is_close_and_zero(self) -> None:
        result = DistancePolicy().score(self.FIVE, ["C", "A", "B", "D", "E"], NO_IMPORTANCE)
        by_id = {item.item_id: item for item in result.per_item}

        assert by_id["C"].status is ItemStatus.CLOSE
        assert by_id["C"].points == 0
        assert by_id["A"].status is ItemStatus.CLOSE

    def test_diff_three_is_far_off_minus_two(self) -> None:
        result = DistancePolicy().score(self.FIVE, ["D", "A", "B", "C", "E"], NO_IMPORTANCE)
        by_id = {item.item_id: item for item in result.per_item}

        assert by_id["D"].status is ItemStatus.FAR_OFF
        assert by_id["D"].points == -2

    def test_correct_is_ten(self) -> None:
        result = DistancePolicy().score(["A", "B", "C"], ["A", "C", "B"], {"A": 1, "B": 5, "C": 2})

        assert result.points_by_id()["A"] == 10
        assert result.total == 10
        assert not result.most_important_bonus_applied

    def test_total_is_clamped_at_zero(self) -> None:
        six = ["A", "B", "C", "D", "E", "F"]
        result = DistancePolicy().score(six, ["D", "E", "F", "A", "B", "C"], NO_IMPORTANCE)

        assert sum(item.points for item in result.per_item) == -12
        assert result.total == 0

    def test_bonus_for_single_most_important_moment(self) -> None:
        importance = {"A": 1.0, "B": 9.0, "C": 3.0}
        result = DistancePolicy().score(["A", "B", "C"], ["A", "B", "C"], importance)

        assert result.points_by_id() == {"A": 10, "B": 15, "C": 10}
        assert result.total == 35
        assert result.most_important_bonus_applied

    def test_bonus_tie_goes_to_lowest_correct_position(self) -> None:
        importance = {"A": 1.0, "B": 9.0, "C": 9.0}
        result = DistancePolicy().score(["A", "B", "C"], ["A", "B", "C"], importance)

        assert result.points_by_id() == {"A": 10, "B": 15, "C": 10}

    def test_no_bonus_when_key_moment_misplaced(self) -> None:
        importance = {"A": 1.0, "B": 9.0, "C": 3.0}
        result = DistancePolicy().score(["A", "B", "C"], ["A", "C", "B"], importance)

        assert not result.most_important_bonus_applied
        assert result.total == 10

    def test_shuffled_three_scores_zero(self) -> None:
        result = DistancePolicy().score(["A", "B", "C"], ["C", "A", "B"], {"A": 2, "B": 8, "C": 5})

        assert result.total == 0
        assert not result.most_important_bonus_applied
        assert {item.status for item in result.per_item} == {ItemStatus.CLOSE}


class TestMostImportantItem:
    def test_absent_importance_counts_as_zero(self) -> None:
        assert most_important_item(["A", "B"], {"A": None, "B": 0.5}) == "B"

    def test_all_absent_picks_first(self) -> None:
        assert most_important_item(["A", "B"], {}) == "A"

    def test_empty(self) -> None:
        assert most_important_item([], {}) is None


class TestEnsureSameItems:
    def test_accepts_permutation(self) -> None:
        ensure_same_items(FOUR, ["D", "C", "B", "A"])

    @pytest.mark.parametrize(
        "submitted",
        [["A", "B", "C"], ["A", "B", "C", "X"], ["A", "A", "B", "C"], ["A", "B", "C", "D", "E"]],
    )
    def test_rejects_mismatch(self, submitted: list[str]) -> None:
        with pytest.raises(ValidationError) as exc_info:
            ensure_same_items(FOUR, submitted)
        assert exc_info.value.field == "order"
