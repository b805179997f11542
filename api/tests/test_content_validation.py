"""Tests for generated content checks and the shuffle projection."""

from __future__ import annotations

import pytest

from fanfrenzy.errors import ContentUnavailable, InvalidGeneratedContent
from fanfrenzy.content.prompts import GameRequest
from fanfrenzy.content.shuffle import to_shuffle_content
from fanfrenzy.content.validation import has_current_schema, validate_generated
from fanfrenzy.gameplay.moments import GameContent, ShuffleItemMoment

REQUEST = GameRequest(game_id="NE-2023-W1", team="NE", year=2023, league="NFL")


def _mc(index: int, options: list[str] | None = None, correct: int = 0, context: str = "Third down") -> dict:
    return {
        "index": index,
        "type": "multipleChoice",
        "context": context,
        "question": "What happened?",
        "options": options or ["a", "b", "c", "d"],
        "correctOptionIndex": correct,
        "importance": 5,
    }


def _payload(*quiz: dict) -> dict:
    return {
        "eventData": {"summary": "A close one"},
        "moments": [
            {"index": 0, "type": "start", "context": "Kickoff"},
            *quiz,
            {"index": 99, "type": "end", "context": "Final"},
        ],
    }


class TestValidateGenerated:
    def test_accepts_well_formed_quiz(self) -> None:
        content = validate_generated(_payload(_mc(1), _mc(2, correct=3)), REQUEST)

        assert content.game_id == "NE-2023-W1"
        assert content.title == REQUEST.title
        assert content.event_data == {"summary": "A close one"}
        assert len(content.quiz_moments) == 2

    def test_request_identity_overrides_model_output(self) -> None:
        payload = dict(_payload(_mc(1), _mc(2)), gameId="something-else")
        assert validate_generated(payload, REQUEST).game_id == "NE-2023-W1"

    @pytest.mark.parametrize(
        "payload",
        [
            ["not", "an", "object"],
            {"eventData": {}},
            {"moments": "nope"},
        ],
    )
    def test_rejects_wrong_shape(self, payload: object) -> None:
        with pytest.raises(InvalidGeneratedContent):
            validate_generated(payload, REQUEST)

    def test_rejects_three_option_question(self) -> None:
        with pytest.raises(InvalidGeneratedContent):
            validate_generated(_payload(_mc(1), _mc(2, options=["a", "b", "c"])), REQUEST)

    def test_rejects_too_few_questions(self) -> None:
        with pytest.raises(InvalidGeneratedContent):
            validate_generated(_payload(_mc(1)), REQUEST)

    def test_rejects_malformed_moment(self) -> None:
        with pytest.raises(InvalidGeneratedContent):
            validate_generated(_payload(_mc(1), _mc(2, correct=4)), REQUEST)

    def test_invalid_content_is_content_unavailable(self) -> None:
        assert issubclass(InvalidGeneratedContent, ContentUnavailable)


class TestHasCurrentSchema:
    def test_multiple_choice_content_is_current(self) -> None:
        content = GameContent.from_payload({"gameId": "g", "title": "t", **_payload(_mc(1), _mc(2))})
        assert has_current_schema(content)

    def test_older_shuffle_only_content_is_stale(self) -> None:
        content = GameContent.from_payload(
            {"gameId": "g", "title": "t", "moments": [{"index": 1, "type": "shuffleItem", "context": "c"}]}
        )
        assert not has_current_schema(content)


class TestToShuffleContent:
    def test_projects_redacted_items(self) -> None:
        content = GameContent.from_payload(
            {
                "gameId": "g",
                "title": "t",
                "eventData": {"finalScore": "24-17"},
                "moments": [
                    {"index": 0, "type": "start", "context": "Kickoff"},
                    _mc(2, context="Score: 14-7, Edelman open at the 25"),
                    {"index": 3, "type": "fillIn", "prompt": "Who?", "answer": "Brady"},
                    {"index": 1, "type": "shuffleItem", "context": "Opening drive stalls", "importance": 2},
                    _mc(4, context="   "),
                    {"index": 9, "type": "end", "context": "Final"},
                ],
            }
        )

        shuffled = to_shuffle_content(content)

        assert shuffled.event_data is None
        assert [m.index for m in shuffled.moments] == [1, 2]
        assert all(isinstance(m, ShuffleItemMoment) for m in shuffled.moments)
        assert shuffled.moments[1].context == "(Score Hidden), Edelman open (Field Position Hidden)"
        assert shuffled.moments[1].importance == 5
        assert "question" not in shuffled.to_payload()["moments"][1]

    def test_too_few_items(self) -> None:
        content = GameContent.from_payload(
            {"gameId": "g", "title": "t", "moments": [_mc(1), {"index": 0, "type": "start", "context": "k"}]}
        )
        with pytest.raises(ContentUnavailable):
            to_shuffle_content(content)
