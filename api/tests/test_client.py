"""Tests for the async API client."""

from __future__ import annotations

import json
from datetime import date

import httpx
import pytest

from fanfrenzy.client import FanFrenzyClient
from fanfrenzy.db.scores import ChallengeReason
from fanfrenzy.errors import AuthRequired, ContentNotFound, ContentUnavailable, PersistenceError, ValidationError
from fanfrenzy.scores.models import ScoreSubmission

DAILY = {
    "gameId": "daily-1",
    "title": "Daily",
    "eventData": None,
    "moments": [{"index": 1, "type": "fillIn", "prompt": "Who?", "answer": "Ray Rice", "importance": 9}],
}


def _client(handler, token: str | None = None) -> FanFrenzyClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return FanFrenzyClient("https://api.example.com/", access_token=token, http=http)


class TestFanFrenzyClient:
    @pytest.mark.asyncio
    async def test_daily_challenge_with_date(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=DAILY)

        content = await _client(handler).get_daily_challenge(date(2026, 10, 19))

        assert content.game_id == "daily-1"
        assert seen[0].url.path == "/api/daily-challenge"
        assert seen[0].url.params["date"] == "2026-10-19"
        assert "Authorization" not in seen[0].headers

    @pytest.mark.asyncio
    async def test_submit_score_sends_bearer_token(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(201, json={"id": 3, "message": "Score saved"})

        client = _client(handler, token="tok")
        submission = ScoreSubmission(
            gameId="g", mode="rewind", score=10, metadata={"totalMoments": 2, "correctCount": 1}, attemptId="a-1"
        )

        created = await client.submit_score(submission)

        assert client.is_authenticated
        assert created.id == 3
        assert seen[0].headers["Authorization"] == "Bearer tok"
        assert json.loads(seen[0].content) == {
            "gameId": "g",
            "mode": "rewind",
            "score": 10,
            "metadata": {"totalMoments": 2, "correctCount": 1},
            "attemptId": "a-1",
        }

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status_code, body, error",
        [
            (400, {"detail": "score: must be zero or greater", "field": "score"}, ValidationError),
            (401, {"detail": "Sign in required"}, AuthRequired),
            (404, {"detail": "missing"}, ContentNotFound),
            (500, {"detail": "Could not save score"}, PersistenceError),
        ],
    )
    async def test_error_mapping(self, status_code: int, body: dict, error: type) -> None:
        client = _client(lambda request: httpx.Response(status_code, json=body))
        with pytest.raises(error):
            await client.get_leaderboard()

    @pytest.mark.asyncio
    async def test_validation_error_keeps_field(self) -> None:
        client = _client(lambda request: httpx.Response(400, json={"detail": "bad", "field": "metadata.correctCount"}))
        with pytest.raises(ValidationError) as exc_info:
            await client.get_leaderboard(limit=5)
        assert exc_info.value.field == "metadata.correctCount"

    @pytest.mark.asyncio
    async def test_content_server_error_is_content_unavailable(self) -> None:
        client = _client(lambda request: httpx.Response(500, text="oops"))
        with pytest.raises(ContentUnavailable):
            await client.get_game_content("NE", 2023, "NE_2023_WK1")

    @pytest.mark.asyncio
    async def test_non_json_success_body_is_server_error(self) -> None:
        client = _client(lambda request: httpx.Response(201, text="<html>ok</html>"), token="t")
        with pytest.raises(PersistenceError):
            await client.submit_challenge("g", ChallengeReason.other)

    @pytest.mark.asyncio
    async def test_malformed_success_body_is_server_error(self) -> None:
        client = _client(lambda request: httpx.Response(201, json={"saved": True}), token="t")
        with pytest.raises(PersistenceError):
            await client.submit_score(
                ScoreSubmission(gameId="g", mode="daily", score=10, metadata={"totalMoments": 1, "correctCount": 1})
            )

    @pytest.mark.asyncio
    async def test_network_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        with pytest.raises(PersistenceError):
            await _client(handler, token="t").submit_challenge("g", ChallengeReason.other)

    @pytest.mark.asyncio
    async def test_list_games_and_challenge(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            if request.url.path == "/api/games":
                return httpx.Response(200, json=[{"gameId": "g1", "date": "2023-09-10", "opponent": "PHI", "year": 2023}])
            return httpx.Response(201, json={"id": 1, "message": "Challenge submitted"})

        async with _client(handler, token="t") as client:
            games = await client.list_games("NE", 2023)
            await client.submit_challenge("g1", ChallengeReason.ambiguous_wording, moment_index=-1, comment="unclear")

        assert games[0].game_id == "g1"
        assert seen[0].url.params["year"] == "2023"
        assert json.loads(seen[1].content) == {
            "gameId": "g1",
            "reason": "Ambiguous Wording/Context",
            "momentIndex": -1,
            "comment": "unclear",
        }
