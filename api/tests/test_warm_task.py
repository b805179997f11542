"""Tests for the content warm-up task body."""

from __future__ import annotations

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from fanfrenzy.content.store import GameInfo
from fanfrenzy.errors import ContentUnavailable
from fanfrenzy.tasks.content_generation import _warm_async


@asynccontextmanager
async def _fake_session():
    yield object()


class TestWarmTeamContent:
    @pytest.mark.asyncio
    async def test_generates_each_game_and_reports_failures(self) -> None:
        store = MagicMock()
        store.load_games.return_value = [
            GameInfo(gameId="NE_2023_WK1", date="2023-09-10", opponent="PHI", year=2023),
            GameInfo(gameId="NE_2023_WK2", date="2023-09-17", opponent="MIA", year=2023),
        ]
        service = MagicMock()
        service.get_or_generate = AsyncMock(side_effect=[object(), ContentUnavailable("Could not generate content")])
        task = MagicMock()

        with patch("fanfrenzy.tasks.content_generation.get_async_session", _fake_session), patch(
            "fanfrenzy.tasks.content_generation.close_db", AsyncMock()
        ) as close_db:
            summary = await _warm_async(task, store, service, "ne", 2023, "NFL")

        assert summary["ready"] == ["NE_2023_WK1"]
        assert summary["failed"] == [{"game_id": "NE_2023_WK2", "error": "Could not generate content"}]
        assert summary["total"] == 2
        request = service.get_or_generate.await_args_list[0].args[1]
        assert (request.team, request.year, request.league) == ("NE", 2023, "NFL")
        assert task.update_state.call_count == 2
        task.update_state.assert_called_with(
            state="PROGRESS", meta={"current": 2, "total": 2, "game_id": "NE_2023_WK2"}
        )
        close_db.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_closes_engine_on_unexpected_error(self) -> None:
        store = MagicMock()
        store.load_games.return_value = [GameInfo(gameId="g", date="2023-09-10", opponent="PHI", year=2023)]
        service = MagicMock()
        service.get_or_generate = AsyncMock(side_effect=RuntimeError("boom"))

        with patch("fanfrenzy.tasks.content_generation.get_async_session", _fake_session), patch(
            "fanfrenzy.tasks.content_generation.close_db", AsyncMock()
        ) as close_db:
            with pytest.raises(RuntimeError):
                await _warm_async(MagicMock(), store, service, "NE", 2023, None)

        close_db.assert_awaited_once()
