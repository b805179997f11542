"""Background warming of the generated-content cache."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from ..celery_app import celery_app
from ..config import get_settings
from ..content.prompts import GameRequest
from ..content.service import ContentService, build_content_service
from ..content.store import ContentStore
from ..db import close_db, get_async_session
from ..errors import ContentUnavailable

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, name="warm_team_content")
def warm_team_content(self, team: str, year: int | None = None, league: str | None = None) -> dict[str, Any]:
    """Generate and cache quiz content for every listed game of a team's season.

    Returns:
        Summary with the games that were ready and the ones that failed.
    """
    settings = get_settings()
    store = ContentStore(settings.content_dir)
    service = build_content_service(settings)
    return asyncio.run(_warm_async(self, store, service, team, year, league))


async def _warm_async(
    task,
    store: ContentStore,
    service: ContentService,
    team: str,
    year: int | None,
    league: str | None,
) -> dict[str, Any]:
    games = store.load_games(team, year)
    ready: list[str] = []
    failed: list[dict[str, str]] = []

    try:
        for position, game in enumerate(games, start=1):
            task.update_state(
                state="PROGRESS",
                meta={"current": position, "total": len(games), "game_id": game.game_id},
            )
            request = GameRequest(game_id=game.game_id, team=team.upper(), year=game.year or year or 0, league=league)
            try:
                async with get_async_session() as session:
                    await service.get_or_generate(session, request)
            except ContentUnavailable as exc:
                logger.warning("warm_game_failed", extra={"game_id": game.game_id, "error": exc.message})
                failed.append({"game_id": game.game_id, "error": exc.message})
                continue
            ready.append(game.game_id)
    finally:
        # The engine is bound to this task's event loop.
        await close_db()

    logger.info(
        "warm_team_content_completed",
        extra={"team": team, "year": year, "ready": len(ready), "failed": len(failed)},
    )
    return {"team": team, "year": year, "total": len(games), "ready": ready, "failed": failed}
