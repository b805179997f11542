"""Content endpoints: daily challenge, generated game content and game lists."""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Literal

from fastapi import APIRouter, Depends, Query

from ..config import Settings, get_settings
from ..content.prompts import GameRequest
from ..content.service import ContentService, build_content_service
from ..content.shuffle import to_shuffle_content
from ..content.store import ContentStore, GameInfo, normalize_team, normalize_year
from ..db import AsyncSession, get_db
from ..errors import ValidationError
from ..utils.datetime_utils import parse_iso_date, today_eastern

router = APIRouter(prefix="/api", tags=["content"])


def get_content_store(settings: Settings = Depends(get_settings)) -> ContentStore:
    return ContentStore(settings.content_dir)


@lru_cache(maxsize=1)
def get_content_service() -> ContentService:
    # One instance per process so concurrent misses share its generation locks.
    return build_content_service(get_settings())


@router.get("/daily-challenge")
async def get_daily_challenge(
    date: str | None = Query(None, description="YYYY-MM-DD; only honoured when date override is enabled"),
    settings: Settings = Depends(get_settings),
    store: ContentStore = Depends(get_content_store),
) -> dict[str, Any]:
    """Today's (US/Eastern) daily challenge, or the one for ``date``."""
    if date is None:
        day = today_eastern()
    else:
        if not settings.date_override_enabled:
            raise ValidationError("date", "date override is not enabled")
        try:
            day = parse_iso_date(date)
        except ValueError as exc:
            raise ValidationError("date", "must be YYYY-MM-DD") from exc
    return store.load_daily(day).to_payload()


@router.get("/games/content")
async def get_game_content(
    team: str = Query(..., description="Team code, e.g. NE"),
    year: str = Query(..., description="Season year"),
    game_id: str = Query(..., alias="gameId", min_length=1),
    mode: Literal["rewind", "shuffle"] = Query("rewind"),
    league: str | None = Query(None, max_length=20),
    session: AsyncSession = Depends(get_db),
    service: ContentService = Depends(get_content_service),
) -> dict[str, Any]:
    """Quiz content for one game, generated on first request and cached."""
    request = GameRequest(
        game_id=game_id.strip(),
        team=normalize_team(team),
        year=normalize_year(year),
        league=league.upper() if league else None,
    )
    if not request.game_id:
        raise ValidationError("gameId", "is required")

    content = await service.get_or_generate(session, request)
    if mode == "shuffle":
        content = to_shuffle_content(content)
    return content.to_payload()


@router.get("/games", response_model=list[GameInfo])
async def list_games(
    team: str = Query(...),
    year: str | None = Query(None),
    store: ContentStore = Depends(get_content_store),
) -> list[GameInfo]:
    """Authored games for a team, one season or all of them."""
    season = normalize_year(year) if year is not None else None
    return store.load_games(normalize_team(team), season)
