"""Score submission and leaderboard endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from ..config import Settings, get_settings
from ..db import AsyncSession, get_db
from ..dependencies.auth import AuthenticatedUser, get_optional_user
from ..scores.models import LeaderboardResponse, ScoreCreated, ScoreSubmission
from ..scores.service import get_leaderboard as load_leaderboard
from ..scores.service import submit_score

router = APIRouter(prefix="/api", tags=["scores"])


@router.post("/scores", response_model=ScoreCreated, status_code=status.HTTP_201_CREATED)
async def create_score(
    payload: ScoreSubmission,
    session: AsyncSession = Depends(get_db),
    user: AuthenticatedUser | None = Depends(get_optional_user),
) -> ScoreCreated:
    saved = await submit_score(session, payload, user)
    message = "Score saved" if saved.created else "Score already recorded"
    return ScoreCreated(id=saved.id, message=message)


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def get_leaderboard(
    limit: int | None = Query(None, ge=1, le=500),
    session: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> LeaderboardResponse:
    """Top scores per mode."""
    return await load_leaderboard(session, limit or settings.leaderboard_limit)
