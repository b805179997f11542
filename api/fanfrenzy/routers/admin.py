"""Admin endpoints, guarded by the X-API-Key header."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from ..celery_client import get_celery_app
from ..config import Settings, get_settings
from ..content.store import normalize_team
from ..dependencies.auth import verify_api_key

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(verify_api_key)])


class WarmContentRequest(BaseModel):
    team: str
    year: int | None = Field(None, ge=1900, le=2100)
    league: str | None = Field(None, max_length=20)


class WarmContentResponse(BaseModel):
    status: str
    task_id: str


@router.post("/content/warm", response_model=WarmContentResponse, status_code=status.HTTP_202_ACCEPTED)
async def warm_content(
    payload: WarmContentRequest,
    settings: Settings = Depends(get_settings),
) -> WarmContentResponse:
    """Queue generation of every listed game for a team's season."""
    team = normalize_team(payload.team)
    celery = get_celery_app()
    result = celery.send_task(
        "warm_team_content",
        args=[team, payload.year, payload.league],
        queue=settings.celery_default_queue,
        routing_key=settings.celery_default_queue,
    )
    logger.info("content_warm_dispatched", extra={"team": team, "year": payload.year, "task_id": result.id})
    return WarmContentResponse(status="dispatched", task_id=result.id)
