"""Endpoint for flagging a quiz item as wrong."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.exc import SQLAlchemyError

from ..db import AsyncSession, get_db
from ..db.scores import Challenge, ChallengeReason
from ..dependencies.auth import AuthenticatedUser, require_user
from ..errors import PersistenceError, ValidationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["challenges"])


class ChallengeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    game_id: str = Field(..., alias="gameId", min_length=1, max_length=200)
    # -1 flags the game as a whole
    moment_index: int | None = Field(None, alias="momentIndex", ge=-1)
    reason: ChallengeReason
    comment: str | None = Field(None, max_length=1000)


class ChallengeCreated(BaseModel):
    id: int
    message: str


@router.post("/challenges", response_model=ChallengeCreated, status_code=status.HTTP_201_CREATED)
async def submit_challenge(
    payload: ChallengeRequest,
    session: AsyncSession = Depends(get_db),
    user: AuthenticatedUser = Depends(require_user),
) -> ChallengeCreated:
    """Record a player's report against a game or one of its moments."""
    if not payload.game_id.strip():
        raise ValidationError("gameId", "is required")

    record = Challenge(
        user_id=user.id,
        game_id=payload.game_id.strip(),
        moment_index=payload.moment_index,
        reason=payload.reason.value,
        comment=(payload.comment or "").strip() or None,
    )
    try:
        session.add(record)
        await session.flush()
    except SQLAlchemyError as exc:
        logger.error("challenge_save_failed", extra={"game_id": payload.game_id, "error": str(exc)})
        raise PersistenceError("Could not save challenge") from exc

    logger.info(
        "challenge_submitted",
        extra={"challenge_id": record.id, "game_id": record.game_id, "moment_index": record.moment_index, "reason": record.reason},
    )
    return ChallengeCreated(id=record.id, message="Challenge submitted")
