"""Score submission and leaderboard queries."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Mapping, Protocol, Sequence

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.scores import GameMode, ScoreRecord
from ..dependencies.auth import AuthenticatedUser
from ..errors import AuthRequired, PersistenceError, ValidationError
from .models import (
    METADATA_MODELS,
    DailyMetadata,
    LeaderboardEntry,
    LeaderboardResponse,
    RewindMetadata,
    ScoreSubmission,
    ShuffleMetadata,
)

logger = logging.getLogger(__name__)

# Modes a signed-out player may still record a score for.
ANONYMOUS_MODES = frozenset({GameMode.daily})


@dataclass(frozen=True)
class SavedScore:
    id: int
    created: bool


def _metadata_error(exc: PydanticValidationError) -> ValidationError:
    first = exc.errors()[0]
    path = ".".join(["metadata", *(str(part) for part in first.get("loc", ()))])
    return ValidationError(path, first.get("msg", "invalid value"))


def validate_submission(submission: ScoreSubmission) -> dict[str, Any]:
    """Check a submission and return its normalised metadata.

    Raises:
        ValidationError: Naming the first offending field.
    """
    if not submission.game_id.strip():
        raise ValidationError("gameId", "is required")
    if submission.score < 0:
        raise ValidationError("score", "must be zero or greater")

    model = METADATA_MODELS[submission.mode]
    try:
        metadata = model.model_validate(submission.metadata)
    except PydanticValidationError as exc:
        raise _metadata_error(exc) from exc

    if isinstance(metadata, DailyMetadata):
        if metadata.correct_count > metadata.total_moments:
            raise ValidationError("metadata.correctCount", "cannot exceed totalMoments")
    elif isinstance(metadata, RewindMetadata):
        if metadata.correct_count + metadata.skipped_count > metadata.total_moments:
            raise ValidationError("metadata.correctCount", "correctCount + skippedCount cannot exceed totalMoments")
    elif isinstance(metadata, ShuffleMetadata):
        if metadata.correct_positions > metadata.total_moments:
            raise ValidationError("metadata.correctPositions", "cannot exceed totalMoments")

    return metadata.model_dump(by_alias=True, exclude_none=True)


async def submit_score(
    session: AsyncSession,
    submission: ScoreSubmission,
    user: AuthenticatedUser | None,
) -> SavedScore:
    """Record one score.

    A repeated ``attemptId`` returns the record already stored for it instead
    of inserting a second row.
    """
    if user is None and submission.mode not in ANONYMOUS_MODES:
        raise AuthRequired(f"Sign in to save {submission.mode.value} scores")
    metadata = validate_submission(submission)
    if user is not None:
        # A signed-in player's display name comes from their account.
        metadata.pop("playerName", None)

    stmt = (
        insert(ScoreRecord)
        .values(
            {
                ScoreRecord.user_id: user.id if user else None,
                ScoreRecord.user_email: user.email if user else None,
                ScoreRecord.game_id: submission.game_id.strip(),
                ScoreRecord.mode: submission.mode.value,
                ScoreRecord.score: submission.score,
                ScoreRecord.metadata_json: metadata,
                ScoreRecord.attempt_id: submission.attempt_id,
            }
        )
        .on_conflict_do_nothing(index_elements=["attempt_id"])
        .returning(ScoreRecord.id)
    )

    try:
        result = await session.execute(stmt)
        new_id = result.scalar_one_or_none()
        if new_id is not None:
            logger.info(
                "score_saved",
                extra={"score_id": new_id, "mode": submission.mode.value, "game_id": submission.game_id, "score": submission.score},
            )
            return SavedScore(id=new_id, created=True)

        existing = await session.execute(
            select(ScoreRecord).where(ScoreRecord.attempt_id == submission.attempt_id)
        )
        record = existing.scalar_one()
    except SQLAlchemyError as exc:
        logger.error("score_save_failed", extra={"mode": submission.mode.value, "error": str(exc)})
        raise PersistenceError("Could not save score") from exc

    if record.user_id != (user.id if user else None):
        raise ValidationError("attemptId", "already used")
    logger.info("score_duplicate_ignored", extra={"score_id": record.id, "attempt_id": submission.attempt_id})
    return SavedScore(id=record.id, created=False)


def display_name(email: str | None, metadata: Mapping[str, Any] | None, user_id: str | None) -> str:
    """Leaderboard name that never exposes a full email address."""
    if email and "@" in email:
        local, _, domain = email.partition("@")
        if local and domain:
            return f"{local[:5]}...@{domain[0]}..."
    player_name = (metadata or {}).get("playerName")
    if isinstance(player_name, str) and player_name.strip():
        return player_name.strip()
    if user_id:
        return f"User ...{user_id[-6:]}"
    return "Anonymous"


class Rankable(Protocol):
    id: int
    score: int
    created_at: datetime


def rank_scores(records: Iterable[Rankable]) -> list[tuple[int, Rankable]]:
    """Sort by score, earliest first on ties, then id; pair each with its 1-based position."""
    ordered = sorted(records, key=lambda r: (-r.score, r.created_at, r.id))
    return [(position, record) for position, record in enumerate(ordered, start=1)]


def _entry(position: int, record: ScoreRecord) -> LeaderboardEntry:
    return LeaderboardEntry(
        id=record.id,
        position=position,
        display_name=display_name(record.user_email, record.metadata_json, record.user_id),
        game_id=record.game_id,
        mode=GameMode(record.mode),
        score=record.score,
        created_at=record.created_at,
    )


def build_leaderboard(records: Sequence[ScoreRecord], limit: int) -> LeaderboardResponse:
    by_mode: dict[GameMode, list[ScoreRecord]] = {mode: [] for mode in GameMode}
    for record in records:
        try:
            mode = GameMode(record.mode)
        except ValueError:
            logger.warning("leaderboard_unknown_mode", extra={"score_id": record.id, "mode": record.mode})
            continue
        by_mode[mode].append(record)

    return LeaderboardResponse(
        **{
            mode.value: [_entry(position, record) for position, record in rank_scores(rows)[:limit]]
            for mode, rows in by_mode.items()
        }
    )


async def get_leaderboard(session: AsyncSession, limit: int = 100) -> LeaderboardResponse:
    """Ranked scores for every mode; a mode with no scores maps to an empty list."""
    try:
        result = await session.execute(
            select(ScoreRecord).order_by(ScoreRecord.score.desc(), ScoreRecord.created_at.asc(), ScoreRecord.id.asc())
        )
        records = result.scalars().all()
    except SQLAlchemyError as exc:
        logger.error("leaderboard_query_failed", extra={"error": str(exc)})
        raise PersistenceError("Could not load leaderboard") from exc
    return build_leaderboard(records, limit)
