"""Score and challenge tables.

Both are insert-only from the service's point of view: a score or a
challenge is written once and never updated or deleted here.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy import DateTime, Index, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class GameMode(str, Enum):
    """Game modes that produce scores."""

    daily = "daily"
    rewind = "rewind"
    shuffle = "shuffle"


class ScoreRecord(Base):
    """One completed attempt."""

    __tablename__ = "scores"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    # Null for anonymous daily play
    user_id: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    user_email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    game_id: Mapped[str] = mapped_column(String(200), nullable=False)
    mode: Mapped[str] = mapped_column(String(20), nullable=False)
    score: Mapped[int] = mapped_column(Integer, nullable=False)
    metadata_json: Mapped[dict[str, Any]] = mapped_column("metadata", JSONB, nullable=False, default=dict)
    # Client-generated idempotency key; one record per attempt
    attempt_id: Mapped[str | None] = mapped_column(String(64), nullable=True, unique=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("idx_scores_mode_rank", "mode", "score", "created_at"),
    )


class ChallengeReason(str, Enum):
    """Reasons a player can give when flagging a quiz item."""

    incorrect_answer = "Incorrect Answer/Order"
    ambiguous_wording = "Ambiguous Wording/Context"
    incorrect_info = "Incorrect Player/Team Info"
    technical_bug = "Technical Bug"
    other = "Other"


class Challenge(Base):
    """A player's report that a quiz item is wrong."""

    __tablename__ = "challenges"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    game_id: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    # -1 flags the game as a whole, null when the client could not tell
    moment_index: Mapped[int | None] = mapped_column(Integer, nullable=True)
    reason: Mapped[str] = mapped_column(String(50), nullable=False)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
