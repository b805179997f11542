"""Request and response models for scores and the leaderboard."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictBool

from ..db.scores import GameMode


class ScoreSubmission(BaseModel):
    """Body of ``POST /api/scores``."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    game_id: str = Field(alias="gameId")
    mode: GameMode
    score: int
    metadata: dict[str, Any] = Field(default_factory=dict)
    attempt_id: str | None = Field(default=None, alias="attemptId", max_length=64)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class DailyMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    total_moments: int = Field(alias="totalMoments", ge=1)
    correct_count: int = Field(alias="correctCount", ge=0)
    player_name: str | None = Field(default=None, alias="playerName", max_length=50)


class RewindMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    total_moments: int = Field(alias="totalMoments", ge=1)
    correct_count: int = Field(alias="correctCount", ge=0)
    skipped_count: int = Field(default=0, alias="skippedCount", ge=0)


class ShuffleMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    total_moments: int = Field(alias="totalMoments", ge=1)
    correct_positions: int = Field(alias="correctPositions", ge=0)
    bonus_earned: StrictBool = Field(alias="bonusEarned")


METADATA_MODELS: dict[GameMode, type[BaseModel]] = {
    GameMode.daily: DailyMetadata,
    GameMode.rewind: RewindMetadata,
    GameMode.shuffle: ShuffleMetadata,
}


class ScoreCreated(BaseModel):
    id: int
    message: str


class LeaderboardEntry(BaseModel):
    """A score as shown on the leaderboard; never carries a raw email."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    position: int
    display_name: str = Field(alias="displayName")
    game_id: str = Field(alias="gameId")
    mode: GameMode
    score: int
    created_at: datetime = Field(alias="createdAt")


class LeaderboardResponse(BaseModel):
    daily: list[LeaderboardEntry] = Field(default_factory=list)
    rewind: list[LeaderboardEntry] = Field(default_factory=list)
    shuffle: list[LeaderboardEntry] = Field(default_factory=list)
