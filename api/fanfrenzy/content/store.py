"""Pre-authored content read from JSON files.

Layout under ``content_dir``::

    daily/<YYYY-MM-DD>.json     one daily challenge per date
    daily-challenge.json        fallback when no dated file exists
    games/<TEAM>_<YEAR>.json    list of a team's games for one season
"""

from __future__ import annotations

import json
import logging
import re
from datetime import date
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from ..errors import ContentNotFound, ContentUnavailable, ValidationError
from ..gameplay.moments import GameContent

logger = logging.getLogger(__name__)

DAILY_FALLBACK_FILE = "daily-challenge.json"
TEAM_PATTERN = re.compile(r"^[A-Z]{2,4}$")
YEAR_PATTERN = re.compile(r"^\d{4}$")
_SEASON_FILE = re.compile(r"^(?P<team>[A-Z]{2,4})_(?P<year>\d{4})\.json$")


class GameInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    game_id: str = Field(alias="gameId")
    week: int | str | None = None
    date: str
    opponent: str
    result: str | None = None
    year: int | None = None


def normalize_team(team: str | None) -> str:
    """Upper-case and check a team code."""
    value = (team or "").strip().upper()
    if not TEAM_PATTERN.match(value):
        raise ValidationError("team", "must be 2-4 letters")
    return value


def normalize_year(year: str | int | None) -> int:
    value = str(year).strip() if year is not None else ""
    if not YEAR_PATTERN.match(value):
        raise ValidationError("year", "must be a 4-digit year")
    return int(value)


def _read_json(path: Path) -> Any:
    try:
        with path.open(encoding="utf-8") as handle:
            return json.load(handle)
    except json.JSONDecodeError as exc:
        logger.error("content_file_invalid_json", extra={"path": str(path), "error": str(exc)})
        raise ContentUnavailable(f"{path.name} is not valid JSON") from exc
    except OSError as exc:
        logger.error("content_file_unreadable", extra={"path": str(path), "error": str(exc)})
        raise ContentUnavailable(f"{path.name} could not be read") from exc


class ContentStore:
    def __init__(self, content_dir: Path) -> None:
        self.content_dir = Path(content_dir)

    def load_daily(self, day: date) -> GameContent:
        """Daily challenge for ``day``, falling back to the undated file."""
        dated = self.content_dir / "daily" / f"{day.isoformat()}.json"
        path = dated if dated.is_file() else self.content_dir / DAILY_FALLBACK_FILE
        if not path.is_file():
            raise ContentNotFound(f"No daily challenge for {day.isoformat()}")

        logger.debug("daily_content_loaded", extra={"path": str(path), "day": day.isoformat()})
        try:
            return GameContent.from_payload(_read_json(path))
        except ValidationError as exc:
            raise ContentUnavailable(f"{path.name} is malformed: {exc.message}") from exc

    def load_games(self, team: str, year: int | None = None) -> list[GameInfo]:
        """Games for one season, or every authored season in year order."""
        team = normalize_team(team)
        games_dir = self.content_dir / "games"
        if year is not None:
            paths = [games_dir / f"{team}_{year}.json"]
        else:
            paths = sorted(
                (p for p in games_dir.glob(f"{team}_*.json") if _SEASON_FILE.match(p.name)),
                key=lambda p: p.name,
            )
        paths = [p for p in paths if p.is_file()]
        if not paths:
            suffix = f" {year}" if year is not None else ""
            raise ContentNotFound(f"Game list not found for {team}{suffix}")

        games: list[GameInfo] = []
        for path in paths:
            season = int(_SEASON_FILE.match(path.name).group("year"))
            raw = _read_json(path)
            if not isinstance(raw, list):
                raise ContentUnavailable(f"{path.name} must contain a list of games")
            try:
                games.extend(GameInfo.model_validate({**item, "year": season}) for item in raw)
            except (PydanticValidationError, TypeError) as exc:
                raise ContentUnavailable(f"{path.name} has a malformed game entry") from exc
        return games
