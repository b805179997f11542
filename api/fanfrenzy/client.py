"""Async HTTP client for the FanFrenzy API.

Maps error responses back to the domain errors in ``fanfrenzy.errors`` so the
gameplay layer (``ScoreSaver`` in particular) handles one error family
whether it runs in-process or against a deployed API.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .content.store import GameInfo
from .db.scores import ChallengeReason
from .errors import (
    AuthRequired,
    ContentNotFound,
    ContentUnavailable,
    FanFrenzyError,
    PersistenceError,
    ValidationError,
)
from .gameplay.moments import GameContent
from .scores.models import LeaderboardResponse, ScoreCreated, ScoreSubmission

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

_Model = TypeVar("_Model", bound=BaseModel)


def _detail(response: httpx.Response) -> tuple[str, str | None]:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase, None
    if isinstance(body, dict):
        return str(body.get("detail") or body.get("message") or response.reason_phrase), body.get("field")
    return response.reason_phrase, None


def _parse(model: type[_Model], payload: Any, server_error: type[FanFrenzyError]) -> _Model:
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        raise server_error(f"Unexpected {model.__name__} response") from exc


def raise_for_status(response: httpx.Response, server_error: type[FanFrenzyError] = PersistenceError) -> None:
    """Raise the domain error matching an error response."""
    if response.is_success:
        return
    message, field = _detail(response)
    if response.status_code == 400:
        raise ValidationError(field or "request", message)
    if response.status_code == 401:
        raise AuthRequired(message)
    if response.status_code == 404:
        raise ContentNotFound(message)
    raise server_error(message)


class FanFrenzyClient:
    """Thin wrapper over ``httpx.AsyncClient``.

    Pass ``http`` to share a client (or to inject a mock transport); otherwise
    one is created and closed with ``aclose()`` or the async context manager.
    """

    def __init__(
        self,
        base_url: str,
        access_token: str | None = None,
        http: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.access_token = access_token
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> "FanFrenzyClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    @property
    def is_authenticated(self) -> bool:
        return bool(self.access_token)

    def _headers(self) -> dict[str, str]:
        if self.access_token:
            return {"Authorization": f"Bearer {self.access_token}"}
        return {}

    async def _request(
        self,
        method: str,
        path: str,
        server_error: type[FanFrenzyError] = PersistenceError,
        **kwargs: Any,
    ) -> Any:
        try:
            response = await self._http.request(method, f"{self.base_url}{path}", headers=self._headers(), **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("api_request_failed", extra={"method": method, "path": path, "error": str(exc)})
            raise server_error(f"Request to {path} failed: {exc}") from exc
        raise_for_status(response, server_error)
        try:
            return response.json()
        except ValueError as exc:
            logger.warning("api_response_not_json", extra={"method": method, "path": path, "status_code": response.status_code})
            raise server_error(f"Response from {path} is not JSON") from exc

    async def get_daily_challenge(self, day: date | None = None) -> GameContent:
        params = {"date": day.isoformat()} if day else None
        payload = await self._request("GET", "/api/daily-challenge", ContentUnavailable, params=params)
        return GameContent.from_payload(payload)

    async def get_game_content(self, team: str, year: int, game_id: str, mode: str = "rewind") -> GameContent:
        params = {"team": team, "year": str(year), "gameId": game_id, "mode": mode}
        payload = await self._request("GET", "/api/games/content", ContentUnavailable, params=params)
        return GameContent.from_payload(payload)

    async def list_games(self, team: str, year: int | None = None) -> list[GameInfo]:
        params = {"team": team}
        if year is not None:
            params["year"] = str(year)
        payload = await self._request("GET", "/api/games", ContentUnavailable, params=params)
        return [_parse(GameInfo, item, ContentUnavailable) for item in payload]

    async def submit_score(self, submission: ScoreSubmission) -> ScoreCreated:
        payload = await self._request("POST", "/api/scores", json=submission.to_payload())
        return _parse(ScoreCreated, payload, PersistenceError)

    async def get_leaderboard(self, limit: int | None = None) -> LeaderboardResponse:
        params = {"limit": limit} if limit else None
        payload = await self._request("GET", "/api/leaderboard", params=params)
        return _parse(LeaderboardResponse, payload, PersistenceError)

    async def submit_challenge(
        self,
        game_id: str,
        reason: ChallengeReason,
        moment_index: int | None = None,
        comment: str | None = None,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {"gameId": game_id, "reason": ChallengeReason(reason).value}
        if moment_index is not None:
            body["momentIndex"] = moment_index
        if comment:
            body["comment"] = comment
        return await self._request("POST", "/api/challenges", json=body)
