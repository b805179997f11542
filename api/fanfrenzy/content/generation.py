"""Two-pass quiz generation: a narrative, then structured moments."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from ..errors import ContentUnavailable
from ..services.openai_client import GenerationError, OpenAIClient
from .prompts import GameRequest, build_narrative_prompt, build_quiz_prompt

logger = logging.getLogger(__name__)

FALLBACK_NARRATIVE = "Play-by-play narrative unavailable. Use general knowledge of the game."


class ContentGenerator(Protocol):
    source_name: str

    async def generate_narrative(self, request: GameRequest) -> str: ...

    async def generate_quiz(self, request: GameRequest, narrative: str) -> dict[str, Any]: ...


class OpenAIContentGenerator:
    """Generates quiz JSON with ``OpenAIClient``."""

    def __init__(self, client: OpenAIClient, narrative_temperature: float = 0.7, quiz_temperature: float = 0.2) -> None:
        self.client = client
        self.narrative_temperature = narrative_temperature
        self.quiz_temperature = quiz_temperature

    @property
    def source_name(self) -> str:
        return self.client.source_name

    async def generate_narrative(self, request: GameRequest) -> str:
        return await self.client.generate_text(
            build_narrative_prompt(request), temperature=self.narrative_temperature
        )

    async def generate_quiz(self, request: GameRequest, narrative: str) -> dict[str, Any]:
        return await self.client.generate_json(
            build_quiz_prompt(request, narrative), temperature=self.quiz_temperature
        )


async def narrative_or_fallback(generator: ContentGenerator, request: GameRequest) -> str:
    """The narrative pass is allowed to fail; the quiz pass still runs on a placeholder."""
    try:
        narrative = await generator.generate_narrative(request)
    except GenerationError as exc:
        logger.warning("narrative_generation_failed", extra={"game_id": request.game_id, "error": str(exc)})
        return FALLBACK_NARRATIVE
    return narrative or FALLBACK_NARRATIVE


async def generate_quiz_payload(generator: ContentGenerator, request: GameRequest, narrative: str) -> dict[str, Any]:
    try:
        return await generator.generate_quiz(request, narrative)
    except GenerationError as exc:
        logger.error("quiz_generation_failed", extra={"game_id": request.game_id, "error": str(exc)})
        raise ContentUnavailable(f"Could not generate content for {request.game_id}") from exc
