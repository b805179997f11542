"""Cache-or-generate orchestration for rewind and shuffle content."""

from __future__ import annotations

import asyncio
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import Settings
from ..errors import ContentUnavailable
from ..gameplay.moments import GameContent
from ..services.openai_client import get_openai_client
from .cache import get_cached_content, upsert_cached_content
from .generation import ContentGenerator, OpenAIContentGenerator, generate_quiz_payload, narrative_or_fallback
from .prompts import GameRequest
from .validation import has_current_schema, validate_generated

logger = logging.getLogger(__name__)


class ContentService:
    """Returns cached quiz content, generating and caching it on a miss.

    Concurrent misses for one game inside this process share a single
    in-flight generation task and all receive its result, whether or not the
    cache write has become visible to their sessions. The task commits the
    cache row before it finishes. Separate processes may still generate the
    same game twice; the cache upsert keeps whichever finishes last.
    """

    def __init__(self, generator: ContentGenerator | None) -> None:
        self.generator = generator
        self._inflight: dict[str, asyncio.Task[GameContent]] = {}

    async def _read_cache(self, session: AsyncSession, game_id: str) -> GameContent | None:
        try:
            cached = await get_cached_content(session, game_id)
        except SQLAlchemyError as exc:
            logger.warning("cache_read_failed", extra={"game_id": game_id, "error": str(exc)})
            return None
        if cached is None:
            return None
        if not has_current_schema(cached):
            logger.info("cache_entry_stale", extra={"game_id": game_id})
            return None
        return cached

    async def get_or_generate(self, session: AsyncSession, request: GameRequest) -> GameContent:
        cached = await self._read_cache(session, request.game_id)
        if cached is not None:
            logger.info("cache_hit", extra={"game_id": request.game_id})
            return cached

        task = self._inflight.get(request.game_id)
        if task is None:
            task = asyncio.ensure_future(self._generate_and_store(session, request))
            self._inflight[request.game_id] = task
            task.add_done_callback(lambda done: self._forget(request.game_id, done))
        else:
            logger.info("content_generation_joined", extra={"game_id": request.game_id})
        # One cancelled caller must not cancel the generation the others wait on.
        return await asyncio.shield(task)

    def _forget(self, game_id: str, task: asyncio.Task[GameContent]) -> None:
        if self._inflight.get(game_id) is task:
            del self._inflight[game_id]

    async def _generate_and_store(self, session: AsyncSession, request: GameRequest) -> GameContent:
        content = await self._generate(request)
        await self._store(session, request, content)
        return content

    async def _generate(self, request: GameRequest) -> GameContent:
        if self.generator is None:
            raise ContentUnavailable("Content generation is not configured")

        logger.info("content_generation_started", extra={"game_id": request.game_id, "team": request.team, "year": request.year})
        narrative = await narrative_or_fallback(self.generator, request)
        payload = await generate_quiz_payload(self.generator, request, narrative)
        content = validate_generated(payload, request)
        logger.info(
            "content_generation_completed",
            extra={"game_id": request.game_id, "quiz_moments": len(content.quiz_moments)},
        )
        return content

    async def _store(self, session: AsyncSession, request: GameRequest, content: GameContent) -> None:
        source_api = self.generator.source_name if self.generator is not None else "unknown"
        try:
            await upsert_cached_content(session, content, source_api=source_api, league=request.league)
            await session.commit()
        except SQLAlchemyError as exc:
            # The player still gets the content; the next request regenerates.
            logger.error("cache_upsert_failed", extra={"game_id": request.game_id, "error": str(exc)})
            await session.rollback()


def build_content_service(settings: Settings) -> ContentService:
    """ContentService wired to OpenAI, or with no generator when no key is set."""
    client = get_openai_client(settings)
    generator = None
    if client is not None:
        generator = OpenAIContentGenerator(
            client,
            narrative_temperature=settings.openai_narrative_temperature,
            quiz_temperature=settings.openai_quiz_temperature,
        )
    return ContentService(generator)
