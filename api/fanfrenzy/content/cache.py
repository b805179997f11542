"""Reads and writes of the ``game_cache`` table."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.cache import GameCacheEntry
from ..errors import ValidationError
from ..gameplay.moments import GameContent
from ..utils.datetime_utils import now_utc

logger = logging.getLogger(__name__)


async def get_cached_content(session: AsyncSession, game_id: str) -> GameContent | None:
    """Cached content for ``game_id``, or None when absent or unparseable."""
    result = await session.execute(select(GameCacheEntry).where(GameCacheEntry.source_id == game_id))
    entry = result.scalar_one_or_none()
    if entry is None:
        return None
    try:
        return GameContent.from_payload(entry.payload)
    except ValidationError as exc:
        logger.warning("cache_entry_unparseable", extra={"game_id": game_id, "error": exc.message})
        return None


async def upsert_cached_content(
    session: AsyncSession,
    content: GameContent,
    source_api: str,
    league: str | None = None,
    needs_review: bool = True,
) -> None:
    """Insert or overwrite the entry for ``content.game_id``; last writer wins.

    Runs inside a savepoint so a failure leaves the caller's transaction usable.
    """
    now = now_utc()
    payload = content.to_payload()
    stmt = (
        insert(GameCacheEntry)
        .values(
            source_id=content.game_id,
            source_api=source_api,
            league=league,
            payload=payload,
            fetched_at=now,
            needs_review=needs_review,
        )
        .on_conflict_do_update(
            index_elements=["source_id"],
            set_={
                "source_api": source_api,
                "league": league,
                "payload": payload,
                "fetched_at": now,
                "needs_review": needs_review,
                "updated_at": now,
            },
        )
    )
    async with session.begin_nested():
        await session.execute(stmt)
