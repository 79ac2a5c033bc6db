# ABOUTME: Watermark store that prevents reprocessing unchanged forecast discussions.
# ABOUTME: Opens one short-lived session per operation so concurrent tasks never share one.

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from foul_weather.db.repository import WatermarkRepository
from foul_weather.db.session import get_session
from foul_weather.models import Watermark

log = structlog.get_logger()

SessionFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]


class WatermarkStore:
    """Reads and merges per-WFO watermarks."""

    def __init__(self, session_factory: SessionFactory = get_session) -> None:
        self.session_factory = session_factory

    async def get(self, wfo_identifier: str) -> Watermark | None:
        """Get the stored watermark, or None if the WFO was never processed."""
        async with self.session_factory() as session:
            row = await WatermarkRepository(session).get(wfo_identifier)
            if row is None:
                return None
            return Watermark(
                wfo_identifier=row.wfo_identifier,
                last_processed_issuance_time=row.last_processed_issuance_time,
                audio_path=row.audio_path,
                updated_at=row.updated_at,
            )

    async def set(
        self, wfo_identifier: str, issuance_time: str, audio_path: str | None = None
    ) -> None:
        """Advance the watermark (upsert with merge semantics)."""
        async with self.session_factory() as session:
            await WatermarkRepository(session).upsert(wfo_identifier, issuance_time, audio_path)
        log.debug("watermark_updated", wfo=wfo_identifier, issuance_time=issuance_time)
