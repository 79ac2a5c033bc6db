# ABOUTME: Repository classes for database access patterns.
# ABOUTME: Provides WatermarkRepository (merge upserts) and SubscriberRepository (WFO discovery).

from datetime import UTC, datetime

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from foul_weather.db.models import Subscriber, WfoWatermark


class WatermarkRepository:
    """Repository for per-WFO watermarks."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, wfo_identifier: str) -> WfoWatermark | None:
        """Get the watermark for a WFO."""
        return await self.session.get(WfoWatermark, wfo_identifier)

    async def upsert(
        self, wfo_identifier: str, issuance_time: str, audio_path: str | None = None
    ) -> None:
        """Insert or merge the watermark, leaving unrelated columns untouched."""
        now = datetime.now(UTC)
        values = {"last_processed_issuance_time": issuance_time, "updated_at": now}
        if audio_path is not None:
            values["audio_path"] = audio_path

        stmt = insert(WfoWatermark).values(wfo_identifier=wfo_identifier, **values)
        stmt = stmt.on_conflict_do_update(index_elements=[WfoWatermark.wfo_identifier], set_=values)
        await self.session.execute(stmt)


class SubscriberRepository:
    """Repository for subscriber records."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_distinct_wfo_identifiers(self) -> list[str]:
        """List every WFO referenced by at least one subscriber, upper-cased and sorted."""
        code = func.upper(func.trim(Subscriber.wfo_identifier))
        result = await self.session.execute(
            select(code)
            .where(Subscriber.wfo_identifier.is_not(None))
            .where(func.trim(Subscriber.wfo_identifier) != "")
            .distinct()
            .order_by(code)
        )
        return list(result.scalars().all())
