# ABOUTME: SQLAlchemy ORM models for watermark and subscriber persistence.
# ABOUTME: Defines WfoWatermark (last processed AFD per office) and Subscriber tables.

from datetime import UTC, datetime

from sqlalchemy import DateTime, Index, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class WfoWatermark(Base):
    """Last processed forecast discussion for one WFO."""

    __tablename__ = "wfo_watermarks"

    wfo_identifier: Mapped[str] = mapped_column(String(8), primary_key=True)
    last_processed_issuance_time: Mapped[str] = mapped_column(String(64), nullable=False)
    audio_path: Mapped[str | None] = mapped_column(String(500), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC)
    )

    def __repr__(self) -> str:
        return f"<WfoWatermark {self.wfo_identifier} @ {self.last_processed_issuance_time}>"


class Subscriber(Base):
    """An app user subscribed to the summaries of one WFO."""

    __tablename__ = "subscribers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    wfo_identifier: Mapped[str | None] = mapped_column(String(8), nullable=True)
    fcm_token: Mapped[str | None] = mapped_column(String(512), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC)
    )

    __table_args__ = (Index("ix_subscribers_wfo_identifier", wfo_identifier),)

    def __repr__(self) -> str:
        return f"<Subscriber {self.user_id} ({self.wfo_identifier or 'no wfo'})>"
