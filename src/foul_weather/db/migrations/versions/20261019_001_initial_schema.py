"""Initial schema: WFO watermarks and subscribers.

Revision ID: 001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "wfo_watermarks",
        sa.Column("wfo_identifier", sa.String(length=8), nullable=False),
        sa.Column("last_processed_issuance_time", sa.String(length=64), nullable=False),
        sa.Column("audio_path", sa.String(length=500), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("wfo_identifier"),
    )
    op.create_table(
        "subscribers",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("wfo_identifier", sa.String(length=8), nullable=True),
        sa.Column("fcm_token", sa.String(length=512), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id"),
    )
    op.create_index(
        "ix_subscribers_wfo_identifier", "subscribers", ["wfo_identifier"], unique=False
    )


def downgrade() -> None:
    op.drop_index("ix_subscribers_wfo_identifier", table_name="subscribers")
    op.drop_table("subscribers")
    op.drop_table("wfo_watermarks")
