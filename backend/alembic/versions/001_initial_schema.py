"""Initial schema — profiles, vip_keys, sheets.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "profiles",
        sa.Column("user_id", sa.String(64), primary_key=True),
        sa.Column("subscription_status", sa.String(20), nullable=False, server_default="free"),
        sa.Column("sheets_generated_today", sa.Integer, nullable=False, server_default="0"),
        sa.Column("last_generation_date", sa.Date, nullable=True),
        sa.Column("pending_generations", sa.Integer, nullable=False, server_default="0"),
        sa.Column("pending_date", sa.Date, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("sheets_generated_today >= 0", name="ck_profiles_usage_non_negative"),
        sa.CheckConstraint("pending_generations >= 0", name="ck_profiles_pending_non_negative"),
    )

    op.create_table(
        "vip_keys",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("key", sa.String(64), nullable=False),
        sa.Column("used", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("used_by", sa.String(64), nullable=True),
        sa.Column("used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(
            "(used AND used_by IS NOT NULL) OR (NOT used AND used_by IS NULL)",
            name="ck_vip_keys_used_by_iff_used",
        ),
    )
    op.create_index("ix_vip_keys_key", "vip_keys", ["key"], unique=True)

    op.create_table(
        "sheets",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("subject", sa.String(200), nullable=False),
        sa.Column("level", sa.String(100), nullable=False),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("rating", sa.Integer, nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("rating >= 0 AND rating <= 5", name="ck_sheets_rating_range"),
    )
    op.create_index("ix_sheets_user_created", "sheets", ["user_id", "created_at"])


def downgrade() -> None:
    op.drop_index("ix_sheets_user_created", table_name="sheets")
    op.drop_table("sheets")
    op.drop_index("ix_vip_keys_key", table_name="vip_keys")
    op.drop_table("vip_keys")
    op.drop_table("profiles")
