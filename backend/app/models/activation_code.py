"""Activation Code ORM — single-use VIP keys.

Invariants:
    - key is unique and case-sensitive, immutable once issued
    - used is monotonic (false → true), never reset
    - used_by is non-null iff used is true; both set by the same UPDATE
    - Rows are issued by an administrator, this service only claims them

Design Decisions:
    - Table named vip_keys: keys only ever upgrade to the vip tier
    - No FK from used_by to profiles: the claim must succeed even if the
      profile row is missing (the upgrade failure is reported separately)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Boolean, DateTime, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base


class ActivationCode(Base):
    """A single-use key that upgrades its redeemer to vip."""
    __tablename__ = "vip_keys"
    __table_args__ = (
        CheckConstraint(
            "(used AND used_by IS NOT NULL) OR (NOT used AND used_by IS NULL)",
            name="ck_vip_keys_used_by_iff_used",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    key: Mapped[str] = mapped_column(
        String(64), nullable=False, unique=True, index=True,
    )
    used: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    used_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    used_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
