"""Profile ORM — one entitlement row per user: tier, daily counter, reservation tickets.

Invariants:
    - user_id is the identity provider's subject (primary key, never reassigned)
    - sheets_generated_today only counts when last_generation_date is today
    - pending_generations only counts when pending_date is today (stale tickets expire at rollover)
    - Rows are provisioned at sign-up by the identity collaborator, never deleted here

Design Decisions:
    - Counter + date instead of a usage log: admission is one row read (ADR: hot path)
    - subscription_status kept as String, validated through Tier enum in the shell
    - All mutations go through conditional UPDATEs in services/entitlement_store.py,
      never through attribute assignment on a loaded instance
"""

from datetime import date, datetime, timezone

from sqlalchemy import String, Integer, Date, DateTime, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class Profile(Base):
    """Entitlement record — tier and daily usage for one user."""
    __tablename__ = "profiles"
    __table_args__ = (
        CheckConstraint(
            "sheets_generated_today >= 0", name="ck_profiles_usage_non_negative",
        ),
        CheckConstraint(
            "pending_generations >= 0", name="ck_profiles_pending_non_negative",
        ),
    )

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    subscription_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="free",
    )
    sheets_generated_today: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    last_generation_date: Mapped[date | None] = mapped_column(
        Date, nullable=True,
    )
    pending_generations: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    pending_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
