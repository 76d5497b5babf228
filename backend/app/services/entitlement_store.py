"""Entitlement Store — data access for profiles, activation codes and sheets.

Invariants:
    - Every mutating method is ONE conditional statement followed by commit;
      callers never read-modify-write a shared row in Python
    - Rollover is evaluated inside SQL (CASE on the stamped date), so a stale
      counter is never incremented from its old value
    - claim() is a compare-and-swap on vip_keys.used scoped by key
    - Methods report matched rows (bool) — the caller decides what a miss means

Design Decisions:
    - synchronize_session=False: no ORM instances are kept across these updates
    - One store class per table, all taking the caller's AsyncSession
      (ADR: transaction boundaries belong to the service, not the store)
"""

from datetime import date, datetime, timezone

from sqlalchemy import and_, case, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain_types import Tier, UserId
from app.models.activation_code import ActivationCode
from app.models.profile import Profile
from app.models.sheet import Sheet


_UNLIMITED_TIERS = [tier.value for tier in Tier if tier.is_unlimited]


def _counted_on(count_column, date_column, today: date):
    """SQL twin of core.quota.effective_usage."""
    return case((date_column == today, count_column), else_=0)


def _tickets_after_close(today: date):
    return case(
        (
            and_(Profile.pending_date == today, Profile.pending_generations > 0),
            Profile.pending_generations - 1,
        ),
        else_=0,
    )


class ProfileStore:
    """profiles row access."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_profile(self, user_id: UserId) -> Profile | None:
        result = await self.db.execute(
            select(Profile).where(Profile.user_id == user_id),
        )
        return result.scalar_one_or_none()

    async def take_ticket(
        self, user_id: UserId, today: date, limit: int,
    ) -> bool:
        """Open one reservation ticket if the free-tier limit still allows it."""
        usage = _counted_on(
            Profile.sheets_generated_today, Profile.last_generation_date, today,
        )
        tickets = _counted_on(
            Profile.pending_generations, Profile.pending_date, today,
        )
        stmt = (
            update(Profile)
            .where(Profile.user_id == user_id)
            .where(or_(
                Profile.subscription_status.in_(_UNLIMITED_TIERS),
                usage + tickets < limit,
            ))
            .values(pending_generations=tickets + 1, pending_date=today)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        await self.db.commit()
        return result.rowcount == 1

    async def release_ticket(self, user_id: UserId, today: date) -> None:
        """Close one ticket without charging anything."""
        stmt = (
            update(Profile)
            .where(Profile.user_id == user_id)
            .values(pending_generations=_tickets_after_close(today))
            .execution_options(synchronize_session=False)
        )
        await self.db.execute(stmt)
        await self.db.commit()

    async def commit_usage(
        self, user_id: UserId, units: int, today: date, close_ticket: bool,
    ) -> bool:
        """Atomic increment-and-stamp of the daily counter."""
        values = {
            "sheets_generated_today": _counted_on(
                Profile.sheets_generated_today,
                Profile.last_generation_date,
                today,
            ) + units,
            "last_generation_date": today,
        }
        if close_ticket:
            values["pending_generations"] = _tickets_after_close(today)
        stmt = (
            update(Profile)
            .where(Profile.user_id == user_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        await self.db.commit()
        return result.rowcount == 1

    async def set_tier(self, user_id: UserId, tier: Tier) -> bool:
        """Overwrite the tier unconditionally."""
        stmt = (
            update(Profile)
            .where(Profile.user_id == user_id)
            .values(subscription_status=tier.value)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        await self.db.commit()
        return result.rowcount == 1


class ActivationCodeStore:
    """vip_keys row access."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def claim(self, code: str, user_id: UserId) -> bool:
        """CAS: used false → true, stamping the redeemer. True iff this call won."""
        stmt = (
            update(ActivationCode)
            .where(ActivationCode.key == code)
            .where(ActivationCode.used.is_(False))
            .values(
                used=True,
                used_by=user_id,
                used_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        await self.db.commit()
        return result.rowcount == 1

    async def is_used(self, code: str) -> bool | None:
        """None when the code does not exist."""
        result = await self.db.execute(
            select(ActivationCode.used).where(ActivationCode.key == code),
        )
        return result.scalar_one_or_none()


class SheetStore:
    """sheets row access — insert only."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def insert(
        self, user_id: UserId, subject: str, level: str,
        title: str, content: str,
    ) -> dict:
        sheet = Sheet(
            user_id=user_id, subject=subject, level=level,
            title=title, content=content,
        )
        self.db.add(sheet)
        await self.db.commit()
        return sheet.to_dict()
