"""Quota Engine — two-phase daily quota: reserve before generation, charge after.

Invariants:
    - reserve() raises ProfileNotFoundError or QuotaExceededError, else returns a Reservation
    - A free-tier Reservation always holds exactly one open ticket until
      commit() or release() closes it
    - commit() charges the number of PERSISTED sheets, never the requested count
    - Calendar day comes from local_today(clock(), tz) — one clock per engine

Design Decisions:
    - Pure decision first (core/quota.py) for a precise error, SQL-guarded ticket
      second for atomicity: the UPDATE repeats the predicate, a lost race is a denial
    - Tickets bound concurrency, not cost: a free user at 2/3 can have one request in
      flight; a pack admitted at 2/3 still lands at 7 (cost per sheet, known late)
    - Each phase opens its own session: the provider call between them holds no
      connection and no lock
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime, timezone, tzinfo
from typing import AsyncContextManager

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain_types import Tier, UserId
from app.core.repository_protocols import EntitlementRepository, ProfileLike
from app.core.errors import (
    ErrorContext, ProfileNotFoundError, QuotaExceededError,
)
from app.core.quota import (
    FREE_DAILY_LIMIT, effective_usage, evaluate_quota, local_today,
    remaining_today,
)
from app.services.entitlement_store import ProfileStore

logger = logging.getLogger(__name__)

SessionScope = Callable[[], AsyncContextManager[AsyncSession]]


@dataclass(frozen=True)
class Reservation:
    """Provisional admission handed from reserve() to commit()/release()."""
    user_id: UserId
    tier: Tier
    day: date
    baseline: int
    ticketed: bool


@dataclass(frozen=True)
class EntitlementStatus:
    tier: Tier
    sheets_generated_today: int
    daily_limit: int | None
    remaining_today: int | None


def parse_tier(raw: str) -> Tier:
    """Unknown stored values are treated as free — never as unlimited."""
    try:
        return Tier(raw)
    except ValueError:
        logger.warning(f"Unknown subscription_status {raw!r}, treating as free")
        return Tier.FREE


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _usage(profile: ProfileLike, today: date) -> tuple[int, int]:
    """(sheets counted today, tickets open today) with rollover applied."""
    return (
        effective_usage(
            profile.sheets_generated_today, profile.last_generation_date, today,
        ),
        effective_usage(profile.pending_generations, profile.pending_date, today),
    )


class QuotaEngine:
    """Admission and charging against the daily sheet quota."""

    def __init__(
        self,
        session_scope: SessionScope,
        tz: tzinfo = timezone.utc,
        limit: int = FREE_DAILY_LIMIT,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._session_scope = session_scope
        self.tz = tz
        self.limit = limit
        self._clock = clock

    def today(self) -> date:
        return local_today(self._clock(), self.tz)

    async def reserve(
        self, user_id: UserId, context: ErrorContext | None = None,
    ) -> Reservation:
        """Admit or deny; on admission of a free user, take one ticket."""
        today = self.today()
        async with self._session_scope() as db:
            store: EntitlementRepository = ProfileStore(db)
            profile = await store.get_profile(user_id)
            if profile is None:
                raise ProfileNotFoundError(user_id, context)

            tier = parse_tier(profile.subscription_status)
            used, open_tickets = _usage(profile, today)
            decision = evaluate_quota(tier, used, open_tickets, self.limit)
            if not decision.allowed:
                raise QuotaExceededError(self.limit, context)

            if decision.needs_ticket and not await store.take_ticket(
                user_id, today, self.limit,
            ):
                logger.info(
                    "Reservation lost to a concurrent request",
                    extra={"user_id": user_id},
                )
                raise QuotaExceededError(self.limit, context)

        return Reservation(
            user_id=user_id, tier=tier, day=today,
            baseline=used, ticketed=decision.needs_ticket,
        )

    async def release(self, reservation: Reservation) -> None:
        """Give the ticket back without charging."""
        if not reservation.ticketed:
            return
        async with self._session_scope() as db:
            await ProfileStore(db).release_ticket(
                reservation.user_id, self.today(),
            )

    async def commit(self, reservation: Reservation, units: int) -> bool:
        """Charge `units` sheets today and close the ticket."""
        async with self._session_scope() as db:
            return await ProfileStore(db).commit_usage(
                reservation.user_id, units, self.today(),
                close_ticket=reservation.ticketed,
            )

    async def status(self, user_id: UserId) -> EntitlementStatus:
        """Read-only view for the dashboard."""
        today = self.today()
        async with self._session_scope() as db:
            profile = await ProfileStore(db).get_profile(user_id)
        if profile is None:
            raise ProfileNotFoundError(user_id)
        tier = parse_tier(profile.subscription_status)
        used, _ = _usage(profile, today)
        return EntitlementStatus(
            tier=tier,
            sheets_generated_today=used,
            daily_limit=None if tier.is_unlimited else self.limit,
            remaining_today=remaining_today(tier, used, self.limit),
        )
