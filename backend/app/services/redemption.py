"""Redemption Engine — single-use activation codes that upgrade a user to vip.

Invariants:
    - The claim is ONE compare-and-swap UPDATE, committed on its own before the upgrade
    - For N concurrent redeemers of one code: exactly one claim matches a row
    - A losing attempt never touches used_by
    - Claimed-but-not-upgraded raises TierUpgradeError (CRITICAL) — never retried,
      never rolled back: code reuse is worse than an orphaned claim

Design Decisions:
    - Miss classification (invalid vs already used) is a read AFTER the failed CAS:
      it only chooses the error message, it never decides who wins
    - Codes are trimmed but compared case-sensitively
"""

import logging

from sqlalchemy.exc import SQLAlchemyError

from app.core.domain_types import Tier, UserId
from app.core.errors import (
    CodeAlreadyUsedError, DatabaseError, ErrorContext, InvalidCodeError,
    TierUpgradeError, ValidationError,
)
from app.core.repository_protocols import (
    ActivationCodeRepository, EntitlementRepository,
)
from app.services.entitlement_store import ActivationCodeStore, ProfileStore
from app.services.quota_engine import SessionScope

logger = logging.getLogger(__name__)


class RedemptionEngine:
    """Claims activation codes and applies the vip upgrade."""

    def __init__(self, session_scope: SessionScope):
        self._session_scope = session_scope

    async def redeem(self, user_id: UserId, raw_code: str) -> None:
        """Claim `raw_code` for `user_id` and upgrade to vip."""
        code = (raw_code or "").strip()
        ctx = ErrorContext(user_id=user_id)
        if not code:
            raise ValidationError(
                "Activation key is empty", "key",
                code="INVALID_KEY_INPUT", context=ctx,
            )

        async with self._session_scope() as db:
            store: ActivationCodeRepository = ActivationCodeStore(db)
            if not await store.claim(code, user_id):
                used = await store.is_used(code)
                if used is None:
                    raise InvalidCodeError(ctx)
                raise CodeAlreadyUsedError(ctx)

        logger.info("Activation code claimed", extra={"user_id": user_id})
        await self._upgrade(user_id, code)

    async def _upgrade(self, user_id: UserId, code: str) -> None:
        try:
            async with self._session_scope() as db:
                profiles: EntitlementRepository = ProfileStore(db)
                upgraded = await profiles.set_tier(user_id, Tier.VIP)
        except (DatabaseError, SQLAlchemyError) as e:
            raise self._orphaned_claim(user_id, code, str(e))
        if not upgraded:
            raise self._orphaned_claim(user_id, code, "profile not found")
        logger.info("User upgraded to vip", extra={"user_id": user_id})

    @staticmethod
    def _orphaned_claim(
        user_id: UserId, code: str, reason: str,
    ) -> TierUpgradeError:
        error = TierUpgradeError(user_id, code, reason)
        logger.critical(
            error.message,
            extra={"user_id": user_id, "error_code": error.code},
        )
        return error
