"""Entitlement — GET /api/v1/entitlement, the caller's tier and today's usage.

Invariants:
    - Read-only: never takes or releases a ticket
    - Rollover applied: a counter stamped yesterday reads as 0
"""

from fastapi import APIRouter, Depends

from app.api.dependencies import get_current_user_id, get_quota_engine
from app.core.domain_types import UserId
from app.schemas.entitlement import EntitlementResponse
from app.services.quota_engine import QuotaEngine

router = APIRouter(prefix="/api/v1", tags=["entitlement"])


@router.get("/entitlement", response_model=EntitlementResponse)
async def get_entitlement(
    user_id: UserId = Depends(get_current_user_id),
    quota: QuotaEngine = Depends(get_quota_engine),
):
    status = await quota.status(user_id)
    return EntitlementResponse(
        tier=status.tier,
        sheets_generated_today=status.sheets_generated_today,
        daily_limit=status.daily_limit,
        remaining_today=status.remaining_today,
    )
