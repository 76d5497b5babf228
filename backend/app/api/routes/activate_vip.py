"""Activate VIP — POST /api/v1/activate-vip (+ OPTIONS preflight)."""

from fastapi import APIRouter, Depends, Response

from app.api.dependencies import get_current_user_id, get_redemption_engine
from app.api.routes.preflight import preflight_response
from app.core.domain_types import UserId
from app.schemas.activation import ActivateRequest, ActivateResponse
from app.services.redemption import RedemptionEngine

router = APIRouter(prefix="/api/v1", tags=["activation"])


@router.options("/activate-vip")
async def activate_vip_preflight() -> Response:
    return preflight_response()


@router.post("/activate-vip", response_model=ActivateResponse)
async def activate_vip(
    body: ActivateRequest,
    user_id: UserId = Depends(get_current_user_id),
    engine: RedemptionEngine = Depends(get_redemption_engine),
):
    await engine.redeem(user_id, body.key)
    return ActivateResponse()
