"""Generate Sheet — POST /api/v1/generate-sheet (+ OPTIONS preflight).

Invariants:
    - Auth resolved before the body is acted on: 401 never touches quota
    - Orchestration runs in its own task under asyncio.shield: a client disconnect
      cancels the handler, never the persistence or the quota commit
    - Response is {sheets: [...]} with every persisted sheet, in provider order

Design Decisions:
    - Shielded task's exception is always retrieved (done callback): a failure after
      disconnect is logged by the orchestrator, never reported as "never retrieved"
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, Response

from app.api.dependencies import get_current_user_id, get_sheet_generator
from app.api.routes.preflight import preflight_response
from app.core.domain_types import UserId
from app.schemas.generation import GenerateRequest, GenerateResponse
from app.services.sheet_generator import GenerationRequest, SheetGenerator

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["generation"])


def _consume_outcome(task: asyncio.Task) -> None:
    if not task.cancelled():
        task.exception()


@router.options("/generate-sheet")
async def generate_sheet_preflight() -> Response:
    return preflight_response()


@router.post("/generate-sheet", response_model=GenerateResponse)
async def generate_sheet(
    body: GenerateRequest,
    user_id: UserId = Depends(get_current_user_id),
    generator: SheetGenerator = Depends(get_sheet_generator),
):
    """Generate one sheet, a pack or a chapter for the caller."""
    request = GenerationRequest(
        subject=body.subject, level=body.level,
        topic=body.topic, gen_type=body.gen_type,
    )
    task = asyncio.ensure_future(generator.generate(user_id, request))
    task.add_done_callback(_consume_outcome)
    try:
        sheets = await asyncio.shield(task)
    except asyncio.CancelledError:
        logger.info(
            "Client went away, generation continues in background",
            extra={"user_id": user_id, "gen_type": request.gen_type.value},
        )
        raise
    return GenerateResponse(sheets=sheets)
