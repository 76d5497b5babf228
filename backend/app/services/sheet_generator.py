"""Sheet Generator — reserve, call provider, decompose, persist, charge.

Invariants:
    - State machine: received → quota_checked → provider_called → decomposed →
      persisted → quota_committed → responded; failures exit to failed
    - No quota is charged unless at least one sheet was persisted
    - Every exit after a successful reserve() either commits or releases the ticket
    - Each sheet is inserted in its own transaction; one failed insert never
      aborts the others
    - The charge equals the number of sheets actually persisted

Design Decisions:
    - Impureim sandwich: prompt building and decomposition are pure (core/, services/sheet_prompt.py),
      this class only sequences IO around them
    - Own sessions via session_scope, never the request session: the route shields
      this coroutine so a client disconnect cannot leave a charged-but-unsaved state
    - A failed commit after persistence is logged, not raised: the user keeps the
      sheets already written (partial-success semantics)
"""

import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError

from app.core.decompose import SheetDraft, decompose_sheets
from app.core.domain_types import GenerationState, GenType, Locale, UserId
from app.core.errors import (
    DatabaseError, EmptyResultError, ErrorContext, PersistenceError,
)
from app.core.repository_protocols import CompletionProvider, SheetRepository
from app.services.entitlement_store import SheetStore
from app.services.quota_engine import QuotaEngine, Reservation, SessionScope
from app.services.sheet_prompt import build_system_prompt, build_user_prompt

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationRequest:
    subject: str
    level: str
    topic: str
    gen_type: GenType = GenType.SINGLE


class SheetGenerator:
    """Orchestrates one generation request end to end."""

    def __init__(
        self,
        provider: CompletionProvider,
        quota: QuotaEngine,
        session_scope: SessionScope,
        locale: Locale = Locale.FR,
    ):
        self.provider = provider
        self.quota = quota
        self._session_scope = session_scope
        self.locale = locale

    async def generate(
        self, user_id: UserId, request: GenerationRequest,
    ) -> list[dict]:
        """Run the full pipeline. Returns the persisted sheets."""
        ctx = ErrorContext(user_id=user_id, gen_type=request.gen_type.value)
        self._log_state(GenerationState.RECEIVED, user_id, request)

        try:
            reservation = await self.quota.reserve(user_id, ctx)
        except Exception:
            self._log_state(GenerationState.FAILED, user_id, request)
            raise
        self._log_state(GenerationState.QUOTA_CHECKED, user_id, request)

        try:
            text = await self._call_provider(request, ctx)
            self._log_state(GenerationState.PROVIDER_CALLED, user_id, request)

            drafts = decompose_sheets(
                text, request.gen_type.unit_count, request.topic,
            )
            self._log_state(
                GenerationState.DECOMPOSED, user_id, request,
                requested_units=request.gen_type.unit_count,
            )

            sheets = await self._persist(user_id, request, drafts)
            if not sheets:
                raise PersistenceError(len(drafts), ctx)
            self._log_state(
                GenerationState.PERSISTED, user_id, request,
                requested_units=request.gen_type.unit_count,
                persisted_units=len(sheets),
            )
        except Exception:
            self._log_state(GenerationState.FAILED, user_id, request)
            await self._release(reservation)
            raise

        await self._commit(reservation, len(sheets))
        self._log_state(
            GenerationState.RESPONDED, user_id, request,
            persisted_units=len(sheets),
        )
        return sheets

    async def _call_provider(
        self, request: GenerationRequest, ctx: ErrorContext,
    ) -> str:
        text = await self.provider.complete(
            system=build_system_prompt(self.locale),
            prompt=build_user_prompt(
                self.locale, request.subject, request.level,
                request.topic, request.gen_type,
            ),
            context=ctx,
        )
        if not text or not text.strip():
            raise EmptyResultError(ctx)
        return text

    async def _persist(
        self, user_id: UserId, request: GenerationRequest,
        drafts: list[SheetDraft],
    ) -> list[dict]:
        persisted = []
        for draft in drafts:
            try:
                async with self._session_scope() as db:
                    store: SheetRepository = SheetStore(db)
                    persisted.append(await store.insert(
                        user_id, request.subject, request.level,
                        draft.title, draft.content,
                    ))
            except (DatabaseError, SQLAlchemyError) as e:
                logger.error(
                    f"Sheet insert failed, skipping '{draft.title}': {e}",
                    extra={"user_id": user_id},
                )
        return persisted

    async def _commit(self, reservation: Reservation, units: int) -> None:
        try:
            committed = await self.quota.commit(reservation, units)
        except (DatabaseError, SQLAlchemyError) as e:
            logger.error(
                f"Quota commit failed after persisting {units} sheet(s): {e}",
                extra={"user_id": reservation.user_id, "persisted_units": units},
            )
            return
        if not committed:
            logger.error(
                "Quota commit matched no profile row",
                extra={"user_id": reservation.user_id, "persisted_units": units},
            )
            return
        self._log_state_for(
            GenerationState.QUOTA_COMMITTED, reservation.user_id,
            persisted_units=units,
        )

    async def _release(self, reservation: Reservation) -> None:
        try:
            await self.quota.release(reservation)
        except (DatabaseError, SQLAlchemyError) as e:
            logger.error(
                f"Ticket release failed (expires at day rollover): {e}",
                extra={"user_id": reservation.user_id},
            )

    def _log_state(
        self, state: GenerationState, user_id: UserId,
        request: GenerationRequest, **extra: int,
    ) -> None:
        self._log_state_for(
            state, user_id, gen_type=request.gen_type.value, **extra,
        )

    @staticmethod
    def _log_state_for(
        state: GenerationState, user_id: UserId, **extra: object,
    ) -> None:
        level = logging.WARNING if state is GenerationState.FAILED else logging.INFO
        logger.log(
            level, f"Generation {state.value}",
            extra={"user_id": user_id, "state": state.value, **extra},
        )
