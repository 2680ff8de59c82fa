"""SQLAlchemy implementation for settlement runs."""

from __future__ import annotations

from typing import Any, Optional, Sequence

from sqlalchemy import desc, func, select, update
from sqlalchemy.orm import selectinload

from walletdesk.db.models import SettlementEvent, SettlementRun, utcnow
from walletdesk.modules.common.repository import AsyncRepository


class SqlSettlementRepository(AsyncRepository[SettlementRun]):
    async def create_run(
        self,
        *,
        transaction_id: str,
        target_status: str,
        actor_id: Optional[str],
    ) -> SettlementRun:
        run = SettlementRun(
            transaction_id=transaction_id,
            target_status=target_status,
            state="initiated",
            actor_id=actor_id,
        )
        await self.add(run)
        await self.add(SettlementEvent(run_id=run.id, from_state=None, to_state="initiated"))
        return run

    async def transition(
        self,
        run_id: str,
        *,
        from_state: str,
        to_state: str,
        detail: Optional[str] = None,
        **fields: Any,
    ) -> bool:
        stmt = (
            update(SettlementRun)
            .where(SettlementRun.id == run_id, SettlementRun.state == from_state)
            .values(state=to_state, updated_at=utcnow(), **fields)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount != 1:
            return False
        await self.add(SettlementEvent(run_id=run_id, from_state=from_state, to_state=to_state, detail=detail))
        return True

    async def get_run(self, run_id: str) -> SettlementRun | None:
        stmt = (
            select(SettlementRun)
            .where(SettlementRun.id == run_id)
            .options(selectinload(SettlementRun.events))
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def list_runs(self, *, state: Optional[str], limit: int, offset: int) -> Sequence[SettlementRun]:
        stmt = select(SettlementRun).options(selectinload(SettlementRun.events))
        if state:
            stmt = stmt.where(SettlementRun.state == state)
        stmt = stmt.order_by(desc(SettlementRun.created_at)).offset(offset).limit(limit)
        result = await self.session.execute(stmt.execution_options(populate_existing=True))
        return result.scalars().all()

    async def count_by_state(self, state: str) -> int:
        stmt = select(func.count()).select_from(SettlementRun).where(SettlementRun.state == state)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())
