"""SQLAlchemy implementation for transfer intents."""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from sqlalchemy import desc, func, or_, select, update

from walletdesk.db.models import TransferIntent
from walletdesk.modules.common.repository import AsyncRepository


class SqlTransferRepository(AsyncRepository[TransferIntent]):
    async def create(
        self,
        *,
        sender_id: str,
        recipient_id: str,
        amount_cents: int,
        currency: str,
        description: str | None,
    ) -> TransferIntent:
        transfer = TransferIntent(
            sender_id=sender_id,
            recipient_id=recipient_id,
            amount_cents=amount_cents,
            currency=currency,
            status="pending",
            description=description,
        )
        await self.add(transfer)
        await self.session.refresh(transfer)
        return transfer

    async def get(self, transfer_id: str) -> TransferIntent | None:
        stmt = (
            select(TransferIntent)
            .where(TransferIntent.id == transfer_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def find_latest_pending(self, amount_cents: int) -> TransferIntent | None:
        stmt = (
            select(TransferIntent)
            .where(TransferIntent.status == "pending", TransferIntent.amount_cents == amount_cents)
            .order_by(desc(TransferIntent.created_at))
            .limit(1)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def claim(self, transfer_id: str, *, status: str, settled_at: datetime) -> bool:
        stmt = (
            update(TransferIntent)
            .where(TransferIntent.id == transfer_id, TransferIntent.status == "pending")
            .values(status=status, settled_at=settled_at)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def list_for_account(self, account_id: str, limit: int, offset: int) -> Sequence[TransferIntent]:
        stmt = (
            select(TransferIntent)
            .where(or_(TransferIntent.sender_id == account_id, TransferIntent.recipient_id == account_id))
            .order_by(desc(TransferIntent.created_at))
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def count_by_status(self, status: str) -> int:
        stmt = select(func.count()).select_from(TransferIntent).where(TransferIntent.status == status)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())
