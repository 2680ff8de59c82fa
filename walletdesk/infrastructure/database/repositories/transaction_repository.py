"""SQLAlchemy implementation for transaction records."""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import delete, desc, func, select, update

from walletdesk.db.models import Account, TransactionRecord, utcnow
from walletdesk.modules.common.repository import AsyncRepository


class SqlTransactionRepository(AsyncRepository[TransactionRecord]):
    async def create(self, **fields) -> TransactionRecord:
        record = await self.add(TransactionRecord(**fields))
        await self.session.refresh(record)
        return record

    async def get(self, transaction_id: str) -> TransactionRecord | None:
        stmt = (
            select(TransactionRecord)
            .where(TransactionRecord.id == transaction_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def update_status(
        self,
        transaction_id: str,
        *,
        status: str,
        note: str | None,
        expected_status: str | None = None,
    ) -> TransactionRecord | None:
        stmt = update(TransactionRecord).where(TransactionRecord.id == transaction_id)
        if expected_status is not None:
            stmt = stmt.where(TransactionRecord.status == expected_status)
        stmt = stmt.values(status=status, note=note, updated_at=utcnow()).execution_options(
            synchronize_session=False
        )
        result = await self.session.execute(stmt)
        if result.rowcount == 0:
            return None
        return await self.get(transaction_id)

    async def list_for_account(
        self,
        account_id: str,
        *,
        status: str | None,
        limit: int,
        offset: int,
    ) -> Sequence[TransactionRecord]:
        stmt = select(TransactionRecord).where(TransactionRecord.account_id == account_id)
        if status and status != "all":
            stmt = stmt.where(TransactionRecord.status == status)
        stmt = stmt.order_by(desc(TransactionRecord.created_at)).offset(offset).limit(limit)
        stmt = stmt.execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def list_all(self, *, status: str | None, limit: int, offset: int) -> Sequence[tuple]:
        stmt = select(TransactionRecord, Account.username, Account.email).join(
            Account, Account.id == TransactionRecord.account_id, isouter=True
        )
        if status and status != "all":
            stmt = stmt.where(TransactionRecord.status == status)
        stmt = stmt.order_by(desc(TransactionRecord.created_at)).offset(offset).limit(limit)
        stmt = stmt.execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return [tuple(row) for row in result.all()]

    async def delete(self, transaction_id: str) -> bool:
        result = await self.session.execute(
            delete(TransactionRecord).where(TransactionRecord.id == transaction_id)
        )
        return result.rowcount > 0

    async def count_by_status(self, status: str | None = None) -> int:
        stmt = select(func.count()).select_from(TransactionRecord)
        if status and status != "all":
            stmt = stmt.where(TransactionRecord.status == status)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())
