"""SQLAlchemy implementation for top-up repository"""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from sqlalchemy import desc, func, select, update

from walletdesk.db.models import WalletTopupOrder
from walletdesk.modules.common.repository import AsyncRepository


class SqlTopupRepository(AsyncRepository[WalletTopupOrder]):
    async def create(
        self,
        *,
        account_id: str,
        amount_cents: int,
        currency: str,
        payment_channel: str | None,
        reference_no: str | None,
    ) -> WalletTopupOrder:
        order = WalletTopupOrder(
            account_id=account_id,
            amount_cents=amount_cents,
            currency=currency,
            status="pending",
            payment_channel=payment_channel,
            reference_no=reference_no,
        )
        await self.add(order)
        await self.session.refresh(order)
        return order

    async def resolve(self, order_id: str, *, status: str, confirmed_at: datetime) -> bool:
        stmt = (
            update(WalletTopupOrder)
            .where(WalletTopupOrder.id == order_id, WalletTopupOrder.status == "pending")
            .values(status=status, confirmed_at=confirmed_at)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def get_order(self, order_id: str) -> WalletTopupOrder | None:
        stmt = (
            select(WalletTopupOrder)
            .where(WalletTopupOrder.id == order_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def list_orders(
        self,
        account_id: str,
        limit: int,
        offset: int,
        status: str | None = None,
    ) -> Sequence[WalletTopupOrder]:
        stmt = select(WalletTopupOrder).where(WalletTopupOrder.account_id == account_id)
        if status and status != "all":
            stmt = stmt.where(WalletTopupOrder.status == status)
        stmt = stmt.order_by(desc(WalletTopupOrder.created_at)).offset(offset).limit(limit)
        stmt = stmt.execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def list_orders_all(
        self,
        *,
        status: str | None,
        limit: int,
        offset: int,
    ) -> Sequence[WalletTopupOrder]:
        stmt = select(WalletTopupOrder)
        if status and status != "all":
            stmt = stmt.where(WalletTopupOrder.status == status)
        stmt = stmt.order_by(desc(WalletTopupOrder.created_at)).offset(offset).limit(limit)
        stmt = stmt.execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def count_by_status(self, status: str) -> int:
        stmt = select(func.count()).select_from(WalletTopupOrder).where(WalletTopupOrder.status == status)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())
