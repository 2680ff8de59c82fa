"""SQLAlchemy implementation for wallet domain"""

from __future__ import annotations

from sqlalchemy import func, select, update

from walletdesk.db.models import Wallet, utcnow
from walletdesk.modules.common.repository import AsyncRepository


class SqlWalletRepository(AsyncRepository[Wallet]):
    async def get_wallet(self, account_id: str) -> Wallet | None:
        stmt = (
            select(Wallet)
            .where(Wallet.account_id == account_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def create_wallet(self, account_id: str, currency: str) -> Wallet:
        wallet = Wallet(account_id=account_id, currency=currency, balance_cents=0, is_frozen=False)
        return await self.add(wallet)

    async def apply_delta(self, account_id: str, delta_cents: int, *, allow_frozen: bool = True) -> bool:
        stmt = (
            update(Wallet)
            .where(Wallet.account_id == account_id)
            .values(balance_cents=Wallet.balance_cents + delta_cents, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        if delta_cents < 0:
            stmt = stmt.where(Wallet.balance_cents >= -delta_cents)
            if not allow_frozen:
                stmt = stmt.where(Wallet.is_frozen.is_(False))
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def set_frozen(self, account_id: str, frozen: bool) -> Wallet | None:
        stmt = (
            update(Wallet)
            .where(Wallet.account_id == account_id)
            .values(is_frozen=frozen, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount == 0:
            return None
        return await self.get_wallet(account_id)

    async def total_balance(self) -> int:
        result = await self.session.execute(select(func.coalesce(func.sum(Wallet.balance_cents), 0)))
        return int(result.scalar_one())
