"""SQLAlchemy implementation of the account repository."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Sequence

from sqlalchemy import func, select, update

from walletdesk.db.models import Account as AccountModel, utcnow
from walletdesk.modules.accounts.exceptions import AccountNotFoundError
from walletdesk.modules.accounts.models import Account
from walletdesk.modules.common.repository import AsyncRepository


class SqlAccountRepository(AsyncRepository[AccountModel]):
    async def get_by_id(self, account_id: str) -> Account | None:
        return await self._first(AccountModel.id == account_id)

    async def get_by_username(self, username: str) -> Account | None:
        return await self._first(AccountModel.username == username)

    async def get_by_email(self, email: str) -> Account | None:
        # Emails are stored as entered; lookups ignore case.
        return await self._first(func.lower(AccountModel.email) == email.lower())

    async def list_accounts(self) -> Sequence[Account]:
        stmt = (
            select(AccountModel)
            .order_by(AccountModel.created_at.desc())
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return [self._to_domain(model) for model in result.scalars().all()]

    async def count_accounts(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(AccountModel))
        return int(result.scalar_one())

    async def create_account(
        self,
        *,
        username: str,
        password_hash: str,
        role: str,
        email: str | None,
        is_active: bool,
    ) -> Account:
        model = await self.add(
            AccountModel(
                username=username,
                password_hash=password_hash,
                role=role,
                email=email,
                is_active=is_active,
            )
        )
        await self.session.refresh(model)
        return self._to_domain(model)

    async def update_account(
        self,
        account_id: str,
        *,
        email: str | None = None,
        is_active: bool | None = None,
        role: str | None = None,
        password_hash: str | None = None,
    ) -> Account:
        values: dict[str, Any] = {"email": email, "updated_at": utcnow()}
        if is_active is not None:
            values["is_active"] = is_active
        if role is not None:
            values["role"] = role
        if password_hash is not None:
            values["password_hash"] = password_hash

        stmt = (
            update(AccountModel)
            .where(AccountModel.id == account_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount == 0:
            raise AccountNotFoundError(f"account not found: {account_id}")
        await self.flush()
        stmt = select(AccountModel).where(AccountModel.id == account_id).execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return self._to_domain(result.scalar_one())

    async def set_last_login(self, account_id: str, timestamp: datetime) -> None:
        await self.session.execute(
            update(AccountModel)
            .where(AccountModel.id == account_id)
            .values(last_login_at=timestamp)
            .execution_options(synchronize_session=False)
        )

    async def set_verified(self, account_id: str, verified: bool) -> Account | None:
        stmt = (
            update(AccountModel)
            .where(AccountModel.id == account_id)
            .values(is_verified=verified, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount == 0:
            return None
        return await self.get_by_id(account_id)

    async def _first(self, *criteria) -> Account | None:
        stmt = select(AccountModel).where(*criteria).execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        model = result.scalars().first()
        return self._to_domain(model) if model is not None else None

    @staticmethod
    def _to_domain(model: AccountModel) -> Account:
        return Account(
            id=model.id,
            username=model.username,
            role=model.role or "user",
            is_active=bool(model.is_active),
            password_hash=model.password_hash,
            email=model.email,
            is_verified=bool(model.is_verified),
            created_at=model.created_at,
            updated_at=model.updated_at,
            last_login_at=model.last_login_at,
        )
