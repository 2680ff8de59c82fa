"""Domain services for account management."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from walletdesk.core.crypto import hash_password, verify_password
from walletdesk.modules.common.exceptions import ValidationError

from .exceptions import AccountAlreadyExistsError, AccountNotFoundError
from .models import ADMIN_ROLES, CUSTOMER_ROLES, Account, AccountCreateInput, AccountUpdateInput, UNSET
from .repository import AccountRepository

KNOWN_ROLES = ADMIN_ROLES | CUSTOMER_ROLES


class AccountService:
    """Encapsulates core account use cases."""

    def __init__(self, repository: AccountRepository) -> None:
        self._repository = repository

    @classmethod
    def with_session(cls, session: AsyncSession) -> "AccountService":
        # Deferred: the SQL repository imports this package's models.
        from walletdesk.infrastructure.database.repositories.account_repository import SqlAccountRepository

        return cls(SqlAccountRepository(session))

    async def get_by_id(self, account_id: str) -> Account | None:
        return await self._repository.get_by_id(account_id)

    async def require(self, account_id: str) -> Account:
        account = await self._repository.get_by_id(account_id)
        if account is None:
            raise AccountNotFoundError(f"account not found: {account_id}")
        return account

    async def get_by_username(self, username: str) -> Account | None:
        return await self._repository.get_by_username(username)

    async def find_recipient(self, handle: str) -> Account | None:
        """Resolve a transfer recipient by username, then by email."""
        account = await self._repository.get_by_username(handle)
        if account is None and "@" in handle:
            account = await self._repository.get_by_email(handle)
        return account

    async def list_accounts(self) -> Sequence[Account]:
        return await self._repository.list_accounts()

    async def count_accounts(self) -> int:
        return await self._repository.count_accounts()

    async def authenticate(self, username: str, password: str) -> Account | None:
        account = await self._repository.get_by_username(username)
        if account is None or not account.is_active:
            return None
        if not verify_password(password, account.password_hash):
            return None
        return account

    async def create_account(self, payload: AccountCreateInput) -> Account:
        if payload.role not in KNOWN_ROLES:
            raise ValidationError(f"unknown role: {payload.role}")
        existing = await self._repository.get_by_username(payload.username)
        if existing is not None:
            raise AccountAlreadyExistsError(f"username already taken: {payload.username}")
        if payload.email and await self._repository.get_by_email(payload.email) is not None:
            raise AccountAlreadyExistsError(f"email already registered: {payload.email}")

        try:
            password_hash = hash_password(payload.password)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
        return await self._repository.create_account(
            username=payload.username,
            password_hash=password_hash,
            role=payload.role,
            email=payload.email,
            is_active=payload.is_active,
        )

    async def update_account(self, account_id: str, payload: AccountUpdateInput) -> Account:
        current = await self._repository.get_by_id(account_id)
        if current is None:
            raise AccountNotFoundError(f"account not found: {account_id}")

        password_hash = None
        if payload.password is not UNSET and payload.password is not None:
            try:
                password_hash = hash_password(payload.password)
            except ValueError as exc:
                raise ValidationError(str(exc)) from exc

        email = (
            payload.email
            if payload.email is not UNSET
            else current.email
        )
        is_active = (
            payload.is_active
            if payload.is_active is not UNSET
            else current.is_active
        )
        role = (
            payload.role
            if payload.role is not UNSET
            else current.role
        )
        if role not in KNOWN_ROLES:
            raise ValidationError(f"unknown role: {role}")

        return await self._repository.update_account(
            account_id,
            email=email,
            is_active=is_active,
            role=role,
            password_hash=password_hash,
        )

    async def set_last_login(self, account_id: str) -> None:
        await self._repository.set_last_login(account_id, datetime.now(timezone.utc))

    async def set_verified(self, account_id: str, verified: bool = True) -> Account:
        account = await self._repository.set_verified(account_id, verified)
        if account is None:
            raise AccountNotFoundError(f"account not found: {account_id}")
        return account
