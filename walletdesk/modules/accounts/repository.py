"""Storage contract for wallet holders and back-office staff."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, Sequence

from .models import Account


class AccountRepository(Protocol):
    # Lookups return None for unknown accounts; the service decides what that means.
    async def get_by_id(self, account_id: str) -> Account | None:
        ...

    async def get_by_username(self, username: str) -> Account | None:
        ...

    async def get_by_email(self, email: str) -> Account | None:
        """Case-insensitive; transfer recipients may be addressed by email."""
        ...

    async def list_accounts(self) -> Sequence[Account]:
        ...

    async def count_accounts(self) -> int:
        ...

    async def create_account(
        self,
        *,
        username: str,
        password_hash: str,
        role: str,
        email: str | None,
        is_active: bool,
    ) -> Account:
        ...

    async def update_account(
        self,
        account_id: str,
        *,
        email: str | None = None,
        is_active: bool | None = None,
        role: str | None = None,
        password_hash: str | None = None,
    ) -> Account:
        """Overwrite ``email``; ``None`` leaves the other fields as stored.

        Raises :class:`AccountNotFoundError` when no row matches.
        """
        ...

    async def set_last_login(self, account_id: str, timestamp: datetime) -> None:
        ...

    async def set_verified(self, account_id: str, verified: bool) -> Account | None:
        """Set the identity verification flag; ``None`` when no row matches."""
        ...
