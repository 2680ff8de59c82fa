"""Repository protocol for transaction records."""

from __future__ import annotations

from typing import Protocol, Sequence

from walletdesk.db.models import TransactionRecord as TransactionModel


class TransactionRepository(Protocol):
    async def create(self, **fields) -> TransactionModel:
        ...

    async def get(self, transaction_id: str) -> TransactionModel | None:
        ...

    async def update_status(
        self,
        transaction_id: str,
        *,
        status: str,
        note: str | None,
        expected_status: str | None = None,
    ) -> TransactionModel | None:
        ...

    async def list_for_account(
        self,
        account_id: str,
        *,
        status: str | None,
        limit: int,
        offset: int,
    ) -> Sequence[TransactionModel]:
        ...

    async def list_all(self, *, status: str | None, limit: int, offset: int) -> Sequence[tuple]:
        ...

    async def delete(self, transaction_id: str) -> bool:
        ...

    async def count_by_status(self, status: str | None = None) -> int:
        ...
