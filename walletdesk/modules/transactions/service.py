"""Transaction record service."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from walletdesk.core.config import get_settings
from walletdesk.db.models import TransactionRecord as TransactionModel
from walletdesk.modules.common.exceptions import ValidationError

from .exceptions import TransactionNotFoundError, TransactionStatusConflictError
from .models import TRANSACTION_STATUSES, TRANSACTION_TYPES, TransactionCreateInput, TransactionRecord
from .repository import TransactionRepository


def append_note(existing: Optional[str], addition: Optional[str], separator: str = "\n") -> Optional[str]:
    """Append ``addition`` to a note without discarding earlier content."""
    if not addition:
        return existing
    if not existing:
        return addition
    return f"{existing}{separator}{addition}"


@dataclass(slots=True)
class TransactionService:
    repository: TransactionRepository
    note_separator: str = "\n"

    @classmethod
    def with_session(cls, session: AsyncSession) -> "TransactionService":
        from walletdesk.infrastructure.database.repositories.transaction_repository import (
            SqlTransactionRepository,
        )

        return cls(SqlTransactionRepository(session), get_settings().settlement.note_separator)

    async def record(self, payload: TransactionCreateInput) -> TransactionRecord:
        if payload.type not in TRANSACTION_TYPES:
            raise ValidationError(f"unknown transaction type: {payload.type}")
        if payload.status not in TRANSACTION_STATUSES:
            raise ValidationError(f"unknown transaction status: {payload.status}")
        if payload.amount_cents <= 0:
            raise ValidationError("transaction amount must be positive")
        model = await self.repository.create(
            account_id=payload.account_id,
            amount_cents=payload.amount_cents,
            currency=payload.currency,
            type=payload.type,
            name=payload.name,
            category=payload.category,
            status=payload.status,
            note=payload.note,
            transfer_id=payload.transfer_id,
            counterparty_id=payload.counterparty_id,
        )
        return self._to_domain(model)

    async def get(self, transaction_id: str) -> TransactionRecord | None:
        model = await self.repository.get(transaction_id)
        return self._to_domain(model) if model else None

    async def require(self, transaction_id: str) -> TransactionRecord:
        record = await self.get(transaction_id)
        if record is None:
            raise TransactionNotFoundError(f"transaction not found: {transaction_id}")
        return record

    async def update_status(
        self,
        transaction_id: str,
        status: str,
        *,
        note: Optional[str] = None,
        expected_status: Optional[str] = None,
    ) -> TransactionRecord:
        """Set a record's status, appending ``note`` to the existing note.

        With ``expected_status`` the write only applies while the stored status
        still equals it; otherwise :class:`TransactionStatusConflictError`.
        """
        if status not in TRANSACTION_STATUSES:
            raise ValidationError(f"unknown transaction status: {status}")
        current = await self.require(transaction_id)
        model = await self.repository.update_status(
            transaction_id,
            status=status,
            note=append_note(current.note, note, self.note_separator),
            expected_status=expected_status,
        )
        if model is None:
            if expected_status is not None:
                raise TransactionStatusConflictError(
                    f"transaction {transaction_id} is {current.status}, expected {expected_status}"
                )
            raise TransactionNotFoundError(f"transaction not found: {transaction_id}")
        return self._to_domain(model)

    async def list_for_account(
        self,
        account_id: str,
        *,
        status: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[TransactionRecord]:
        rows = await self.repository.list_for_account(account_id, status=status, limit=limit, offset=offset)
        return [self._to_domain(row) for row in rows]

    async def list_all(self, *, status: Optional[str] = None, limit: int = 50, offset: int = 0) -> list[TransactionRecord]:
        rows = await self.repository.list_all(status=status, limit=limit, offset=offset)
        records = []
        for model, username, email in rows:
            record = self._to_domain(model)
            record.owner_username = username
            record.owner_email = email
            records.append(record)
        return records

    async def delete(self, transaction_id: str) -> TransactionRecord:
        record = await self.require(transaction_id)
        await self.repository.delete(transaction_id)
        return record

    async def count_by_status(self, status: Optional[str] = None) -> int:
        return await self.repository.count_by_status(status)

    @staticmethod
    def _to_domain(model: TransactionModel) -> TransactionRecord:
        return TransactionRecord(
            id=model.id,
            account_id=model.account_id,
            amount_cents=model.amount_cents,
            currency=model.currency,
            type=model.type,
            name=model.name,
            category=model.category,
            status=model.status,
            note=model.note,
            transfer_id=model.transfer_id,
            counterparty_id=model.counterparty_id,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
