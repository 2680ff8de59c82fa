"""Repository protocol for transfer intents."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, Sequence

from walletdesk.db.models import TransferIntent as TransferModel


class TransferRepository(Protocol):
    async def create(
        self,
        *,
        sender_id: str,
        recipient_id: str,
        amount_cents: int,
        currency: str,
        description: str | None,
    ) -> TransferModel:
        ...

    async def get(self, transfer_id: str) -> TransferModel | None:
        ...

    async def find_latest_pending(self, amount_cents: int) -> TransferModel | None:
        ...

    async def claim(self, transfer_id: str, *, status: str, settled_at: datetime) -> bool:
        ...

    async def list_for_account(self, account_id: str, limit: int, offset: int) -> Sequence[TransferModel]:
        ...

    async def count_by_status(self, status: str) -> int:
        ...
