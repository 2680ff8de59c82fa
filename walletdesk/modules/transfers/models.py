"""Domain models for peer-to-peer transfer intents."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

TRANSFER_PENDING = "pending"
TRANSFER_COMPLETED = "completed"
TRANSFER_REJECTED = "rejected"
TRANSFER_TERMINAL_STATUSES = frozenset({TRANSFER_COMPLETED, TRANSFER_REJECTED})


@dataclass(slots=True)
class TransferIntent:
    id: str
    sender_id: str
    recipient_id: str
    amount_cents: int
    currency: str
    status: str
    description: Optional[str]
    created_at: Optional[datetime]
    settled_at: Optional[datetime]

    @property
    def is_pending(self) -> bool:
        return self.status == TRANSFER_PENDING


@dataclass(slots=True)
class SendMoneyResult:
    transfer: TransferIntent
    transaction_id: str
    sender_balance_cents: int
