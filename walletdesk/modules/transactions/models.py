"""Domain models for user-facing transaction records."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

TRANSACTION_TYPES = frozenset({"income", "expense", "transfer"})
TRANSACTION_STATUSES = frozenset({"pending", "completed", "failed", "cancelled", "rejected"})
SETTLED_STATUSES = frozenset({"completed", "rejected"})


@dataclass(slots=True)
class TransactionRecord:
    id: str
    account_id: str
    amount_cents: int
    currency: str
    type: str
    name: str
    category: Optional[str]
    status: str
    note: Optional[str]
    transfer_id: Optional[str]
    counterparty_id: Optional[str]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
    owner_username: Optional[str] = None
    owner_email: Optional[str] = None

    @property
    def is_settled(self) -> bool:
        return self.status in SETTLED_STATUSES


@dataclass(slots=True)
class TransactionCreateInput:
    account_id: str
    amount_cents: int
    type: str
    name: str
    currency: str = "USD"
    category: Optional[str] = None
    status: str = "pending"
    note: Optional[str] = None
    transfer_id: Optional[str] = None
    counterparty_id: Optional[str] = None
