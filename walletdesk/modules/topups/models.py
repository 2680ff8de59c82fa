"""Domain model for wallet top-up orders."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

TOPUP_PENDING = "pending"
TOPUP_SUCCESS = "success"
TOPUP_FAILED = "failed"
TOPUP_DECISIONS = frozenset({"approve", "reject"})


@dataclass(slots=True)
class TopupOrder:
    id: str
    account_id: str
    amount_cents: int
    currency: str
    status: str
    payment_channel: Optional[str]
    reference_no: Optional[str]
    created_at: Optional[datetime]
    confirmed_at: Optional[datetime]

    @property
    def is_pending(self) -> bool:
        return self.status == TOPUP_PENDING
