"""Settlement saga states, requests and outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

SETTLEMENT_TARGETS = frozenset({"completed", "rejected"})


class SettlementState(str, Enum):
    INITIATED = "initiated"
    TRANSFER_MATCHED = "transfer_matched"
    FUNDS_MOVED = "funds_moved"
    NOTIFIED = "notified"
    DONE = "done"
    FAILED = "failed_needs_reconciliation"


ALLOWED_TRANSITIONS: dict[SettlementState, frozenset[SettlementState]] = {
    SettlementState.INITIATED: frozenset(
        {SettlementState.TRANSFER_MATCHED, SettlementState.DONE, SettlementState.FAILED}
    ),
    SettlementState.TRANSFER_MATCHED: frozenset({SettlementState.FUNDS_MOVED, SettlementState.FAILED}),
    SettlementState.FUNDS_MOVED: frozenset({SettlementState.NOTIFIED, SettlementState.DONE}),
    SettlementState.NOTIFIED: frozenset({SettlementState.DONE}),
    SettlementState.DONE: frozenset(),
    SettlementState.FAILED: frozenset(),
}


def can_transition(current: SettlementState, target: SettlementState) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


class MatchStrategy(str, Enum):
    LINKED = "linked"
    AMOUNT = "amount"
    NONE = "none"


@dataclass(slots=True)
class SettlementRequest:
    transaction_id: str
    target_status: str
    reason_note: Optional[str] = None


@dataclass(slots=True)
class SettlementOutcome:
    transaction_id: str
    status: str
    run_id: Optional[str]
    transfer_id: Optional[str] = None
    match_strategy: MatchStrategy = MatchStrategy.NONE
    credited_account_id: Optional[str] = None
    amount_cents: int = 0
    notified: bool = False
    replayed: bool = False


@dataclass(slots=True)
class SettlementEventRecord:
    from_state: Optional[str]
    to_state: str
    detail: Optional[str]
    created_at: Optional[datetime]


@dataclass(slots=True)
class SettlementRunRecord:
    id: str
    transaction_id: str
    target_status: str
    state: str
    transfer_id: Optional[str]
    match_strategy: Optional[str]
    actor_id: Optional[str]
    error: Optional[str]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
    events: list[SettlementEventRecord] = field(default_factory=list)
