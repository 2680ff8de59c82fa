"""Transaction settlement exports."""

from .exceptions import SettlementError, SettlementRunNotFoundError, SettlementStateError, TransferClaimError
from .models import (
    SETTLEMENT_TARGETS,
    MatchStrategy,
    SettlementEventRecord,
    SettlementOutcome,
    SettlementRequest,
    SettlementRunRecord,
    SettlementState,
    can_transition,
)
from .service import SettlementReconciler

__all__ = [
    "MatchStrategy",
    "SETTLEMENT_TARGETS",
    "SettlementError",
    "SettlementEventRecord",
    "SettlementOutcome",
    "SettlementReconciler",
    "SettlementRequest",
    "SettlementRunNotFoundError",
    "SettlementRunRecord",
    "SettlementState",
    "SettlementStateError",
    "TransferClaimError",
    "can_transition",
]
