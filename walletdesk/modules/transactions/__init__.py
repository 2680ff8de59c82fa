"""Transaction record exports."""

from .exceptions import (
    InvalidTransitionError,
    TransactionError,
    TransactionNotFoundError,
    TransactionStatusConflictError,
)
from .models import SETTLED_STATUSES, TransactionCreateInput, TransactionRecord
from .service import TransactionService, append_note

__all__ = [
    "InvalidTransitionError",
    "SETTLED_STATUSES",
    "TransactionCreateInput",
    "TransactionError",
    "TransactionNotFoundError",
    "TransactionRecord",
    "TransactionStatusConflictError",
    "TransactionService",
    "append_note",
]
