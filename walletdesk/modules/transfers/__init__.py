"""Transfer intent exports."""

from .exceptions import InvalidTransferError, RecipientNotFoundError, TransferError, TransferNotFoundError
from .models import (
    TRANSFER_COMPLETED,
    TRANSFER_PENDING,
    TRANSFER_REJECTED,
    SendMoneyResult,
    TransferIntent,
)
from .service import TransferService

__all__ = [
    "InvalidTransferError",
    "RecipientNotFoundError",
    "SendMoneyResult",
    "TRANSFER_COMPLETED",
    "TRANSFER_PENDING",
    "TRANSFER_REJECTED",
    "TransferError",
    "TransferIntent",
    "TransferNotFoundError",
    "TransferService",
]
