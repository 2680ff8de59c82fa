"""Transaction record exceptions."""

from walletdesk.modules.common.exceptions import DomainError, NotFoundError, StoreWriteError, ValidationError


class TransactionError(DomainError):
    """Base class for transaction record errors."""


class TransactionNotFoundError(TransactionError, NotFoundError):
    """Transaction record does not exist."""


class InvalidTransitionError(TransactionError, ValidationError):
    """Requested status change is not allowed from the current status."""


class TransactionStatusConflictError(TransactionError, StoreWriteError):
    """Transaction status changed after it was read."""
