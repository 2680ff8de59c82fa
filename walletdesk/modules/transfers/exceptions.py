"""Transfer intent exceptions."""

from walletdesk.modules.common.exceptions import DomainError, NotFoundError, ValidationError


class TransferError(DomainError):
    """Base class for transfer errors."""


class TransferNotFoundError(TransferError, NotFoundError):
    """Transfer intent does not exist."""


class RecipientNotFoundError(TransferError, NotFoundError):
    """No active account matches the transfer recipient."""


class InvalidTransferError(TransferError, ValidationError):
    """Transfer request is not acceptable."""
