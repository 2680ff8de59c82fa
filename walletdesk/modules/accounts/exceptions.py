"""Account domain specific exceptions."""

from walletdesk.modules.common.exceptions import DomainError, NotFoundError, ValidationError


class AccountError(DomainError):
    """Base class for account domain errors."""


class AccountAlreadyExistsError(AccountError, ValidationError):
    """Raised when attempting to create an account with duplicate username or email."""


class AccountNotFoundError(AccountError, NotFoundError):
    """Raised when the requested account cannot be found."""
