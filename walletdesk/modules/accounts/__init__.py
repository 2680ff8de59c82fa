"""Account domain exports."""

from .exceptions import AccountAlreadyExistsError, AccountError, AccountNotFoundError
from .models import Account, AccountCreateInput, AccountUpdateInput, UNSET
from .service import AccountService

__all__ = [
    "Account",
    "AccountAlreadyExistsError",
    "AccountCreateInput",
    "AccountError",
    "AccountNotFoundError",
    "AccountService",
    "AccountUpdateInput",
    "UNSET",
]
