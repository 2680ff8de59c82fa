"""Wallet domain specific exceptions."""

from walletdesk.modules.common.exceptions import DomainError, NotFoundError, ValidationError


class WalletError(DomainError):
    """Base class for wallet errors."""


class WalletNotFoundError(WalletError, NotFoundError):
    """No wallet exists for the account."""


class InsufficientFundsError(WalletError, ValidationError):
    """Debit would take the balance below zero."""


class WalletFrozenError(WalletError, ValidationError):
    """Wallet is frozen and cannot be debited."""
