"""Wallet domain exports"""

from .exceptions import InsufficientFundsError, WalletError, WalletFrozenError, WalletNotFoundError
from .models import WalletSnapshot
from .service import WalletService

__all__ = [
    "InsufficientFundsError",
    "WalletError",
    "WalletFrozenError",
    "WalletNotFoundError",
    "WalletSnapshot",
    "WalletService",
]
