"""Admin command exports."""

from .models import (
    AdjustBalance,
    AdminCommand,
    CommandResult,
    DeleteTransaction,
    FreezeWallet,
    SettleTransaction,
    UnfreezeWallet,
    VerifyAccount,
)
from .service import AdminCommandService

__all__ = [
    "AdjustBalance",
    "AdminCommand",
    "AdminCommandService",
    "CommandResult",
    "DeleteTransaction",
    "FreezeWallet",
    "SettleTransaction",
    "UnfreezeWallet",
    "VerifyAccount",
]
