"""Typed admin commands.

Each privileged operation is its own immutable command type carrying exactly
the fields it needs. :class:`~walletdesk.modules.admin.service.AdminCommandService`
dispatches on the command's type.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Optional, Union


@dataclass(frozen=True, slots=True)
class SettleTransaction:
    action: ClassVar[str] = "settle_transaction"

    transaction_id: str
    target_status: str
    reason_note: Optional[str] = None


@dataclass(frozen=True, slots=True)
class DeleteTransaction:
    action: ClassVar[str] = "delete_transaction"

    transaction_id: str


@dataclass(frozen=True, slots=True)
class FreezeWallet:
    action: ClassVar[str] = "freeze_wallet"

    account_id: str
    reason: Optional[str] = None


@dataclass(frozen=True, slots=True)
class UnfreezeWallet:
    action: ClassVar[str] = "unfreeze_wallet"

    account_id: str
    reason: Optional[str] = None


@dataclass(frozen=True, slots=True)
class AdjustBalance:
    action: ClassVar[str] = "adjust_balance"

    account_id: str
    delta_cents: int
    reason: str


@dataclass(frozen=True, slots=True)
class VerifyAccount:
    action: ClassVar[str] = "verify_account"

    account_id: str


AdminCommand = Union[
    SettleTransaction,
    DeleteTransaction,
    FreezeWallet,
    UnfreezeWallet,
    AdjustBalance,
    VerifyAccount,
]


@dataclass(slots=True)
class CommandResult:
    action: str
    target_id: str
    data: dict[str, Any] = field(default_factory=dict)
