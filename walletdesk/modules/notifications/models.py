"""Notification kinds, message templates and the dispatched record."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

TRANSACTION_APPROVED = "transaction_approved"
TRANSACTION_REJECTED = "transaction_rejected"
TOPUP_APPROVED = "topup_approved"
TOPUP_REJECTED = "topup_rejected"
WALLET_FROZEN = "wallet_frozen"
WALLET_UNFROZEN = "wallet_unfrozen"
BALANCE_ADJUSTED = "balance_adjusted"

_TEMPLATES = {
    TRANSACTION_APPROVED: "Your transaction of {amount} has been approved and completed successfully.",
    TRANSACTION_REJECTED: (
        "Your transaction of {amount} has been rejected by admin. "
        "The money has been refunded to your wallet."
    ),
    TOPUP_APPROVED: "Your top-up of {amount} has been approved and added to your wallet.",
    TOPUP_REJECTED: "Your top-up of {amount} was rejected.",
    WALLET_FROZEN: "Your wallet has been frozen. Contact support for details.",
    WALLET_UNFROZEN: "Your wallet has been unfrozen.",
    BALANCE_ADJUSTED: "Your wallet balance was adjusted by {amount}.",
}

NOTIFICATION_KINDS = frozenset(_TEMPLATES)


def format_amount(amount_cents: int, currency: str = "USD") -> str:
    sign = "-" if amount_cents < 0 else ""
    units, cents = divmod(abs(amount_cents), 100)
    symbol = "$" if currency.upper() == "USD" else f"{currency.upper()} "
    return f"{sign}{symbol}{units}.{cents:02d}"


def render_message(kind: str, payload: dict[str, Any]) -> str:
    template = _TEMPLATES.get(kind)
    if template is None:
        return payload.get("message") or kind
    amount = payload.get("amount_cents")
    rendered_amount = format_amount(amount, payload.get("currency", "USD")) if amount is not None else ""
    return template.format(amount=rendered_amount)


@dataclass(slots=True)
class Notification:
    id: str
    recipient: str
    kind: str
    status: str
    message: Optional[str]
    payload: dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None
