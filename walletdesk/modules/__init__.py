"""Domain modules and shared exports."""

from . import accounts, admin, audit, common, notifications, settlement, topups, transactions, transfers, wallets

__all__ = [
    "accounts",
    "admin",
    "audit",
    "common",
    "notifications",
    "settlement",
    "topups",
    "transactions",
    "transfers",
    "wallets",
]
