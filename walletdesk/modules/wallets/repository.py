"""Repository protocol for wallet operations."""

from __future__ import annotations

from typing import Protocol

from walletdesk.db.models import Wallet as WalletModel


class WalletRepository(Protocol):
    async def get_wallet(self, account_id: str) -> WalletModel | None:
        ...

    async def create_wallet(self, account_id: str, currency: str) -> WalletModel:
        ...

    async def apply_delta(self, account_id: str, delta_cents: int, *, allow_frozen: bool = True) -> bool:
        """Atomically add ``delta_cents``; ``False`` when no row qualified."""
        ...

    async def set_frozen(self, account_id: str, frozen: bool) -> WalletModel | None:
        ...

    async def total_balance(self) -> int:
        ...
