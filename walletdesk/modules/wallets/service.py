"""Wallet domain service"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from walletdesk.core.config import get_settings
from walletdesk.db.models import Wallet as WalletModel
from walletdesk.modules.common.exceptions import ValidationError

from .exceptions import InsufficientFundsError, WalletFrozenError, WalletNotFoundError
from .models import WalletSnapshot
from .repository import WalletRepository

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class WalletService:
    repository: WalletRepository
    default_currency: str = "USD"

    @classmethod
    def with_session(cls, session: AsyncSession) -> "WalletService":
        from walletdesk.infrastructure.database.repositories.wallet_repository import SqlWalletRepository

        return cls(SqlWalletRepository(session), get_settings().default_currency)

    async def ensure_wallet(self, account_id: str, currency: Optional[str] = None) -> WalletSnapshot:
        wallet = await self.repository.get_wallet(account_id)
        if wallet is None:
            wallet = await self.repository.create_wallet(account_id, currency or self.default_currency)
            logger.info("Provisioned wallet for account %s", account_id)
        return self._to_snapshot(wallet)

    async def get_wallet(self, account_id: str) -> WalletSnapshot:
        wallet = await self.repository.get_wallet(account_id)
        if wallet is None:
            raise WalletNotFoundError(f"wallet not found for account {account_id}")
        return self._to_snapshot(wallet)

    async def credit(self, account_id: str, amount_cents: int) -> WalletSnapshot:
        if amount_cents <= 0:
            raise ValidationError("credit amount must be positive")
        if not await self.repository.apply_delta(account_id, amount_cents):
            raise WalletNotFoundError(f"wallet not found for account {account_id}")
        snapshot = await self.get_wallet(account_id)
        logger.info("Credited %s cents to %s, balance now %s", amount_cents, account_id, snapshot.balance_cents)
        return snapshot

    async def debit(self, account_id: str, amount_cents: int, *, allow_frozen: bool = False) -> WalletSnapshot:
        if amount_cents <= 0:
            raise ValidationError("debit amount must be positive")
        if not await self.repository.apply_delta(account_id, -amount_cents, allow_frozen=allow_frozen):
            # Work out which guard refused the update.
            current = await self.get_wallet(account_id)
            if current.is_frozen and not allow_frozen:
                raise WalletFrozenError(f"wallet {account_id} is frozen")
            raise InsufficientFundsError(
                f"insufficient funds: balance {current.balance_cents}, requested {amount_cents}"
            )
        snapshot = await self.get_wallet(account_id)
        logger.info("Debited %s cents from %s, balance now %s", amount_cents, account_id, snapshot.balance_cents)
        return snapshot

    async def set_frozen(self, account_id: str, frozen: bool) -> WalletSnapshot:
        wallet = await self.repository.set_frozen(account_id, frozen)
        if wallet is None:
            raise WalletNotFoundError(f"wallet not found for account {account_id}")
        return self._to_snapshot(wallet)

    async def total_balance(self) -> int:
        return await self.repository.total_balance()

    @staticmethod
    def _to_snapshot(model: WalletModel) -> WalletSnapshot:
        return WalletSnapshot(
            account_id=model.account_id,
            balance_cents=model.balance_cents,
            currency=model.currency,
            is_frozen=bool(model.is_frozen),
            updated_at=model.updated_at,
        )
