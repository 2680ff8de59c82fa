"""Peer-to-peer transfer service.

A transfer debits the sender immediately and parks the money in a pending
:class:`TransferIntent`. The recipient is only credited when an administrator
settles the sender's transaction record (see ``walletdesk.modules.settlement``);
a rejection refunds the sender.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from walletdesk.db.models import TransferIntent as TransferModel
from walletdesk.modules.accounts import Account, AccountService
from walletdesk.modules.transactions import TransactionCreateInput, TransactionService
from walletdesk.modules.wallets import WalletService

from .exceptions import InvalidTransferError, RecipientNotFoundError, TransferNotFoundError
from .models import TRANSFER_PENDING, TRANSFER_TERMINAL_STATUSES, SendMoneyResult, TransferIntent
from .repository import TransferRepository

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TransferService:
    repository: TransferRepository
    accounts: Optional[AccountService] = None
    wallets: Optional[WalletService] = None
    transactions: Optional[TransactionService] = None

    @classmethod
    def with_session(cls, session: AsyncSession) -> "TransferService":
        from walletdesk.infrastructure.database.repositories.transfer_repository import SqlTransferRepository

        return cls(
            SqlTransferRepository(session),
            accounts=AccountService.with_session(session),
            wallets=WalletService.with_session(session),
            transactions=TransactionService.with_session(session),
        )

    async def send_money(
        self,
        sender: Account,
        recipient_handle: str,
        amount_cents: int,
        note: Optional[str] = None,
    ) -> SendMoneyResult:
        if amount_cents <= 0:
            raise InvalidTransferError("transfer amount must be positive")
        recipient = await self.accounts.find_recipient(recipient_handle)
        if recipient is None or not recipient.is_active:
            raise RecipientNotFoundError(f"recipient not found: {recipient_handle}")
        if recipient.id == sender.id:
            raise InvalidTransferError("cannot send money to yourself")

        await self.wallets.ensure_wallet(recipient.id)
        sender_wallet = await self.wallets.debit(sender.id, amount_cents)

        model = await self.repository.create(
            sender_id=sender.id,
            recipient_id=recipient.id,
            amount_cents=amount_cents,
            currency=sender_wallet.currency,
            description=note,
        )
        record = await self.transactions.record(
            TransactionCreateInput(
                account_id=sender.id,
                amount_cents=amount_cents,
                currency=sender_wallet.currency,
                type="transfer",
                name=f"Money sent to {recipient.username}",
                category="Transfer",
                status="pending",
                note=note,
                transfer_id=model.id,
                counterparty_id=recipient.id,
            )
        )
        logger.info(
            "Transfer %s created: %s -> %s, %s cents pending settlement",
            model.id,
            sender.id,
            recipient.id,
            amount_cents,
        )
        return SendMoneyResult(
            transfer=self._to_domain(model),
            transaction_id=record.id,
            sender_balance_cents=sender_wallet.balance_cents,
        )

    async def get(self, transfer_id: str) -> TransferIntent | None:
        model = await self.repository.get(transfer_id)
        return self._to_domain(model) if model else None

    async def require(self, transfer_id: str) -> TransferIntent:
        transfer = await self.get(transfer_id)
        if transfer is None:
            raise TransferNotFoundError(f"transfer not found: {transfer_id}")
        return transfer

    async def find_latest_pending(self, amount_cents: int) -> TransferIntent | None:
        model = await self.repository.find_latest_pending(amount_cents)
        return self._to_domain(model) if model else None

    async def claim(self, transfer_id: str, status: str) -> bool:
        """Move a pending transfer to a terminal status.

        Returns ``False`` when the transfer was no longer pending.
        """
        if status not in TRANSFER_TERMINAL_STATUSES:
            raise InvalidTransferError(f"not a terminal transfer status: {status}")
        return await self.repository.claim(transfer_id, status=status, settled_at=datetime.now(timezone.utc))

    async def list_for_account(self, account_id: str, limit: int = 20, offset: int = 0) -> list[TransferIntent]:
        rows = await self.repository.list_for_account(account_id, limit, offset)
        return [self._to_domain(row) for row in rows]

    async def count_pending(self) -> int:
        return await self.repository.count_by_status(TRANSFER_PENDING)

    @staticmethod
    def _to_domain(model: TransferModel) -> TransferIntent:
        return TransferIntent(
            id=model.id,
            sender_id=model.sender_id,
            recipient_id=model.recipient_id,
            amount_cents=model.amount_cents,
            currency=model.currency,
            status=model.status,
            description=model.description,
            created_at=model.created_at,
            settled_at=model.settled_at,
        )
