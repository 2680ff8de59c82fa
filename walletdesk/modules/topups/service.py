"""Top-up domain service."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from walletdesk.db.models import WalletTopupOrder as TopupOrderModel
from walletdesk.modules.accounts import Account, AccountService
from walletdesk.modules.audit import AuditLogService
from walletdesk.modules.common.exceptions import NotificationError, ValidationError
from walletdesk.modules.notifications import (
    NotificationDeliveryError,
    NotificationDispatcher,
    NotificationService,
    kinds,
)
from walletdesk.modules.transactions import TransactionCreateInput, TransactionService
from walletdesk.modules.wallets import WalletService

from .exceptions import TopupAlreadyReviewedError, TopupNotFoundError
from .models import TOPUP_DECISIONS, TOPUP_FAILED, TOPUP_PENDING, TOPUP_SUCCESS, TopupOrder
from .repository import TopupOrderRepository

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TopupService:
    repository: TopupOrderRepository
    session: Optional[AsyncSession] = None
    wallets: Optional[WalletService] = None
    transactions: Optional[TransactionService] = None
    accounts: Optional[AccountService] = None
    audit: Optional[AuditLogService] = None
    notifier: Optional[NotificationDispatcher] = None

    @classmethod
    def with_session(
        cls,
        session: AsyncSession,
        notifier: Optional[NotificationDispatcher] = None,
    ) -> "TopupService":
        from walletdesk.infrastructure.database.repositories.topup_repository import SqlTopupRepository

        return cls(
            SqlTopupRepository(session),
            session=session,
            wallets=WalletService.with_session(session),
            transactions=TransactionService.with_session(session),
            accounts=AccountService.with_session(session),
            audit=AuditLogService.with_session(session),
            notifier=notifier or NotificationService.with_session(session),
        )

    async def create_order(
        self,
        *,
        account_id: str,
        amount_cents: int,
        currency: str = "USD",
        payment_channel: str | None = None,
        reference_no: str | None = None,
    ) -> TopupOrder:
        if amount_cents <= 0:
            raise ValidationError("top-up amount must be positive")
        order = await self.repository.create(
            account_id=account_id,
            amount_cents=amount_cents,
            currency=currency,
            payment_channel=payment_channel,
            reference_no=reference_no,
        )
        logger.info("Top-up %s requested by %s for %s cents", order.id, account_id, amount_cents)
        return self._to_domain(order)

    async def review(self, order_id: str, decision: str, *, actor: Account) -> TopupOrder:
        """Approve or reject a pending top-up and commit the result.

        Approval credits the wallet and books a completed ``Top-Up`` income
        record. The customer is notified after the commit; a failed
        notification is logged and otherwise ignored.
        """
        if decision not in TOPUP_DECISIONS:
            raise ValidationError(f"decision must be one of {sorted(TOPUP_DECISIONS)}, got {decision!r}")
        order = await self.get_order(order_id)
        if order is None:
            raise TopupNotFoundError(f"top-up order not found: {order_id}")
        if not order.is_pending:
            raise TopupAlreadyReviewedError(f"top-up order {order_id} is already {order.status}")

        status = TOPUP_SUCCESS if decision == "approve" else TOPUP_FAILED
        if not await self.repository.resolve(order_id, status=status, confirmed_at=datetime.now(timezone.utc)):
            raise TopupAlreadyReviewedError(f"top-up order {order_id} is no longer pending")

        new_values = {"status": status}
        if status == TOPUP_SUCCESS:
            await self.wallets.ensure_wallet(order.account_id, order.currency)
            wallet = await self.wallets.credit(order.account_id, order.amount_cents)
            record = await self.transactions.record(
                TransactionCreateInput(
                    account_id=order.account_id,
                    amount_cents=order.amount_cents,
                    currency=order.currency,
                    type="income",
                    name="Wallet top-up",
                    category="Top-Up",
                    status="completed",
                    note=order.reference_no,
                )
            )
            new_values.update(balance_cents=wallet.balance_cents, transaction_id=record.id)

        await self.audit.record(
            admin_id=actor.id,
            action=f"{decision}_topup",
            target_table="wallet_topup_orders",
            target_id=order_id,
            old_values={"status": TOPUP_PENDING},
            new_values=new_values,
        )
        await self.session.commit()
        logger.info("Top-up %s %s by %s", order_id, status, actor.id)

        await self._notify(order, kinds.TOPUP_APPROVED if status == TOPUP_SUCCESS else kinds.TOPUP_REJECTED)
        return await self.get_order(order_id)

    async def get_order(self, order_id: str) -> TopupOrder | None:
        order = await self.repository.get_order(order_id)
        return self._to_domain(order) if order else None

    async def list_orders(self, account_id: str, limit: int = 20, offset: int = 0, status: str | None = None) -> list[TopupOrder]:
        rows = await self.repository.list_orders(account_id, limit, offset, status)
        return [self._to_domain(row) for row in rows]

    async def list_orders_admin(self, status: str | None = None, limit: int = 20, offset: int = 0) -> list[TopupOrder]:
        rows = await self.repository.list_orders_all(status=status, limit=limit, offset=offset)
        return [self._to_domain(row) for row in rows]

    async def count_pending(self) -> int:
        return await self.repository.count_by_status(TOPUP_PENDING)

    async def _notify(self, order: TopupOrder, kind: str) -> None:
        account = await self.accounts.get_by_id(order.account_id)
        address = (account.contact_address if account else None) or order.account_id
        try:
            await self.notifier.send(
                address,
                kind,
                {"topup_id": order.id, "amount_cents": order.amount_cents, "currency": order.currency},
            )
        except NotificationDeliveryError as exc:
            logger.warning("Top-up %s notification failed: %s", order.id, exc)
        except NotificationError as exc:
            await self.session.rollback()
            logger.warning("Top-up %s notification failed: %s", order.id, exc)
            return
        await self.session.commit()

    @staticmethod
    def _to_domain(model: TopupOrderModel) -> TopupOrder:
        return TopupOrder(
            id=model.id,
            account_id=model.account_id,
            amount_cents=model.amount_cents,
            currency=model.currency,
            status=model.status,
            payment_channel=model.payment_channel,
            reference_no=model.reference_no,
            created_at=model.created_at,
            confirmed_at=model.confirmed_at,
        )
