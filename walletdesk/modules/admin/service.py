"""Execution of typed admin commands."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from walletdesk.modules.accounts import Account, AccountService
from walletdesk.modules.audit import AuditLogService
from walletdesk.modules.common.exceptions import NotificationError, ValidationError
from walletdesk.modules.notifications import (
    NotificationDeliveryError,
    NotificationDispatcher,
    NotificationService,
    kinds,
)
from walletdesk.modules.settlement import SettlementReconciler, SettlementRequest
from walletdesk.modules.transactions import TransactionCreateInput, TransactionService
from walletdesk.modules.wallets import WalletService

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

logger = logging.getLogger(__name__)

Handler = Callable[[Any, Account], Awaitable[CommandResult]]


class AdminCommandService:
    """Runs admin commands on behalf of an explicit acting account.

    Every command commits its own unit of work together with an audit entry.
    Customer notifications are sent afterwards and are best effort.
    """

    def __init__(
        self,
        session: AsyncSession,
        *,
        reconciler: SettlementReconciler,
        transactions: TransactionService,
        wallets: WalletService,
        accounts: AccountService,
        audit: AuditLogService,
        notifier: NotificationDispatcher,
    ) -> None:
        self._session = session
        self._reconciler = reconciler
        self._transactions = transactions
        self._wallets = wallets
        self._accounts = accounts
        self._audit = audit
        self._notifier = notifier
        self._handlers: dict[type, Handler] = {
            SettleTransaction: self._settle_transaction,
            DeleteTransaction: self._delete_transaction,
            FreezeWallet: self._freeze_wallet,
            UnfreezeWallet: self._unfreeze_wallet,
            AdjustBalance: self._adjust_balance,
            VerifyAccount: self._verify_account,
        }

    @classmethod
    def with_session(
        cls,
        session: AsyncSession,
        notifier: Optional[NotificationDispatcher] = None,
    ) -> "AdminCommandService":
        notifier = notifier or NotificationService.with_session(session)
        return cls(
            session,
            reconciler=SettlementReconciler.with_session(session, notifier),
            transactions=TransactionService.with_session(session),
            wallets=WalletService.with_session(session),
            accounts=AccountService.with_session(session),
            audit=AuditLogService.with_session(session),
            notifier=notifier,
        )

    async def execute(self, command: AdminCommand, *, actor: Account) -> CommandResult:
        handler = self._handlers.get(type(command))
        if handler is None:
            raise TypeError(f"no handler registered for {type(command).__name__}")
        logger.info("Admin %s executing %s", actor.id, command.action)
        return await handler(command, actor)

    async def _settle_transaction(self, command: SettleTransaction, actor: Account) -> CommandResult:
        outcome = await self._reconciler.settle(
            SettlementRequest(
                transaction_id=command.transaction_id,
                target_status=command.target_status,
                reason_note=command.reason_note,
            ),
            actor=actor,
        )
        return CommandResult(
            action=command.action,
            target_id=outcome.transaction_id,
            data={
                "status": outcome.status,
                "run_id": outcome.run_id,
                "transfer_id": outcome.transfer_id,
                "match_strategy": outcome.match_strategy.value,
                "credited_account_id": outcome.credited_account_id,
                "replayed": outcome.replayed,
            },
        )

    async def _delete_transaction(self, command: DeleteTransaction, actor: Account) -> CommandResult:
        record = await self._transactions.delete(command.transaction_id)
        await self._audit.record(
            admin_id=actor.id,
            action=command.action,
            target_table="transactions",
            target_id=record.id,
            old_values={
                "account_id": record.account_id,
                "amount_cents": record.amount_cents,
                "type": record.type,
                "name": record.name,
                "status": record.status,
                "transfer_id": record.transfer_id,
            },
        )
        await self._session.commit()
        logger.info("Transaction %s deleted by %s", record.id, actor.id)
        return CommandResult(action=command.action, target_id=record.id)

    async def _freeze_wallet(self, command: FreezeWallet, actor: Account) -> CommandResult:
        return await self._set_frozen(command, actor, frozen=True)

    async def _unfreeze_wallet(self, command: UnfreezeWallet, actor: Account) -> CommandResult:
        return await self._set_frozen(command, actor, frozen=False)

    async def _set_frozen(self, command, actor: Account, *, frozen: bool) -> CommandResult:
        before = await self._wallets.get_wallet(command.account_id)
        after = await self._wallets.set_frozen(command.account_id, frozen)
        await self._audit.record(
            admin_id=actor.id,
            action=command.action,
            target_table="wallets",
            target_id=command.account_id,
            old_values={"is_frozen": before.is_frozen},
            new_values={"is_frozen": after.is_frozen, "reason": command.reason},
        )
        await self._session.commit()
        logger.info("Wallet %s %s by %s", command.account_id, "frozen" if frozen else "unfrozen", actor.id)

        if before.is_frozen != after.is_frozen:
            kind = kinds.WALLET_FROZEN if frozen else kinds.WALLET_UNFROZEN
            await self._notify(command.account_id, kind, {"reason": command.reason})
        return CommandResult(action=command.action, target_id=command.account_id, data={"is_frozen": after.is_frozen})

    async def _adjust_balance(self, command: AdjustBalance, actor: Account) -> CommandResult:
        if command.delta_cents == 0:
            raise ValidationError("adjustment must be non-zero")
        reason = (command.reason or "").strip()
        if not reason:
            raise ValidationError("adjustment reason is required")

        before = await self._wallets.get_wallet(command.account_id)
        amount = abs(command.delta_cents)
        if command.delta_cents > 0:
            after = await self._wallets.credit(command.account_id, amount)
        else:
            after = await self._wallets.debit(command.account_id, amount, allow_frozen=True)

        record = await self._transactions.record(
            TransactionCreateInput(
                account_id=command.account_id,
                amount_cents=amount,
                currency=after.currency,
                type="income" if command.delta_cents > 0 else "expense",
                name=f"Admin adjustment: {reason}",
                category="Adjustment",
                status="completed",
            )
        )
        await self._audit.record(
            admin_id=actor.id,
            action=command.action,
            target_table="wallets",
            target_id=command.account_id,
            old_values={"balance_cents": before.balance_cents},
            new_values={
                "balance_cents": after.balance_cents,
                "delta_cents": command.delta_cents,
                "reason": reason,
                "transaction_id": record.id,
            },
        )
        await self._session.commit()
        logger.info(
            "Balance of %s adjusted by %s cents (%s -> %s) by %s",
            command.account_id,
            command.delta_cents,
            before.balance_cents,
            after.balance_cents,
            actor.id,
        )

        await self._notify(
            command.account_id,
            kinds.BALANCE_ADJUSTED,
            {"amount_cents": command.delta_cents, "currency": after.currency, "reason": reason},
        )
        return CommandResult(
            action=command.action,
            target_id=command.account_id,
            data={"balance_cents": after.balance_cents, "transaction_id": record.id},
        )

    async def _verify_account(self, command: VerifyAccount, actor: Account) -> CommandResult:
        before = await self._accounts.require(command.account_id)
        after = await self._accounts.set_verified(command.account_id)
        await self._audit.record(
            admin_id=actor.id,
            action=command.action,
            target_table="accounts",
            target_id=command.account_id,
            old_values={"is_verified": before.is_verified},
            new_values={"is_verified": after.is_verified},
        )
        await self._session.commit()
        logger.info("Account %s verified by %s", command.account_id, actor.id)
        return CommandResult(action=command.action, target_id=command.account_id, data={"is_verified": after.is_verified})

    async def _notify(self, account_id: str, kind: str, payload: dict[str, Any]) -> None:
        account = await self._accounts.get_by_id(account_id)
        address = (account.contact_address if account else None) or account_id
        try:
            await self._notifier.send(address, kind, payload)
        except NotificationDeliveryError as exc:
            logger.warning("Notification %s to %s failed: %s", kind, address, exc)
        except NotificationError as exc:
            await self._session.rollback()
            logger.warning("Notification %s to %s failed: %s", kind, address, exc)
            return
        await self._session.commit()
