"""Transaction settlement.

An administrator resolves a transaction record to ``completed`` or
``rejected``. When the record belongs to a peer-to-peer transfer the pending
:class:`~walletdesk.modules.transfers.TransferIntent` is claimed and the money
it holds is released: to the recipient on approval, back to the sender on
rejection.

The record's explicit ``transfer_id`` identifies the transfer. Records created
before that link existed are matched to the most recently created pending
transfer of exactly the same amount (``SETTLEMENT__AMOUNT_MATCHING``). When
several pending transfers share the amount the newest one wins; nothing ties
the two rows together beyond the amount, so concurrent equal-amount transfers
can be matched to the wrong record.

Every attempt is tracked as a settlement run whose state moves through
``initiated -> transfer_matched -> funds_moved -> notified -> done``. The
status write, the transfer claim, the wallet credit and the audit entry are
committed together; if any of them fails the unit is rolled back and the run
ends in ``failed_needs_reconciliation``. The status write only applies while
the record still has the status read when the run started, so two
settlements of one record cannot both move funds. The notification is sent
after the ledger commit and never fails the settlement.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from walletdesk.core.config import get_settings
from walletdesk.db.models import SettlementRun as SettlementRunModel
from walletdesk.modules.accounts import Account, AccountService
from walletdesk.modules.audit import AuditLogService
from walletdesk.modules.common.exceptions import DomainError, NotificationError, StoreWriteError, ValidationError
from walletdesk.modules.notifications import (
    NotificationDeliveryError,
    NotificationDispatcher,
    NotificationService,
    kinds,
)
from walletdesk.modules.transactions import InvalidTransitionError, TransactionRecord, TransactionService
from walletdesk.modules.transfers import TransferIntent, TransferNotFoundError, TransferService
from walletdesk.modules.wallets import WalletService

from .exceptions import SettlementRunNotFoundError, SettlementStateError, TransferClaimError
from .models import (
    SETTLEMENT_TARGETS,
    MatchStrategy,
    SettlementEventRecord,
    SettlementOutcome,
    SettlementRequest,
    SettlementRunRecord,
    SettlementState,
    can_transition,
)
from .repository import SettlementRepository

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SettlementReconciler:
    session: AsyncSession
    runs: SettlementRepository
    transactions: TransactionService
    transfers: TransferService
    wallets: WalletService
    accounts: AccountService
    audit: AuditLogService
    notifier: NotificationDispatcher
    amount_matching: bool = True

    @classmethod
    def with_session(
        cls,
        session: AsyncSession,
        notifier: Optional[NotificationDispatcher] = None,
    ) -> "SettlementReconciler":
        from walletdesk.infrastructure.database.repositories.settlement_repository import SqlSettlementRepository

        return cls(
            session=session,
            runs=SqlSettlementRepository(session),
            transactions=TransactionService.with_session(session),
            transfers=TransferService.with_session(session),
            wallets=WalletService.with_session(session),
            accounts=AccountService.with_session(session),
            audit=AuditLogService.with_session(session),
            notifier=notifier or NotificationService.with_session(session),
            amount_matching=get_settings().settlement.amount_matching,
        )

    async def settle(self, request: SettlementRequest, *, actor: Account) -> SettlementOutcome:
        if not request.transaction_id:
            raise ValidationError("transaction id is required")
        if request.target_status not in SETTLEMENT_TARGETS:
            raise ValidationError(
                f"target status must be one of {sorted(SETTLEMENT_TARGETS)}, got {request.target_status!r}"
            )

        record = await self.transactions.require(request.transaction_id)
        if record.status == request.target_status:
            logger.info("Transaction %s already %s, nothing to settle", record.id, record.status)
            return SettlementOutcome(
                transaction_id=record.id,
                status=record.status,
                run_id=None,
                transfer_id=record.transfer_id,
                amount_cents=record.amount_cents,
                replayed=True,
            )
        if record.is_settled:
            raise InvalidTransitionError(
                f"transaction {record.id} is already {record.status}, cannot move to {request.target_status}"
            )

        run = await self.runs.create_run(
            transaction_id=record.id,
            target_status=request.target_status,
            actor_id=actor.id,
        )
        run_id = run.id
        await self.session.commit()
        logger.info(
            "Settlement run %s: %s -> %s requested by %s",
            run_id,
            record.id,
            request.target_status,
            actor.id,
        )

        try:
            outcome, transfer = await self._apply(run_id, record, request, actor)
            await self.session.commit()
        except (DomainError, SQLAlchemyError) as exc:
            await self.session.rollback()
            logger.error(
                "Settlement run %s for transaction %s failed, changes rolled back: %s",
                run_id,
                record.id,
                exc,
            )
            await self._mark_failed(run_id, exc)
            if isinstance(exc, DomainError):
                raise
            raise StoreWriteError(f"settlement of {record.id} failed: {exc.__class__.__name__}") from exc

        if transfer is not None:
            await self._notify(run_id, record, transfer, outcome)
        return outcome

    async def get_run(self, run_id: str) -> SettlementRunRecord:
        model = await self.runs.get_run(run_id)
        if model is None:
            raise SettlementRunNotFoundError(f"settlement run not found: {run_id}")
        return self._to_record(model)

    async def list_runs(
        self,
        *,
        state: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[SettlementRunRecord]:
        rows = await self.runs.list_runs(state=state, limit=limit, offset=offset)
        return [self._to_record(row) for row in rows]

    async def count_failed(self) -> int:
        return await self.runs.count_by_state(SettlementState.FAILED.value)

    async def _apply(
        self,
        run_id: str,
        record: TransactionRecord,
        request: SettlementRequest,
        actor: Account,
    ) -> tuple[SettlementOutcome, Optional[TransferIntent]]:
        target = request.target_status
        await self.transactions.update_status(
            record.id,
            target,
            note=request.reason_note,
            expected_status=record.status,
        )

        transfer, strategy = await self._match_transfer(record)
        if transfer is None:
            await self._advance(
                run_id,
                SettlementState.INITIATED,
                SettlementState.DONE,
                detail="no pending transfer matched",
                match_strategy=strategy.value,
            )
            await self._audit(actor, record, target, transfer=None, beneficiary=None)
            logger.info("Transaction %s settled as %s without ledger effect", record.id, target)
            outcome = SettlementOutcome(
                transaction_id=record.id,
                status=target,
                run_id=run_id,
                match_strategy=strategy,
                amount_cents=record.amount_cents,
            )
            return outcome, None

        if not await self.transfers.claim(transfer.id, target):
            raise TransferClaimError(f"transfer {transfer.id} is no longer pending")
        await self._advance(
            run_id,
            SettlementState.INITIATED,
            SettlementState.TRANSFER_MATCHED,
            detail=f"{strategy.value} match on transfer {transfer.id}",
            transfer_id=transfer.id,
            match_strategy=strategy.value,
        )

        # Approval releases the money to the recipient, rejection refunds the sender.
        beneficiary = transfer.recipient_id if target == "completed" else transfer.sender_id
        wallet = await self.wallets.credit(beneficiary, record.amount_cents)
        await self._advance(
            run_id,
            SettlementState.TRANSFER_MATCHED,
            SettlementState.FUNDS_MOVED,
            detail=f"credited {record.amount_cents} to {beneficiary}, balance {wallet.balance_cents}",
        )
        await self._audit(actor, record, target, transfer=transfer, beneficiary=beneficiary)

        logger.info(
            "Transaction %s settled as %s: transfer %s, %s cents to %s",
            record.id,
            target,
            transfer.id,
            record.amount_cents,
            beneficiary,
        )
        outcome = SettlementOutcome(
            transaction_id=record.id,
            status=target,
            run_id=run_id,
            transfer_id=transfer.id,
            match_strategy=strategy,
            credited_account_id=beneficiary,
            amount_cents=record.amount_cents,
        )
        return outcome, transfer

    async def _match_transfer(self, record: TransactionRecord) -> tuple[Optional[TransferIntent], MatchStrategy]:
        if record.transfer_id:
            transfer = await self.transfers.get(record.transfer_id)
            if transfer is None:
                raise TransferNotFoundError(f"linked transfer not found: {record.transfer_id}")
            if not transfer.is_pending:
                logger.warning(
                    "Transfer %s linked to %s is already %s",
                    transfer.id,
                    record.id,
                    transfer.status,
                )
                return None, MatchStrategy.NONE
            return transfer, MatchStrategy.LINKED

        if not self.amount_matching:
            return None, MatchStrategy.NONE
        transfer = await self.transfers.find_latest_pending(record.amount_cents)
        if transfer is None:
            return None, MatchStrategy.NONE
        return transfer, MatchStrategy.AMOUNT

    async def _advance(
        self,
        run_id: str,
        current: SettlementState,
        target: SettlementState,
        *,
        detail: Optional[str] = None,
        **fields,
    ) -> None:
        if not can_transition(current, target):
            raise SettlementStateError(f"illegal settlement transition {current.value} -> {target.value}")
        moved = await self.runs.transition(
            run_id,
            from_state=current.value,
            to_state=target.value,
            detail=detail,
            **fields,
        )
        if not moved:
            raise SettlementStateError(f"settlement run {run_id} is not {current.value}")

    async def _audit(
        self,
        actor: Account,
        record: TransactionRecord,
        target: str,
        *,
        transfer: Optional[TransferIntent],
        beneficiary: Optional[str],
    ) -> None:
        old_values = {"status": record.status}
        new_values = {"status": target}
        if transfer is not None:
            old_values["transfer_status"] = transfer.status
            new_values.update(
                transfer_id=transfer.id,
                transfer_status=target,
                credited_account_id=beneficiary,
                amount_cents=record.amount_cents,
            )
        await self.audit.record(
            admin_id=actor.id,
            action="settle_transaction",
            target_table="transactions",
            target_id=record.id,
            old_values=old_values,
            new_values=new_values,
        )

    async def _mark_failed(self, run_id: str, exc: Exception) -> None:
        try:
            await self._advance(
                run_id,
                SettlementState.INITIATED,
                SettlementState.FAILED,
                detail="ledger changes rolled back",
                error=str(exc) or exc.__class__.__name__,
            )
            await self.session.commit()
        except (DomainError, SQLAlchemyError) as mark_exc:
            await self.session.rollback()
            logger.critical("Settlement run %s could not be marked failed: %s", run_id, mark_exc)

    async def _notify(
        self,
        run_id: str,
        record: TransactionRecord,
        transfer: TransferIntent,
        outcome: SettlementOutcome,
    ) -> None:
        kind = kinds.TRANSACTION_APPROVED if outcome.status == "completed" else kinds.TRANSACTION_REJECTED
        address = await self._contact_address(transfer.sender_id) or transfer.sender_id
        payload = {
            "transaction_id": record.id,
            "transfer_id": transfer.id,
            "status": outcome.status,
            "amount_cents": record.amount_cents,
            "currency": record.currency,
        }
        detail = None
        try:
            await self.notifier.send(address, kind, payload)
            outcome.notified = True
        except NotificationDeliveryError as exc:
            # The failed notification row is committed with the run below.
            detail = f"notification failed: {exc}"
            logger.warning("Settlement run %s: %s", run_id, detail)
        except NotificationError as exc:
            await self.session.rollback()
            detail = f"notification failed: {exc}"
            logger.warning("Settlement run %s: %s", run_id, detail)

        try:
            if outcome.notified:
                await self._advance(
                    run_id,
                    SettlementState.FUNDS_MOVED,
                    SettlementState.NOTIFIED,
                    detail=f"{kind} sent to {address}",
                )
                await self._advance(run_id, SettlementState.NOTIFIED, SettlementState.DONE)
            else:
                await self._advance(run_id, SettlementState.FUNDS_MOVED, SettlementState.DONE, detail=detail)
            await self.session.commit()
        except (DomainError, SQLAlchemyError) as exc:
            # Funds are already committed; the run stays at funds_moved for follow-up.
            await self.session.rollback()
            logger.error("Settlement run %s bookkeeping failed after funds moved: %s", run_id, exc)

    async def _contact_address(self, account_id: str) -> Optional[str]:
        try:
            account = await self.accounts.get_by_id(account_id)
        except SQLAlchemyError as exc:
            logger.warning("Contact lookup for %s failed: %s", account_id, exc)
            return None
        return account.contact_address if account else None

    @staticmethod
    def _to_record(model: SettlementRunModel) -> SettlementRunRecord:
        return SettlementRunRecord(
            id=model.id,
            transaction_id=model.transaction_id,
            target_status=model.target_status,
            state=model.state,
            transfer_id=model.transfer_id,
            match_strategy=model.match_strategy,
            actor_id=model.actor_id,
            error=model.error,
            created_at=model.created_at,
            updated_at=model.updated_at,
            events=[
                SettlementEventRecord(
                    from_state=event.from_state,
                    to_state=event.to_state,
                    detail=event.detail,
                    created_at=event.created_at,
                )
                for event in model.events
            ],
        )
