"""Administrative endpoints: settlement, admin commands, top-up review, audit trail and accounts."""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from walletdesk.core.security import get_current_admin, get_super_admin
from walletdesk.interfaces.http.deps import get_db_session
from walletdesk.modules.accounts import (
    Account as AccountDomain,
    AccountCreateInput,
    AccountService,
    AccountUpdateInput,
    UNSET,
)
from walletdesk.modules.admin import (
    AdjustBalance,
    AdminCommand,
    AdminCommandService,
    DeleteTransaction,
    FreezeWallet,
    SettleTransaction,
    UnfreezeWallet,
    VerifyAccount,
)
from walletdesk.modules.audit import AuditLogService
from walletdesk.modules.settlement import SettlementOutcome, SettlementReconciler, SettlementRequest
from walletdesk.modules.topups import TopupService
from walletdesk.modules.transactions import TransactionService
from walletdesk.modules.transfers import TransferService
from walletdesk.modules.wallets import WalletService
from walletdesk.schemas import (
    AccountCreate,
    AccountResponse,
    AccountUpdate,
    ActivityLogResponse,
    AdjustBalanceCommand,
    AdminCommandPayload,
    AdminCommandRequest,
    AdminCommandResponse,
    AdminStatsResponse,
    DeleteTransactionCommand,
    FreezeWalletCommand,
    SettlementResponse,
    SettlementRunResponse,
    SettleTransactionCommand,
    SettleTransactionRequest,
    SuccessResponse,
    TopupReviewRequest,
    TransactionListResponse,
    TransactionResponse,
    UnfreezeWalletCommand,
    VerifyAccountCommand,
    WalletResponse,
    WalletTopupResponse,
)

router = APIRouter()


@router.get("/me", response_model=AccountResponse)
async def current_admin(admin: AccountDomain = Depends(get_current_admin)):
    return AccountResponse.model_validate(admin)


@router.get("/transactions", response_model=TransactionListResponse)
async def admin_list_transactions(
    status_filter: Optional[str] = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    _: AccountDomain = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> TransactionListResponse:
    service = TransactionService.with_session(db)
    records = await service.list_all(status=status_filter, limit=limit, offset=offset)
    total = await service.count_by_status(status_filter)
    return TransactionListResponse(
        total=total,
        transactions=[TransactionResponse.model_validate(record) for record in records],
    )


@router.post("/transactions/settle", response_model=SettlementResponse)
async def admin_settle_transaction(
    payload: SettleTransactionRequest,
    admin: AccountDomain = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> SettlementResponse:
    reconciler = SettlementReconciler.with_session(db)
    outcome = await reconciler.settle(
        SettlementRequest(
            transaction_id=payload.transaction_id,
            target_status=payload.target_status,
            reason_note=payload.reason_note,
        ),
        actor=admin,
    )
    return _settlement_to_response(outcome)


@router.delete("/transactions/{transaction_id}", response_model=SuccessResponse)
async def admin_delete_transaction(
    transaction_id: str,
    admin: AccountDomain = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse:
    service = AdminCommandService.with_session(db)
    result = await service.execute(DeleteTransaction(transaction_id=transaction_id), actor=admin)
    return SuccessResponse(message="Transaction deleted", data={"transaction_id": result.target_id})


@router.post("/commands", response_model=AdminCommandResponse)
async def admin_execute_command(
    payload: AdminCommandRequest,
    admin: AccountDomain = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> AdminCommandResponse:
    service = AdminCommandService.with_session(db)
    result = await service.execute(_to_command(payload.root), actor=admin)
    return AdminCommandResponse(action=result.action, target_id=result.target_id, data=result.data)


@router.get("/wallets/{account_id}", response_model=WalletResponse)
async def admin_get_wallet(
    account_id: str,
    _: AccountDomain = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> WalletResponse:
    snapshot = await WalletService.with_session(db).get_wallet(account_id)
    return WalletResponse.model_validate(snapshot)


@router.get("/topups", response_model=List[WalletTopupResponse])
async def admin_list_topups(
    status_filter: Optional[str] = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    _: AccountDomain = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> List[WalletTopupResponse]:
    orders = await TopupService.with_session(db).list_orders_admin(status=status_filter, limit=limit, offset=offset)
    return [WalletTopupResponse.model_validate(order) for order in orders]


@router.post("/topups/{order_id}/review", response_model=WalletTopupResponse)
async def admin_review_topup(
    order_id: str,
    payload: TopupReviewRequest,
    admin: AccountDomain = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> WalletTopupResponse:
    order = await TopupService.with_session(db).review(order_id, payload.decision, actor=admin)
    return WalletTopupResponse.model_validate(order)


@router.get("/activity-logs", response_model=List[ActivityLogResponse])
async def admin_activity_logs(
    action: Optional[str] = None,
    target_id: Optional[str] = None,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    _: AccountDomain = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> List[ActivityLogResponse]:
    entries = await AuditLogService.with_session(db).list_entries(
        action=action,
        target_id=target_id,
        limit=limit,
        offset=offset,
    )
    return [ActivityLogResponse.model_validate(entry) for entry in entries]


@router.get("/settlements", response_model=List[SettlementRunResponse])
async def admin_list_settlements(
    state: Optional[str] = None,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    _: AccountDomain = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> List[SettlementRunResponse]:
    runs = await SettlementReconciler.with_session(db).list_runs(state=state, limit=limit, offset=offset)
    return [SettlementRunResponse.model_validate(run) for run in runs]


@router.get("/settlements/{run_id}", response_model=SettlementRunResponse)
async def admin_get_settlement(
    run_id: str,
    _: AccountDomain = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> SettlementRunResponse:
    run = await SettlementReconciler.with_session(db).get_run(run_id)
    return SettlementRunResponse.model_validate(run)


@router.get("/stats", response_model=AdminStatsResponse)
async def get_admin_stats(
    _: AccountDomain = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> AdminStatsResponse:
    transactions = TransactionService.with_session(db)
    return AdminStatsResponse(
        account_total=await AccountService.with_session(db).count_accounts(),
        pending_transactions=await transactions.count_by_status("pending"),
        completed_transactions=await transactions.count_by_status("completed"),
        rejected_transactions=await transactions.count_by_status("rejected"),
        pending_transfers=await TransferService.with_session(db).count_pending(),
        pending_topups=await TopupService.with_session(db).count_pending(),
        total_balance_cents=await WalletService.with_session(db).total_balance(),
        failed_settlements=await SettlementReconciler.with_session(db).count_failed(),
    )


@router.get("/accounts", response_model=List[AccountResponse])
async def list_accounts(
    _: AccountDomain = Depends(get_super_admin),
    db: AsyncSession = Depends(get_db_session),
):
    accounts = await AccountService.with_session(db).list_accounts()
    return [AccountResponse.model_validate(account) for account in accounts]


@router.post("/accounts", response_model=AccountResponse, status_code=201)
async def create_account(
    payload: AccountCreate,
    _: AccountDomain = Depends(get_super_admin),
    db: AsyncSession = Depends(get_db_session),
):
    account = await AccountService.with_session(db).create_account(
        AccountCreateInput(
            username=payload.username,
            password=payload.password,
            role=payload.role,
            email=payload.email,
        )
    )
    if not account.is_admin():
        await WalletService.with_session(db).ensure_wallet(account.id)
    await db.commit()
    return AccountResponse.model_validate(account)


@router.patch("/accounts/{account_id}", response_model=AccountResponse)
async def update_account(
    account_id: str,
    payload: AccountUpdate,
    _: AccountDomain = Depends(get_super_admin),
    db: AsyncSession = Depends(get_db_session),
):
    update_data = payload.model_dump(exclude_unset=True)
    update_input = AccountUpdateInput(
        email=update_data.get("email", UNSET),
        is_active=update_data.get("is_active", UNSET),
        role=update_data.get("role", UNSET),
        password=update_data.get("password", UNSET),
    )
    account = await AccountService.with_session(db).update_account(account_id, update_input)
    await db.commit()
    return AccountResponse.model_validate(account)


def _to_command(payload: AdminCommandPayload) -> AdminCommand:
    if isinstance(payload, SettleTransactionCommand):
        return SettleTransaction(
            transaction_id=payload.transaction_id,
            target_status=payload.target_status,
            reason_note=payload.reason_note,
        )
    if isinstance(payload, DeleteTransactionCommand):
        return DeleteTransaction(transaction_id=payload.transaction_id)
    if isinstance(payload, FreezeWalletCommand):
        return FreezeWallet(account_id=payload.account_id, reason=payload.reason)
    if isinstance(payload, UnfreezeWalletCommand):
        return UnfreezeWallet(account_id=payload.account_id, reason=payload.reason)
    if isinstance(payload, AdjustBalanceCommand):
        return AdjustBalance(account_id=payload.account_id, delta_cents=payload.delta_cents, reason=payload.reason)
    if isinstance(payload, VerifyAccountCommand):
        return VerifyAccount(account_id=payload.account_id)
    raise TypeError(f"unsupported admin command payload: {type(payload).__name__}")


def _settlement_to_response(outcome: SettlementOutcome) -> SettlementResponse:
    return SettlementResponse(
        transaction_id=outcome.transaction_id,
        status=outcome.status,
        run_id=outcome.run_id,
        transfer_id=outcome.transfer_id,
        match_strategy=outcome.match_strategy.value,
        credited_account_id=outcome.credited_account_id,
        amount_cents=outcome.amount_cents,
        notified=outcome.notified,
        replayed=outcome.replayed,
    )
