"""Customer-facing endpoints: profile, wallet, transaction history, transfers and top-ups."""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from walletdesk.core.security import get_current_account
from walletdesk.interfaces.http.deps import get_db_session
from walletdesk.modules.accounts import Account as AccountDomain
from walletdesk.modules.topups import TopupService
from walletdesk.modules.transactions import TransactionService
from walletdesk.modules.transfers import TransferService
from walletdesk.modules.wallets import WalletService
from walletdesk.schemas import (
    AccountResponse,
    SendMoneyRequest,
    SendMoneyResponse,
    TransactionListResponse,
    TransactionResponse,
    TransferResponse,
    WalletResponse,
    WalletTopupRequest,
    WalletTopupResponse,
)

router = APIRouter()


async def get_current_customer(account: AccountDomain = Depends(get_current_account)) -> AccountDomain:
    """Reject admin accounts on customer endpoints."""
    if account.is_admin():
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not a customer account")
    return account


@router.get("/me", response_model=AccountResponse, summary="Current customer profile")
async def customer_profile(account: AccountDomain = Depends(get_current_customer)) -> AccountResponse:
    return AccountResponse.model_validate(account)


@router.get("/wallet", response_model=WalletResponse, summary="Wallet balance")
async def get_wallet(
    account: AccountDomain = Depends(get_current_customer),
    db: AsyncSession = Depends(get_db_session),
) -> WalletResponse:
    snapshot = await WalletService.with_session(db).ensure_wallet(account.id)
    await db.commit()
    return WalletResponse.model_validate(snapshot)


@router.get("/transactions", response_model=TransactionListResponse, summary="Own transaction history")
async def list_transactions(
    status_filter: Optional[str] = Query(None, alias="status"),
    limit: int = Query(20, ge=1, le=200),
    offset: int = Query(0, ge=0),
    account: AccountDomain = Depends(get_current_customer),
    db: AsyncSession = Depends(get_db_session),
) -> TransactionListResponse:
    records = await TransactionService.with_session(db).list_for_account(
        account.id,
        status=status_filter,
        limit=limit,
        offset=offset,
    )
    return TransactionListResponse(
        total=len(records),
        transactions=[TransactionResponse.model_validate(record) for record in records],
    )


@router.post(
    "/transfers",
    response_model=SendMoneyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Send money to another customer",
)
async def send_money(
    payload: SendMoneyRequest,
    account: AccountDomain = Depends(get_current_customer),
    db: AsyncSession = Depends(get_db_session),
) -> SendMoneyResponse:
    result = await TransferService.with_session(db).send_money(
        account,
        payload.recipient,
        payload.amount_cents,
        payload.note,
    )
    await db.commit()
    return SendMoneyResponse(
        transfer=TransferResponse.model_validate(result.transfer),
        transaction_id=result.transaction_id,
        balance_cents=result.sender_balance_cents,
    )


@router.get("/transfers", response_model=list[TransferResponse], summary="Transfers sent or received")
async def list_transfers(
    limit: int = Query(20, ge=1, le=200),
    offset: int = Query(0, ge=0),
    account: AccountDomain = Depends(get_current_customer),
    db: AsyncSession = Depends(get_db_session),
) -> list[TransferResponse]:
    transfers = await TransferService.with_session(db).list_for_account(account.id, limit, offset)
    return [TransferResponse.model_validate(transfer) for transfer in transfers]


@router.post(
    "/topups",
    response_model=WalletTopupResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Request a wallet top-up",
)
async def create_topup(
    payload: WalletTopupRequest,
    account: AccountDomain = Depends(get_current_customer),
    db: AsyncSession = Depends(get_db_session),
) -> WalletTopupResponse:
    wallet = await WalletService.with_session(db).ensure_wallet(account.id)
    order = await TopupService.with_session(db).create_order(
        account_id=account.id,
        amount_cents=payload.amount_cents,
        currency=wallet.currency,
        payment_channel=payload.payment_channel,
        reference_no=payload.reference_no,
    )
    await db.commit()
    return WalletTopupResponse.model_validate(order)


@router.get("/topups", response_model=list[WalletTopupResponse], summary="Own top-up orders")
async def list_topups(
    status_filter: Optional[str] = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    account: AccountDomain = Depends(get_current_customer),
    db: AsyncSession = Depends(get_db_session),
) -> list[WalletTopupResponse]:
    orders = await TopupService.with_session(db).list_orders(account.id, limit, offset, status_filter)
    return [WalletTopupResponse.model_validate(order) for order in orders]
