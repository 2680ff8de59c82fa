"""Authentication endpoints for customers and administrators."""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from walletdesk.core.security import create_access_token
from walletdesk.interfaces.http.deps import get_account_service, get_db_session
from walletdesk.modules.accounts import Account, AccountCreateInput, AccountService
from walletdesk.modules.wallets import WalletService
from walletdesk.schemas import AccountLoginResponse, AdminLoginRequest, LoginRequest, RegisterRequest

router = APIRouter()


def _login_response(account: Account) -> AccountLoginResponse:
    access_token = create_access_token(account.id, account.username, account.role)
    return AccountLoginResponse(
        access_token=access_token,
        account_id=account.id,
        username=account.username,
        role=account.role,
        is_super_admin=account.is_super_admin(),
    )


@router.post(
    "/register",
    response_model=AccountLoginResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a customer account",
)
async def register(
    payload: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> AccountLoginResponse:
    account = await AccountService.with_session(db).create_account(
        AccountCreateInput(
            username=payload.username,
            password=payload.password,
            role="user",
            email=payload.email,
        )
    )
    await WalletService.with_session(db).ensure_wallet(account.id)
    await db.commit()
    return _login_response(account)


@router.post("/login", response_model=AccountLoginResponse, summary="Customer login")
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
    account_service: AccountService = Depends(get_account_service),
) -> AccountLoginResponse:
    account = await account_service.authenticate(payload.username, payload.password)
    if not account:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid username or password")

    await account_service.set_last_login(account.id)
    await db.commit()
    return _login_response(account)


@router.post("/admin/login", response_model=AccountLoginResponse, summary="Admin login")
async def admin_login(
    payload: AdminLoginRequest,
    db: AsyncSession = Depends(get_db_session),
    account_service: AccountService = Depends(get_account_service),
) -> AccountLoginResponse:
    account = await account_service.authenticate(payload.username, payload.password)
    if not account or not account.is_admin():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid admin credentials")

    await account_service.set_last_login(account.id)
    await db.commit()
    return _login_response(account)
