"""Bearer tokens for wallet holders and back-office staff, and the guards built on them.

Tokens carry the account id, username and role. Staff tokens expire sooner
than customer tokens (``SECURITY__ADMIN_TOKEN_EXPIRE_MINUTES``).
"""
from datetime import datetime, timedelta, timezone
from typing import Callable

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import ValidationError as ClaimsError
from sqlalchemy.ext.asyncio import AsyncSession

from walletdesk.core.config import get_settings
from walletdesk.interfaces.http.deps.database import get_db_session
from walletdesk.modules.accounts import Account, AccountService
from walletdesk.modules.accounts.models import ADMIN_ROLES
from walletdesk.schemas import TokenData

settings = get_settings()
bearer = HTTPBearer()


def _token_lifetime(role: str) -> timedelta:
    if role in ADMIN_ROLES:
        return timedelta(minutes=settings.security.admin_token_expire_minutes)
    return timedelta(minutes=settings.access_token_expire_minutes)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def create_access_token(account_id: str, username: str, role: str) -> str:
    expires_at = datetime.now(timezone.utc) + _token_lifetime(role)
    claims = {"sub": account_id, "username": username, "role": role, "exp": expires_at}
    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> TokenData:
    try:
        claims = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
        token_data = TokenData(
            account_id=claims.get("sub") or "",
            username=claims.get("username") or "",
            role=claims.get("role") or "",
        )
    except (JWTError, ClaimsError) as exc:
        raise _unauthorized("Could not validate credentials") from exc
    if not (token_data.account_id and token_data.username and token_data.role):
        raise _unauthorized("Could not validate credentials")
    return token_data


async def get_current_account(
    credentials: HTTPAuthorizationCredentials = Depends(bearer),
    db: AsyncSession = Depends(get_db_session),
) -> Account:
    token_data = decode_access_token(credentials.credentials)
    account = await AccountService.with_session(db).get_by_id(token_data.account_id)
    # A disabled account loses access even with an unexpired token.
    if account is None or not account.is_active:
        raise _unauthorized("Account missing or disabled")
    return account


def _role_guard(allowed: Callable[[Account], bool], detail: str):
    async def guard(account: Account = Depends(get_current_account)) -> Account:
        if not allowed(account):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
        return account

    return guard


get_current_admin = _role_guard(Account.is_admin, "Admin privileges required")
get_super_admin = _role_guard(Account.is_super_admin, "Super admin privileges required")
