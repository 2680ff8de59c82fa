import os

os.environ.setdefault("DATABASE__URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECURITY__SECRET_KEY", "test-secret-key")

from typing import Optional

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from walletdesk.db import models  # noqa: F401
from walletdesk.infrastructure.database.base import Base
from walletdesk.modules.accounts import Account, AccountCreateInput, AccountService
from walletdesk.modules.transactions import TransactionCreateInput, TransactionService
from walletdesk.modules.wallets import WalletService

from .support import RecordingNotifier


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'walletdesk-test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def make_account(session):
    async def _make(
        username: str,
        *,
        role: str = "user",
        email: Optional[str] = None,
        balance_cents: int = 0,
        with_wallet: bool = True,
    ) -> Account:
        account = await AccountService.with_session(session).create_account(
            AccountCreateInput(username=username, password="secret123", role=role, email=email)
        )
        if with_wallet:
            wallets = WalletService.with_session(session)
            await wallets.ensure_wallet(account.id)
            if balance_cents:
                await wallets.credit(account.id, balance_cents)
        await session.commit()
        return account

    return _make


@pytest.fixture
async def admin(make_account) -> Account:
    return await make_account("ops_admin", role="super_admin", email="ops@example.com", with_wallet=False)


@pytest.fixture
def make_record(session):
    async def _make(account_id: str, amount_cents: int, **overrides) -> str:
        payload = TransactionCreateInput(
            account_id=account_id,
            amount_cents=amount_cents,
            type=overrides.pop("type", "transfer"),
            name=overrides.pop("name", "Manual entry"),
            **overrides,
        )
        record = await TransactionService.with_session(session).record(payload)
        await session.commit()
        return record.id

    return _make


@pytest.fixture
async def api_client(session_factory):
    from walletdesk.interfaces.http.deps import get_db_session
    from walletdesk.main import app

    async def _override_session():
        async with session_factory() as db:
            try:
                yield db
                await db.commit()
            except Exception:
                await db.rollback()
                raise

    app.dependency_overrides[get_db_session] = _override_session
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
    app.dependency_overrides.clear()
