"""
Create a demo customer with a funded wallet for local testing.
"""
import asyncio

from walletdesk.infrastructure.database import dispose_engine, get_session_factory, init_db
from walletdesk.modules.accounts import AccountCreateInput, AccountService
from walletdesk.modules.wallets import WalletService

DEMO_USERNAME = "demo_customer"
DEMO_PASSWORD = "pass1234"
DEMO_BALANCE_CENTS = 100_00


async def create_default_account():
    """Create the demo customer and credit its wallet once."""
    await init_db()

    async with get_session_factory()() as db:
        service = AccountService.with_session(db)
        account = await service.get_by_username(DEMO_USERNAME)
        if account is None:
            account = await service.create_account(
                AccountCreateInput(
                    username=DEMO_USERNAME,
                    password=DEMO_PASSWORD,
                    role="user",
                    email="demo@example.com",
                    is_active=True,
                )
            )
            wallets = WalletService.with_session(db)
            await wallets.ensure_wallet(account.id)
            await wallets.credit(account.id, DEMO_BALANCE_CENTS)
            await db.commit()
            print(f"Demo customer created: {DEMO_USERNAME} / {DEMO_PASSWORD} (id {account.id})")
        else:
            print("Demo customer already exists")

    await dispose_engine()


if __name__ == "__main__":
    asyncio.run(create_default_account())
