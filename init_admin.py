"""
Create the default super admin account used for the first login.
"""
import asyncio

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from walletdesk.db.models import Account
from walletdesk.infrastructure.database import dispose_engine, get_session_factory, init_db
from walletdesk.modules.accounts import AccountCreateInput, AccountService


async def _provision_admin(db: AsyncSession) -> bool:
    stmt = select(Account).where(Account.role.in_(["admin", "super_admin"])).limit(1)
    result = await db.execute(stmt)
    if result.scalar_one_or_none():
        return False

    await AccountService.with_session(db).create_account(
        AccountCreateInput(
            username="admin",
            password="admin123",
            role="super_admin",
            email="admin@example.com",
            is_active=True,
        )
    )
    await db.commit()
    return True


async def create_default_admin():
    """Create the default super admin unless an admin already exists."""
    await init_db()

    async with get_session_factory()() as db:
        created = await _provision_admin(db)
    await dispose_engine()

    if not created:
        print("An admin account already exists, nothing to do")
        return

    print("=" * 50)
    print("Default admin account created")
    print("=" * 50)
    print("username: admin")
    print("password: admin123")
    print("=" * 50)
    print("Change the password after the first login!")
    print("=" * 50)


if __name__ == "__main__":
    asyncio.run(create_default_admin())
