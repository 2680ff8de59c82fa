"""Test doubles and small helpers shared by the test modules."""

from typing import Any

import httpx
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from walletdesk.infrastructure.database.repositories.notification_repository import SqlNotificationRepository
from walletdesk.modules.common.exceptions import NotificationError
from walletdesk.modules.notifications import Notification, NotificationService
from walletdesk.modules.wallets import WalletService


class RecordingNotifier:
    def __init__(self) -> None:
        self.sent: list[tuple[str, str, dict[str, Any]]] = []

    async def send(self, address: str, kind: str, payload: dict[str, Any]) -> Notification:
        self.sent.append((address, kind, payload))
        return Notification(id=str(len(self.sent)), recipient=address, kind=kind, status="sent", message=None)


class FailingNotifier:
    def __init__(self) -> None:
        self.attempts = 0

    async def send(self, address: str, kind: str, payload: dict[str, Any]) -> Notification:
        self.attempts += 1
        raise NotificationError("mail relay unavailable")


def refusing_webhook_notifier(session: AsyncSession) -> NotificationService:
    """Database notifier whose webhook answers every message with 503."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(503)))
    return NotificationService(
        SqlNotificationRepository(session),
        webhook_url="https://hooks.example.com/notify",
        client=client,
    )


async def committed_notifications(
    session_factory: async_sessionmaker[AsyncSession], address: str
) -> list[tuple[str, str]]:
    async with session_factory() as other_session:
        rows = await NotificationService.with_session(other_session).list_for_recipient(address)
    return [(row.kind, row.status) for row in rows]


async def balance_of(session: AsyncSession, account_id: str) -> int:
    wallet = await WalletService.with_session(session).get_wallet(account_id)
    return wallet.balance_cents
