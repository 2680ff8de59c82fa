"""SQLAlchemy implementation for stored notifications."""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import desc, select, update

from walletdesk.db.models import Notification
from walletdesk.modules.common.repository import AsyncRepository


class SqlNotificationRepository(AsyncRepository[Notification]):
    async def add_notification(
        self,
        *,
        recipient: str,
        kind: str,
        status: str,
        message: str,
        payload: str,
    ) -> Notification:
        notification = Notification(
            recipient=recipient,
            kind=kind,
            status=status,
            message=message,
            payload=payload,
        )
        return await self.add(notification)

    async def set_status(self, notification_id: str, status: str) -> None:
        await self.session.execute(
            update(Notification)
            .where(Notification.id == notification_id)
            .values(status=status)
            .execution_options(synchronize_session=False)
        )

    async def list_for_recipient(self, recipient: str, limit: int) -> Sequence[Notification]:
        stmt = (
            select(Notification)
            .where(Notification.recipient == recipient)
            .order_by(desc(Notification.created_at))
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()
