"""Repository protocol for stored notifications."""

from __future__ import annotations

from typing import Protocol, Sequence

from walletdesk.db.models import Notification as NotificationModel


class NotificationRepository(Protocol):
    async def add_notification(
        self,
        *,
        recipient: str,
        kind: str,
        status: str,
        message: str,
        payload: str,
    ) -> NotificationModel:
        ...

    async def set_status(self, notification_id: str, status: str) -> None:
        ...

    async def list_for_recipient(self, recipient: str, limit: int) -> Sequence[NotificationModel]:
        ...
