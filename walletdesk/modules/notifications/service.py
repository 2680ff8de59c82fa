"""Notification dispatch.

Every notification is stored in the ``notifications`` table and logged. When a
webhook URL is configured the message is also POSTed there as JSON. Callers
treat dispatch as best effort: a failure raises :class:`NotificationError`,
which they log and swallow. A refused webhook raises
:class:`NotificationDeliveryError` after marking the stored row ``failed``;
callers commit that row. Any other :class:`NotificationError` leaves the
session needing a rollback.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from walletdesk.core.config import get_settings
from walletdesk.db.models import Notification as NotificationModel
from walletdesk.modules.common.exceptions import NotificationError, StoreWriteError

from .exceptions import NotificationDeliveryError
from .models import Notification, render_message
from .repository import NotificationRepository

logger = logging.getLogger(__name__)


class NotificationDispatcher(Protocol):
    async def send(self, address: str, kind: str, payload: dict[str, Any]) -> Notification:
        ...


@dataclass(slots=True)
class NotificationService:
    repository: NotificationRepository
    webhook_url: Optional[str] = None
    timeout_seconds: float = 10.0
    client: Optional[httpx.AsyncClient] = None

    @classmethod
    def with_session(cls, session: AsyncSession, client: Optional[httpx.AsyncClient] = None) -> "NotificationService":
        from walletdesk.infrastructure.database.repositories.notification_repository import (
            SqlNotificationRepository,
        )

        settings = get_settings().notifications
        return cls(
            SqlNotificationRepository(session),
            webhook_url=settings.webhook_url,
            timeout_seconds=settings.timeout_seconds,
            client=client,
        )

    async def send(self, address: str, kind: str, payload: dict[str, Any]) -> Notification:
        message = render_message(kind, payload)
        try:
            model = await self.repository.add_notification(
                recipient=address,
                kind=kind,
                status="sent",
                message=message,
                payload=json.dumps(payload, default=str),
            )
        except StoreWriteError as exc:
            raise NotificationError(f"could not store notification: {exc}") from exc

        if self.webhook_url:
            try:
                await self._post_webhook(address, kind, message, payload)
            except httpx.HTTPError as exc:
                await self.repository.set_status(model.id, "failed")
                logger.error("Notification webhook failed for %s (%s): %s", address, kind, exc)
                raise NotificationDeliveryError(f"webhook delivery failed: {exc}") from exc

        logger.info("Notification %s sent to %s: %s", kind, address, message)
        return self._to_domain(model, payload)

    async def list_for_recipient(self, address: str, limit: int = 20) -> list[Notification]:
        rows = await self.repository.list_for_recipient(address, limit)
        return [self._to_domain(row) for row in rows]

    async def _post_webhook(self, address: str, kind: str, message: str, payload: dict[str, Any]) -> None:
        body = {"email": address, "type": kind, "message": message, "payload": payload}
        if self.client is not None:
            response = await self.client.post(self.webhook_url, json=body, timeout=self.timeout_seconds)
            response.raise_for_status()
            return
        async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
            response = await client.post(self.webhook_url, json=body)
            response.raise_for_status()

    @staticmethod
    def _to_domain(model: NotificationModel, payload: Optional[dict[str, Any]] = None) -> Notification:
        if payload is None:
            payload = json.loads(model.payload) if model.payload else {}
        return Notification(
            id=model.id,
            recipient=model.recipient,
            kind=model.kind,
            status=model.status,
            message=model.message,
            payload=payload,
            created_at=model.created_at,
        )
