"""Append-only audit trail for privileged mutations."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from .models import AdminActivityLogEntry
from .repository import AuditLogRepository


def _dump(values: Optional[dict[str, Any]]) -> Optional[str]:
    if values is None:
        return None
    return json.dumps(values, default=str, sort_keys=True)


@dataclass(slots=True)
class AuditLogService:
    repository: AuditLogRepository

    @classmethod
    def with_session(cls, session: AsyncSession) -> "AuditLogService":
        from walletdesk.infrastructure.database.repositories.audit_repository import SqlAuditLogRepository

        return cls(SqlAuditLogRepository(session))

    async def record(
        self,
        *,
        admin_id: Optional[str],
        action: str,
        target_table: str,
        target_id: str,
        old_values: Optional[dict[str, Any]] = None,
        new_values: Optional[dict[str, Any]] = None,
    ) -> AdminActivityLogEntry:
        model = await self.repository.add_entry(
            admin_id=admin_id,
            action=action,
            target_table=target_table,
            target_id=target_id,
            old_values=_dump(old_values),
            new_values=_dump(new_values),
        )
        return AdminActivityLogEntry.from_orm(model)

    async def list_entries(
        self,
        *,
        action: Optional[str] = None,
        target_id: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[AdminActivityLogEntry]:
        rows = await self.repository.list_entries(action=action, target_id=target_id, limit=limit, offset=offset)
        return [AdminActivityLogEntry.from_orm(row) for row in rows]
