"""SQLAlchemy implementation for the admin activity log."""

from __future__ import annotations

from typing import Optional, Sequence

from sqlalchemy import desc, select

from walletdesk.db.models import AdminActivityLog
from walletdesk.modules.common.repository import AsyncRepository


class SqlAuditLogRepository(AsyncRepository[AdminActivityLog]):
    async def add_entry(
        self,
        *,
        admin_id: Optional[str],
        action: str,
        target_table: str,
        target_id: str,
        old_values: Optional[str],
        new_values: Optional[str],
    ) -> AdminActivityLog:
        entry = AdminActivityLog(
            admin_id=admin_id,
            action=action,
            target_table=target_table,
            target_id=target_id,
            old_values=old_values,
            new_values=new_values,
        )
        return await self.add(entry)

    async def list_entries(
        self,
        *,
        action: Optional[str],
        target_id: Optional[str],
        limit: int,
        offset: int,
    ) -> Sequence[AdminActivityLog]:
        stmt = select(AdminActivityLog)
        if action:
            stmt = stmt.where(AdminActivityLog.action == action)
        if target_id:
            stmt = stmt.where(AdminActivityLog.target_id == target_id)
        stmt = stmt.order_by(desc(AdminActivityLog.id)).offset(offset).limit(limit)
        result = await self.session.execute(stmt)
        return result.scalars().all()
