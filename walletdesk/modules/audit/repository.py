"""Repository protocol for the admin activity log."""

from __future__ import annotations

from typing import Optional, Protocol, Sequence

from walletdesk.db.models import AdminActivityLog


class AuditLogRepository(Protocol):
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
        ...

    async def list_entries(
        self,
        *,
        action: Optional[str],
        target_id: Optional[str],
        limit: int,
        offset: int,
    ) -> Sequence[AdminActivityLog]:
        ...
