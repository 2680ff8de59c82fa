"""Admin activity log entries."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional


@dataclass(slots=True)
class AdminActivityLogEntry:
    id: int
    admin_id: Optional[str]
    action: str
    target_table: str
    target_id: str
    old_values: dict[str, Any] = field(default_factory=dict)
    new_values: dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None

    @classmethod
    def from_orm(cls, model) -> "AdminActivityLogEntry":
        return cls(
            id=model.id,
            admin_id=model.admin_id,
            action=model.action,
            target_table=model.target_table,
            target_id=model.target_id,
            old_values=json.loads(model.old_values) if model.old_values else {},
            new_values=json.loads(model.new_values) if model.new_values else {},
            created_at=model.created_at,
        )
