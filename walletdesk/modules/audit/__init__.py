"""Admin activity log exports."""

from .models import AdminActivityLogEntry
from .service import AuditLogService

__all__ = ["AdminActivityLogEntry", "AuditLogService"]
