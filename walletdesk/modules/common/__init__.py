"""Shared abstractions used across domain modules."""

from .exceptions import DomainError, NotFoundError, NotificationError, StoreWriteError, ValidationError
from .repository import AsyncRepository

__all__ = [
    "AsyncRepository",
    "DomainError",
    "NotFoundError",
    "NotificationError",
    "StoreWriteError",
    "ValidationError",
]
