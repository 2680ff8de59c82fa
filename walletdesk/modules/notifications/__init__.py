"""Notification exports."""

from . import models as kinds
from .exceptions import NotificationDeliveryError
from .models import Notification, format_amount, render_message
from .service import NotificationDispatcher, NotificationService

__all__ = [
    "Notification",
    "NotificationDeliveryError",
    "NotificationDispatcher",
    "NotificationService",
    "format_amount",
    "kinds",
    "render_message",
]
