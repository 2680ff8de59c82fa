"""Notification exceptions."""

from walletdesk.modules.common.exceptions import NotificationError


class NotificationDeliveryError(NotificationError):
    """Webhook refused a notification; its stored row is marked ``failed``."""
