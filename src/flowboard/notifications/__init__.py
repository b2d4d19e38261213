"""Task change notifications."""

from .client import NotificationError, WebhookNotifier
from .service import NotificationService, NotificationType

__all__ = [
    "NotificationError",
    "NotificationService",
    "NotificationType",
    "WebhookNotifier",
]
