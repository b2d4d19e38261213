"""Decides whether and where a task change is announced."""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING

from ..models import Business, Task

if TYPE_CHECKING:
    from .client import WebhookNotifier

logger = logging.getLogger(__name__)


class NotificationType(str, Enum):
    """Task changes that are announced."""

    STATUS_CHANGE = "status_change"
    CHECKLIST_COMPLETED = "checklist_completed"


class NotificationService:
    """Send task notifications according to the business's settings."""

    def __init__(self, business: Business | None, notifier: WebhookNotifier | None) -> None:
        self.business = business
        self._notifier = notifier

    @property
    def enabled(self) -> bool:
        return (
            self._notifier is not None
            and self.business is not None
            and self.business.notification_settings.enabled
        )

    def notify_change(self, task: Task, notification_type: NotificationType) -> None:
        """Announce a change if notifications are on. Never raises for delivery."""
        business = self.business
        if self._notifier is None or business is None or not self.enabled:
            logger.debug("Notifications disabled, skipping %s", notification_type.value)
            return
        self._notifier.send(task, notification_type.value, business.notification_email)
