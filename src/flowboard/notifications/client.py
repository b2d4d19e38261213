"""Outbound webhook client for task notifications."""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from ..models import Task
from ..utils import now_utc, to_iso

logger = logging.getLogger(__name__)


class NotificationError(Exception):
    """A webhook delivery failed. Never escapes ``WebhookNotifier.send``."""

    pass


class WebhookNotifier:
    """Best-effort JSON webhook sender.

    Delivery failures are logged and swallowed: a notification can never
    fail or block the task mutation that caused it beyond the timeout.
    """

    def __init__(self, url: str, timeout: float = 10.0, client: httpx.Client | None = None):
        """Initialize the notifier.

        Args:
            url: Webhook endpoint receiving the POST
            timeout: Request timeout in seconds
            client: Optional preconfigured httpx client (closed by ``close()``)
        """
        self.url = url
        self._client = client or httpx.Client(
            headers={"Content-Type": "application/json"},
            timeout=timeout,
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> WebhookNotifier:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    @staticmethod
    def build_payload(task: Task, notification_type: str, email: str) -> dict[str, Any]:
        """Build the JSON body for one notification."""
        return {
            "task": {
                "id": task.id,
                "title": task.title,
                "status": task.status.value,
                "due_date": to_iso(task.due_date) if task.due_date else None,
            },
            "type": notification_type,
            "email": email,
            "timestamp": to_iso(now_utc()),
        }

    def send(self, task: Task, notification_type: str, email: str) -> dict[str, Any] | None:
        """Send a notification.

        Returns:
            The decoded response body, or None if delivery failed.
        """
        try:
            return self._post(self.build_payload(task, notification_type, email))
        except NotificationError as e:
            logger.error("Notification error (%s, task %s): %s", notification_type, task.id, e)
            return None

    def _post(self, payload: dict[str, Any]) -> dict[str, Any]:
        start_time = time.monotonic()
        try:
            response = self._client.post(self.url, json=payload)
        except httpx.RequestError as e:
            elapsed_ms = (time.monotonic() - start_time) * 1000
            raise NotificationError(f"Request failed after {elapsed_ms:.0f}ms: {e}") from e

        elapsed_ms = (time.monotonic() - start_time) * 1000
        if response.status_code >= 400:
            raise NotificationError(f"HTTP {response.status_code} ({elapsed_ms:.0f}ms)")

        logger.info(
            "Notification %s: %d (%.0fms)", payload["type"], response.status_code, elapsed_ms
        )
        try:
            return response.json()
        except ValueError:
            # Empty or non-JSON body
            return {}
