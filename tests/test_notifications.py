"""Tests for webhook notifications."""

from datetime import UTC, datetime
from unittest.mock import MagicMock

import httpx
import pytest

from flowboard.models import Business, NotificationSettings, Task, TaskStatus
from flowboard.notifications import NotificationService, NotificationType, WebhookNotifier

URL = "https://hooks.example.com/flowboard"


@pytest.fixture
def task() -> Task:
    return Task(
        id="t1",
        title="Ship it",
        status=TaskStatus.COMPLETED,
        due_date=datetime(2025, 6, 1, tzinfo=UTC),
        column_id="done",
        board_id="b1",
        business_id="biz",
    )


def make_business(enabled: bool = True, notify_email: str | None = None) -> Business:
    return Business(
        id="biz",
        name="Acme",
        email="owner@acme.test",
        owner_id="u1",
        notification_settings=NotificationSettings(enabled=enabled, notify_email=notify_email),
    )


def mock_response(status_code: int = 200, json_data=None) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    if json_data is None:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = json_data
    return response


class TestWebhookNotifier:
    """Tests for WebhookNotifier."""

    def test_payload(self, task: Task):
        payload = WebhookNotifier.build_payload(task, "status_change", "a@b.test")

        assert payload["task"] == {
            "id": "t1",
            "title": "Ship it",
            "status": "completed",
            "due_date": "2025-06-01T00:00:00+00:00",
        }
        assert payload["type"] == "status_change"
        assert payload["email"] == "a@b.test"
        assert payload["timestamp"]

    def test_send_posts_json(self, task: Task):
        client = MagicMock(spec=httpx.Client)
        client.post.return_value = mock_response(json_data={"ok": True})
        notifier = WebhookNotifier(URL, client=client)

        assert notifier.send(task, "status_change", "a@b.test") == {"ok": True}
        args, kwargs = client.post.call_args
        assert args == (URL,)
        assert kwargs["json"]["task"]["id"] == "t1"

    def test_non_json_body(self, task: Task):
        client = MagicMock(spec=httpx.Client)
        client.post.return_value = mock_response()
        notifier = WebhookNotifier(URL, client=client)
        assert notifier.send(task, "status_change", "a@b.test") == {}

    def test_http_error_is_swallowed(self, task: Task):
        client = MagicMock(spec=httpx.Client)
        client.post.return_value = mock_response(status_code=500)
        notifier = WebhookNotifier(URL, client=client)
        assert notifier.send(task, "status_change", "a@b.test") is None

    def test_request_error_is_swallowed(self, task: Task):
        client = MagicMock(spec=httpx.Client)
        client.post.side_effect = httpx.ConnectError("refused")
        notifier = WebhookNotifier(URL, client=client)
        assert notifier.send(task, "status_change", "a@b.test") is None

    def test_context_manager_closes_client(self):
        client = MagicMock(spec=httpx.Client)
        with WebhookNotifier(URL, client=client):
            pass
        client.close.assert_called_once()

    def test_mock_transport(self, task: Task):
        """End to end through httpx with a mock transport."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"received": True})

        client = httpx.Client(transport=httpx.MockTransport(handler))
        with WebhookNotifier(URL, client=client) as notifier:
            result = notifier.send(task, "checklist_completed", "a@b.test")

        assert result == {"received": True}
        assert seen[0].method == "POST"
        assert str(seen[0].url) == URL


class TestNotificationService:
    """Tests for NotificationService."""

    def test_sends_to_notify_email(self, task: Task):
        notifier = MagicMock(spec=WebhookNotifier)
        service = NotificationService(make_business(notify_email="ops@acme.test"), notifier)

        service.notify_change(task, NotificationType.STATUS_CHANGE)
        notifier.send.assert_called_once_with(task, "status_change", "ops@acme.test")

    def test_falls_back_to_business_email(self, task: Task):
        notifier = MagicMock(spec=WebhookNotifier)
        service = NotificationService(make_business(), notifier)

        service.notify_change(task, NotificationType.CHECKLIST_COMPLETED)
        notifier.send.assert_called_once_with(task, "checklist_completed", "owner@acme.test")

    @pytest.mark.parametrize(
        "business, has_notifier",
        [(make_business(enabled=False), True), (None, True), (make_business(), False)],
    )
    def test_disabled(self, task: Task, business, has_notifier: bool):
        notifier = MagicMock(spec=WebhookNotifier)
        service = NotificationService(business, notifier if has_notifier else None)

        assert service.enabled is False
        service.notify_change(task, NotificationType.STATUS_CHANGE)
        notifier.send.assert_not_called()
