"""Tests for the completion email and the notification trigger."""

import json
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import httpx
import pytest

from bidsmart.core.exceptions import APIClientError, ProjectNotFoundError
from bidsmart.services import notification_service
from bidsmart.services.notification_service import CompletionNotifier, NotificationService

REAL_ASYNC_CLIENT = httpx.AsyncClient


def _project(**overrides):
    values = {
        "id": uuid4(),
        "project_name": "Smith Residence",
        "notify_on_completion": True,
        "notification_email": "homeowner@example.com",
        "notification_sent_at": None,
    }
    values.update(overrides)
    return SimpleNamespace(**values)


def _service(project):
    email_client = MagicMock()
    email_client.send = AsyncMock(return_value={"id": "email-1"})
    service = NotificationService(MagicMock(), email_client=email_client)
    service.project_repo = AsyncMock()
    service.project_repo.get_by_id.return_value = project
    return service


class TestNotificationService:

    @pytest.mark.parametrize(
        "overrides,reason",
        [
            ({"notify_on_completion": False}, "User did not opt in for notifications"),
            ({"notification_email": None}, "No notification email provided"),
            ({"notification_sent_at": datetime(2026, 10, 1, tzinfo=timezone.utc)}, "Notification already sent"),
        ],
    )
    async def test_skip_reasons(self, overrides, reason):
        service = _service(_project(**overrides))

        result = await service.send_completion_notification(uuid4())

        assert result == {"success": True, "skipped": True, "reason": reason}
        service.email_client.send.assert_not_awaited()
        service.project_repo.update.assert_not_awaited()

    async def test_sends_once_and_stamps_project(self):
        project = _project()
        service = _service(project)

        result = await service.send_completion_notification(project.id)

        assert result == {
            "success": True,
            "message": "Notification sent successfully",
            "email": "homeowner@example.com",
        }
        kwargs = service.email_client.send.await_args.kwargs
        assert kwargs["to"] == "homeowner@example.com"
        assert kwargs["subject"] == "Your Heat Pump Bid Analysis is Ready"
        assert "Smith Residence" in kwargs["html"]
        assert "Smith Residence" in kwargs["text"]
        assert "notification_sent_at" in service.project_repo.update.await_args.kwargs

    async def test_unknown_project(self):
        service = _service(None)

        with pytest.raises(ProjectNotFoundError):
            await service.send_completion_notification(uuid4())


class TestCompletionNotifier:

    async def test_posts_project_id(self, monkeypatch):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"success": True})

        transport = httpx.MockTransport(handler)
        monkeypatch.setattr(
            notification_service.httpx, "AsyncClient", lambda *a, **kw: REAL_ASYNC_CLIENT(transport=transport)
        )
        project_id = uuid4()

        notifier = CompletionNotifier(url="https://functions.example/notify", service_role_key="role-key")
        result = await notifier.notify(project_id)

        assert result == {"success": True}
        assert seen["url"] == "https://functions.example/notify"
        assert seen["auth"] == "Bearer role-key"
        assert seen["body"] == {"project_id": str(project_id)}

    async def test_rejection_raises(self, monkeypatch):
        transport = httpx.MockTransport(lambda request: httpx.Response(500, text="boom"))
        monkeypatch.setattr(
            notification_service.httpx, "AsyncClient", lambda *a, **kw: REAL_ASYNC_CLIENT(transport=transport)
        )

        with pytest.raises(APIClientError):
            await CompletionNotifier(url="https://functions.example/notify").notify(uuid4())
