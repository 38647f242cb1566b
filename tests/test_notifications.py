"""Tests for best-effort outbound notifications."""
import json

import httpx
import pytest

import config
from teamhub.services import notifications


@pytest.fixture
def webhook(monkeypatch):
    """Route notification POSTs to an in-process handler and record them."""
    received = []
    status = {"code": 200}

    def handler(request: httpx.Request) -> httpx.Response:
        received.append(request)
        return httpx.Response(status["code"])

    real_client = httpx.AsyncClient

    def client_factory(*args, **kwargs):
        kwargs["transport"] = httpx.MockTransport(handler)
        return real_client(*args, **kwargs)

    monkeypatch.setattr(config, "NOTIFY_WEBHOOK_URL", "http://notify.test/hook")
    monkeypatch.setattr(config, "NOTIFY_WEBHOOK_SECRET", "s3cret")
    monkeypatch.setattr(notifications.httpx, "AsyncClient", client_factory)
    return received, status


@pytest.mark.asyncio
async def test_disabled_without_url(monkeypatch):
    monkeypatch.setattr(config, "NOTIFY_WEBHOOK_URL", "")
    assert await notifications.publish(notifications.MEMBER_REMOVED, {"team_id": 1}) is False


@pytest.mark.asyncio
async def test_publish_posts_event(webhook):
    received, _ = webhook
    ok = await notifications.publish(notifications.MEMBER_REMOVED, {"team_id": 1, "player_id": 2})
    assert ok is True
    [request] = received
    assert request.headers["Authorization"] == "Bearer s3cret"
    assert json.loads(request.content) == {
        "type": "member.removed",
        "payload": {"team_id": 1, "player_id": 2},
    }


@pytest.mark.asyncio
async def test_publish_swallows_http_errors(webhook):
    _, status = webhook
    status["code"] = 500
    assert await notifications.publish(notifications.REGISTRATION_WITHDRAWN, {"event_id": 1}) is False
