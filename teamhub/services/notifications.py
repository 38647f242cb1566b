"""Outbound notifications (member removed, request decided, ...) for a separate notification service."""
from __future__ import annotations

import logging
from typing import Any

import httpx

import config

logger = logging.getLogger("teamhub.notifications")

MEMBER_REMOVED = "member.removed"
JOIN_REQUEST_DECIDED = "join_request.decided"
REGISTRATION_STATUS_CHANGED = "registration.status_changed"
REGISTRATION_WITHDRAWN = "registration.withdrawn"


async def publish(event_type: str, payload: dict[str, Any]) -> bool:
    """POST the event to NOTIFY_WEBHOOK_URL. Best-effort: never fails the caller.

    Returns True if the webhook accepted the event.
    """
    if not config.NOTIFY_WEBHOOK_URL:
        return False
    headers = {}
    if config.NOTIFY_WEBHOOK_SECRET:
        headers["Authorization"] = f"Bearer {config.NOTIFY_WEBHOOK_SECRET}"
    try:
        async with httpx.AsyncClient(timeout=config.NOTIFY_TIMEOUT_SECONDS) as client:
            r = await client.post(
                config.NOTIFY_WEBHOOK_URL,
                json={"type": event_type, "payload": payload},
                headers=headers,
            )
            r.raise_for_status()
    except httpx.HTTPError as e:
        logger.warning("Notification %s not delivered: %s", event_type, e)
        return False
    logger.debug("Notification %s delivered", event_type)
    return True
