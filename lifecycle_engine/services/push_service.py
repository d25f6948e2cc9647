"""
Best-effort push notification dispatch.

Delivery itself belongs to the notification service; the engine only
POSTs {client_id, title, body, url} to it. Failures are logged and
swallowed so they never fail the operation that produced the message.
"""

import logging
from typing import Optional

import httpx

from lifecycle_engine.config import settings

logger = logging.getLogger(__name__)

DEFAULT_URL = "/dashboard"


def send_push_notification(
    client_id: int,
    title: str,
    body: str,
    url: str = DEFAULT_URL,
    http_client: Optional[httpx.Client] = None,
) -> bool:
    """Dispatch a push notification for a client.

    Args:
        client_id: Recipient client.
        title: Notification title.
        body: Notification body (usually the in-app message text).
        url: Deep link opened when the notification is tapped.
        http_client: Optional client to reuse (tests inject a MockTransport).

    Returns:
        True if the dispatcher accepted the notification, False otherwise.
    """
    endpoint = settings.PUSH_NOTIFICATION_URL
    if not endpoint:
        logger.debug(f"PUSH_NOTIFICATION_URL not set — skipping push for client {client_id}")
        return False

    headers = {}
    if settings.PUSH_NOTIFICATION_TOKEN:
        headers["Authorization"] = f"Bearer {settings.PUSH_NOTIFICATION_TOKEN}"

    payload = {
        "client_id": client_id,
        "title": title,
        "body": body,
        "url": url,
    }

    client = http_client or httpx.Client(timeout=settings.PUSH_TIMEOUT_SECONDS)
    try:
        resp = client.post(endpoint, json=payload, headers=headers)
        if resp.is_success:
            logger.info(f"Push notification dispatched to client {client_id}")
            return True
        logger.error(f"Push dispatch failed ({resp.status_code}) for client {client_id}: {resp.text}")
    except httpx.HTTPError as e:
        logger.error(f"Error dispatching push to client {client_id}: {e}")
    finally:
        if http_client is None:
            client.close()
    return False
