from __future__ import annotations

import logging
from typing import Optional

import httpx
from pydantic import BaseModel

logger = logging.getLogger("photo_frame.webhook")


async def send_webhook_notification(
    notification: BaseModel,
    webhook_url: Optional[str],
    *,
    http_client: httpx.AsyncClient | None = None,
) -> bool:
    """POST a notification as JSON. Delivery failures are logged, not raised."""
    if not webhook_url:
        return False

    payload = notification.model_dump(mode="json", by_alias=True)
    client = http_client or httpx.AsyncClient(timeout=10.0)
    try:
        response = await client.post(webhook_url, json=payload)
        response.raise_for_status()
    except httpx.HTTPError as exc:
        logger.warning({"event": "webhook.failed", "url": webhook_url, "error": str(exc)})
        return False
    finally:
        if http_client is None:
            await client.aclose()

    logger.debug({"event": "webhook.sent", "name": payload.get("name")})
    return True
