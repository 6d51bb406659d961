# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Notification Dispatcher - Best-effort status messages.

One message per invocation, no retry, no backoff. Delivery failures are
logged and never change the invocation's own result.
"""

from typing import Any, Protocol

import httpx
import structlog

from mongosnap.exceptions import NotificationError

logger = structlog.get_logger()


class Notifier(Protocol):
    """Sends one human-readable status line."""

    async def send(self, text: str) -> None: ...


class WebhookNotifier:
    """
    Posts {"text": message} to a webhook (Slack-compatible body).

    The response body is logged as-is and never parsed.
    """

    def __init__(self, url: str, client: httpx.AsyncClient | None = None) -> None:
        self.url = url
        self._client = client

    async def send(self, text: str) -> None:
        try:
            if self._client is not None:
                response = await self._client.post(self.url, json={"text": text})
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.post(self.url, json={"text": text})
        except httpx.HTTPError as e:
            raise NotificationError(f"Webhook request failed: {e}") from e

        logger.info(
            "notification_sent",
            status_code=response.status_code,
            response_body=response.text,
        )

        if response.is_error:
            raise NotificationError(
                f"Webhook returned HTTP {response.status_code}",
                details={"status_code": response.status_code},
            )


class LogNotifier:
    """Fallback used when no webhook is configured: logs the message."""

    async def send(self, text: str) -> None:
        logger.info("notification_logged", text=text)


def create_notifier(webhook_url: str | None, client: Any = None) -> Notifier:
    if webhook_url:
        return WebhookNotifier(webhook_url, client)
    return LogNotifier()


async def dispatch_notification(notifier: Notifier, message: str, success: bool) -> bool:
    """
    Make exactly one notification attempt.

    Args:
        notifier: Notifier to use
        message: Status line to send
        success: Whether the operation being reported succeeded

    Returns:
        True if the notifier accepted the message
    """
    try:
        await notifier.send(message)
        return True
    except Exception as e:
        logger.warning(
            "notification_failed",
            error=str(e),
            operation_succeeded=success,
        )
        return False
