from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

import httpx

from meeting_relay.settings import Settings

logger = logging.getLogger(__name__)


class SlackNotifier:
    """
    Posts markdown text to a Slack incoming webhook.

    send() never raises: a missing URL, a transport failure or a non-2xx
    answer are all reported as False.
    """

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self._webhook_url = settings.SLACK_WEBHOOK_URL
        self._timeout = settings.OUTBOUND_TIMEOUT_SECONDS
        self._transport = transport

    async def send(self, text: str) -> bool:
        if not self._webhook_url:
            logger.warning("Slack webhook not configured; skipping message (len=%d)", len(text))
            return False

        payload: dict[str, Any] = {"text": text}

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await asyncio.wait_for(client.post(self._webhook_url, json=payload), self._timeout)
        except (httpx.TimeoutException, asyncio.TimeoutError):
            logger.error("Slack webhook timed out after %ss", self._timeout)
            return False
        except Exception as e:  # noqa: BLE001
            logger.exception("Failed to send Slack message: %s", e)
            return False

        if not resp.is_success:
            logger.error("Slack webhook rejected message. status=%d body=%s", resp.status_code, resp.text[:200])
            return False

        logger.info("📣 Slack message sent. status=%d", resp.status_code)
        return True
