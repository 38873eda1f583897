"""Notification channels — Slack incoming-webhook delivery."""

from __future__ import annotations

import abc
from typing import Any

import aiohttp
import structlog

from bizdigest.core.config import SlackConfig

logger = structlog.get_logger(__name__)


class NotificationChannel(abc.ABC):
    """Base class for digest delivery channels."""

    @abc.abstractmethod
    async def send(self, text: str, channel: str = "") -> bool:
        """Send a rendered message, optionally to a named destination. Returns True on success."""

    @abc.abstractmethod
    async def close(self) -> None:
        """Release resources (HTTP sessions, etc.)."""


class SlackChannel(NotificationChannel):
    """Posts mrkdwn text to a Slack incoming webhook.

    Messages go to the executive channel unless a *channel* override is given.
    """

    def __init__(self, config: SlackConfig) -> None:
        self._webhook_url = config.webhook_url.get_secret_value()
        self._channel = config.executive_channel
        self._session: aiohttp.ClientSession | None = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    async def send(self, text: str, channel: str = "") -> bool:
        if not self._webhook_url:
            logger.warning("slack_webhook_missing")
            return False

        target = channel or self._channel
        payload: dict[str, Any] = {"text": text, "mrkdwn": True}
        if target:
            payload["channel"] = target

        try:
            session = self._get_session()
            async with session.post(self._webhook_url, json=payload) as resp:
                if resp.status == 200:
                    logger.info("slack_message_sent", channel=target or "default")
                    return True
                body = await resp.text()
                logger.warning(
                    "slack_send_failed",
                    status=resp.status,
                    body=body[:200],
                )
                return False
        except Exception:
            logger.exception("slack_send_error")
            return False

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None
