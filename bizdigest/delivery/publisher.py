"""Digest publisher — records each digest and routes it to channels."""

from __future__ import annotations

from collections.abc import Mapping

import structlog

from bizdigest.core.types import Alert, Department, Digest, Severity
from bizdigest.delivery.channels import NotificationChannel
from bizdigest.render.chat import render_alert_message, render_chat_message, render_department_message

# Dedicated structured logger for published digests.
decision_logger = structlog.get_logger("decision_log")

logger = structlog.get_logger(__name__)


class DigestPublisher:
    """Routes a digest's messages to every configured channel.

    - Every digest and every alert push is logged via *decision_logger*.
    - The chat message goes to each channel's default (executive) destination.
    - CRITICAL alerts are also pushed one by one; WARNING and INFO are log-only.
    - Department reports go only to departments with a configured channel.
    - A channel that fails or raises is logged; the others still receive it.
    """

    def __init__(
        self,
        channels: list[NotificationChannel] | None = None,
        company: str = "",
        department_channels: Mapping[Department, str] | None = None,
        push_critical: bool = True,
    ) -> None:
        self._channels: list[NotificationChannel] = channels or []
        self._company = company
        self._department_channels: dict[Department, str] = dict(department_channels or {})
        self._push_critical = push_critical

    @property
    def channels(self) -> list[NotificationChannel]:
        return list(self._channels)

    @property
    def department_channels(self) -> dict[Department, str]:
        return dict(self._department_channels)

    async def publish(self, digest: Digest) -> int:
        """Deliver *digest*. Returns the number of channels that accepted the chat message."""
        self._log_decision(digest)
        if not self._channels:
            return 0

        text = render_chat_message(digest, company=self._company)
        delivered = await self._dispatch_to_channels(text)
        logger.info(
            "digest_published",
            date=digest.date.isoformat(),
            delivered=delivered,
            channels=len(self._channels),
        )

        if self._push_critical:
            for alert in digest.alerts.critical:
                await self.send_alert(alert)

        for department in Department:
            if department in self._department_channels:
                await self.send_department_report(
                    department,
                    render_department_message(digest, department, company=self._company),
                )
        return delivered

    # ── Direct sends ────────────────────────────────────────────

    async def send_alert(self, alert: Alert) -> int:
        """Push one alert to the executive destination. Only CRITICAL alerts are sent."""
        decision_logger.info(
            "alert",
            domain=alert.domain,
            type=alert.type,
            severity=alert.severity,
            message=alert.message,
        )
        if alert.severity != Severity.CRITICAL:
            return 0
        return await self._dispatch_to_channels(render_alert_message(alert))

    async def send_department_report(self, department: Department, text: str) -> int:
        """Send *text* to *department*'s channel; skipped when none is configured."""
        channel = self._department_channels.get(department, "")
        if not channel:
            logger.warning("department_channel_missing", department=department)
            return 0
        return await self._dispatch_to_channels(text, channel=channel)

    # ── Internal routing ────────────────────────────────────────

    def _log_decision(self, digest: Digest) -> None:
        decision_logger.info(
            "digest",
            type=digest.type,
            date=digest.date.isoformat(),
            critical=[a.message for a in digest.alerts.critical],
            warning=[a.message for a in digest.alerts.warning],
            actions=[a.model_dump(mode="json") for a in digest.actions],
            summary=digest.summary.model_dump(mode="json"),
        )

    async def _dispatch_to_channels(self, text: str, channel: str = "") -> int:
        delivered = 0
        for ch in self._channels:
            try:
                if await ch.send(text, channel=channel):
                    delivered += 1
            except Exception:
                logger.exception(
                    "channel_dispatch_error",
                    channel=type(ch).__name__,
                    destination=channel or "default",
                )
        return delivered

    # ── Lifecycle ───────────────────────────────────────────────

    async def close(self) -> None:
        for ch in self._channels:
            try:
                await ch.close()
            except Exception:
                logger.exception("channel_close_error", channel=type(ch).__name__)
