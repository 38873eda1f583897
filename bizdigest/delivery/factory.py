"""Convenience factory for wiring delivery channels."""

from __future__ import annotations

from bizdigest.core.config import AlertsConfig
from bizdigest.delivery.channels import NotificationChannel, SlackChannel
from bizdigest.delivery.publisher import DigestPublisher


def create_channels(config: AlertsConfig) -> list[NotificationChannel]:
    """Channels enabled in *config*, in a fixed order."""
    channels: list[NotificationChannel] = []
    if config.slack.enabled:
        channels.append(SlackChannel(config.slack))
    return channels


def create_publisher(config: AlertsConfig, company: str = "") -> DigestPublisher:
    """Publisher over the enabled channels, with Slack department routing."""
    return DigestPublisher(
        channels=create_channels(config),
        company=company,
        department_channels=config.slack.department_channels() if config.slack.enabled else {},
        push_critical=config.push_critical_alerts,
    )
