"""Delivery — notification channels, digest publishing, artifact files."""

from bizdigest.delivery.artifacts import artifact_paths, write_artifacts
from bizdigest.delivery.channels import NotificationChannel, SlackChannel
from bizdigest.delivery.factory import create_channels, create_publisher
from bizdigest.delivery.publisher import DigestPublisher

__all__ = [
    "DigestPublisher",
    "NotificationChannel",
    "SlackChannel",
    "artifact_paths",
    "create_channels",
    "create_publisher",
    "write_artifacts",
]
