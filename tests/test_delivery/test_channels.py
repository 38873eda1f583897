"""Tests for Slack delivery — HTTP mocking, error handling, session management."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

from pydantic import SecretStr

from bizdigest.core.config import AlertsConfig, SlackConfig
from bizdigest.core.types import Department
from bizdigest.delivery.channels import SlackChannel
from bizdigest.delivery.factory import create_channels, create_publisher

# ── Helpers ─────────────────────────────────────────────────────


def _slack_config(**kw: object) -> SlackConfig:
    defaults: dict[str, object] = {
        "enabled": True,
        "webhook_url": SecretStr("https://hooks.slack.com/services/fake"),
        "executive_channel": "#executive",
    }
    defaults.update(kw)
    return SlackConfig(**defaults)  # type: ignore[arg-type]


def _mock_response(status: int = 200, text: str = "ok") -> AsyncMock:
    resp = AsyncMock()
    resp.status = status
    resp.text = AsyncMock(return_value=text)
    resp.__aenter__ = AsyncMock(return_value=resp)
    resp.__aexit__ = AsyncMock(return_value=False)
    return resp


def _attach_session(ch: SlackChannel, resp: AsyncMock) -> MagicMock:
    mock_session = MagicMock()
    mock_session.post = MagicMock(return_value=resp)
    mock_session.closed = False
    ch._session = mock_session
    return mock_session


# ── SlackChannel ───────────────────────────────────────────────


class TestSlackChannel:
    async def test_send_success(self) -> None:
        ch = SlackChannel(_slack_config())
        mock_session = _attach_session(ch, _mock_response(200))

        result = await ch.send("*Daily Report*")
        assert result is True
        mock_session.post.assert_called_once()
        call_args = mock_session.post.call_args
        assert call_args[0][0] == "https://hooks.slack.com/services/fake"
        payload = call_args[1]["json"]
        assert payload == {"text": "*Daily Report*", "mrkdwn": True, "channel": "#executive"}

    async def test_channel_override(self) -> None:
        ch = SlackChannel(_slack_config())
        mock_session = _attach_session(ch, _mock_response(200))

        assert await ch.send("ops update", channel="#ops") is True
        assert mock_session.post.call_args[1]["json"]["channel"] == "#ops"

    async def test_no_channel_override(self) -> None:
        ch = SlackChannel(_slack_config(executive_channel=""))
        mock_session = _attach_session(ch, _mock_response(200))

        await ch.send("hi")
        assert "channel" not in mock_session.post.call_args[1]["json"]

    async def test_send_failure_status(self) -> None:
        ch = SlackChannel(_slack_config())
        _attach_session(ch, _mock_response(404, "no_service"))

        assert await ch.send("hi") is False

    async def test_send_exception(self) -> None:
        ch = SlackChannel(_slack_config())
        mock_session = MagicMock()
        mock_session.post = MagicMock(side_effect=ConnectionError("network down"))
        mock_session.closed = False
        ch._session = mock_session

        assert await ch.send("hi") is False

    async def test_missing_webhook(self) -> None:
        ch = SlackChannel(_slack_config(webhook_url=SecretStr("")))
        mock_session = _attach_session(ch, _mock_response(200))

        assert await ch.send("hi") is False
        mock_session.post.assert_not_called()

    async def test_close_session(self) -> None:
        ch = SlackChannel(_slack_config())
        mock_session = MagicMock()
        mock_session.closed = False
        mock_session.close = AsyncMock()
        ch._session = mock_session

        await ch.close()
        mock_session.close.assert_called_once()
        assert ch._session is None

    async def test_close_without_session(self) -> None:
        ch = SlackChannel(_slack_config())
        await ch.close()


class TestFactory:
    def test_disabled_by_default(self) -> None:
        assert create_channels(AlertsConfig()) == []

    def test_slack_enabled(self) -> None:
        channels = create_channels(AlertsConfig(slack=_slack_config()))
        assert len(channels) == 1
        assert isinstance(channels[0], SlackChannel)

    def test_publisher_wiring(self) -> None:
        publisher = create_publisher(AlertsConfig(slack=_slack_config()), company="Piper's Farm")
        assert len(publisher.channels) == 1

    def test_publisher_department_channels(self) -> None:
        config = AlertsConfig(slack=_slack_config(finance_channel="#finance", marketing_channel="#marketing"))
        publisher = create_publisher(config)
        assert publisher.department_channels == {
            Department.FINANCE: "#finance",
            Department.MARKETING: "#marketing",
        }

    def test_department_channels_ignored_when_slack_disabled(self) -> None:
        config = AlertsConfig(slack=_slack_config(enabled=False, finance_channel="#finance"))
        assert create_publisher(config).department_channels == {}
