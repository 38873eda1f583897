"""Klaviyo adapter — campaigns sent in a window with their statistics."""

from __future__ import annotations

import asyncio
import datetime
from typing import Any

import structlog

from bizdigest.core.config import KlaviyoConfig, get_settings
from bizdigest.core.convert import normalize_date, normalize_percentage, safe_get
from bizdigest.core.types import CampaignRecord, Window
from bizdigest.sources.base import CampaignSource, HttpSource, expect_list
from bizdigest.sources.exceptions import SourceError

logger = structlog.stdlib.get_logger()


def _utc(moment: datetime.datetime) -> str:
    return moment.astimezone(datetime.UTC).isoformat()


def _parse_stats(attributes: Any) -> dict[str, Any]:
    if not isinstance(attributes, dict):
        return {}
    return {
        "recipients": attributes.get("estimated_recipient_count"),
        "opens": attributes.get("total_opens"),
        "unique_opens": attributes.get("unique_opens"),
        "clicks": attributes.get("total_clicks"),
        "unique_clicks": attributes.get("unique_clicks"),
        "open_rate": normalize_percentage(attributes.get("open_rate")),
        "click_rate": normalize_percentage(attributes.get("click_rate")),
        "revenue": attributes.get("attributed_revenue"),
    }


def _parse_campaign(raw: dict[str, Any], stats: dict[str, Any]) -> CampaignRecord:
    return CampaignRecord(
        campaign_id=str(raw.get("id") or ""),
        name=str(safe_get(raw, "attributes.name", "")).strip() or "Untitled Campaign",
        send_time=normalize_date(safe_get(raw, "attributes.send_time")) or "",
        **stats,
    )


class KlaviyoSource(HttpSource, CampaignSource):
    """JSON:API client; follows ``links.next`` and fetches stats per campaign."""

    name = "klaviyo"

    def __init__(self, config: KlaviyoConfig | None = None) -> None:
        cfg = config or get_settings().sources.klaviyo
        super().__init__(
            base_url=cfg.base_url,
            headers={
                "Authorization": f"Klaviyo-API-Key {cfg.private_key.get_secret_value()}",
                "Content-Type": "application/json",
                "revision": cfg.revision,
            },
            timeout_secs=cfg.timeout_secs,
        )

    async def fetch_campaigns(self, window: Window) -> list[CampaignRecord]:
        url: str | None = "/campaigns"
        params: dict[str, str] | None = {
            "filter": (
                f"greater-than(send_time,{_utc(window.start)}),"
                f"less-than(send_time,{_utc(window.end)})"
            ),
        }
        raw_campaigns: list[dict[str, Any]] = []

        while url:
            body = await self._get_json(url, params=params)
            raw_campaigns.extend(expect_list(body, self.name, "data"))
            url = safe_get(body, "links.next")
            params = None

        stats = await asyncio.gather(
            *(self.fetch_campaign_stats(str(raw.get("id") or "")) for raw in raw_campaigns)
        )
        campaigns = [_parse_campaign(raw, s) for raw, s in zip(raw_campaigns, stats, strict=True)]

        logger.info(
            "klaviyo_campaigns_fetched",
            count=len(campaigns),
            start=window.start.isoformat(),
            end=window.end.isoformat(),
        )
        return campaigns

    async def fetch_campaign_stats(self, campaign_id: str) -> dict[str, Any]:
        """Statistics for one campaign; empty (all zero) when the call fails."""
        try:
            body = await self._get_json(f"/campaign-recipient-estimations/{campaign_id}")
        except SourceError as exc:
            logger.warning("klaviyo_campaign_stats_failed", campaign_id=campaign_id, error=str(exc))
            return {}
        return _parse_stats(safe_get(body, "data.attributes"))
