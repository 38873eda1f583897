"""Marketing aggregator — email campaign performance and revenue attribution."""

from __future__ import annotations

import asyncio
import datetime
from collections.abc import Iterable

import structlog

from bizdigest.core.config import ThresholdConfig
from bizdigest.core.types import (
    CampaignPerformance,
    CampaignRecord,
    CampaignSection,
    CampaignSummary,
    Domain,
    MarketingReport,
    MarketingSnapshot,
    PerformanceTrends,
    Window,
    day_window,
    trailing_window,
)
from bizdigest.domains.thresholds import classify_marketing, trend_alerts
from bizdigest.domains.trend import compare
from bizdigest.sources.base import CampaignSource

logger = structlog.stdlib.get_logger()

TOP_CAMPAIGNS_LIMIT = 5

COMPARISON_FIELDS = ("average_open_rate", "average_click_rate", "total_revenue")


def summarize_campaigns(records: Iterable[CampaignRecord]) -> CampaignSummary:
    """Totals, mean per-campaign rates and the top campaigns by revenue."""
    campaigns = list(records)
    count = len(campaigns)
    ranked = sorted(campaigns, key=lambda c: c.revenue, reverse=True)

    return CampaignSummary(
        total_campaigns=count,
        total_recipients=sum(c.recipients for c in campaigns),
        total_opens=sum(c.unique_opens for c in campaigns),
        total_clicks=sum(c.unique_clicks for c in campaigns),
        total_revenue=sum(c.revenue for c in campaigns),
        average_open_rate=sum(c.open_rate for c in campaigns) / count if count else 0.0,
        average_click_rate=sum(c.click_rate for c in campaigns) / count if count else 0.0,
        top_campaigns=[
            CampaignPerformance(
                name=c.name,
                revenue=c.revenue,
                open_rate=c.open_rate,
                click_rate=c.click_rate,
            )
            for c in ranked[:TOP_CAMPAIGNS_LIMIT]
        ],
    )


def campaign_roi(summary: CampaignSummary) -> float:
    """Attributed revenue per campaign, as a percentage figure."""
    if summary.total_revenue <= 0 or summary.total_campaigns == 0:
        return 0.0
    return summary.total_revenue / summary.total_campaigns * 100


def build_marketing_report(
    day: datetime.date,
    current: CampaignSummary,
    previous: CampaignSummary,
    thresholds: ThresholdConfig,
) -> MarketingReport:
    """Compare two campaign summaries; alerts cover rates, the top campaign and falling trends."""
    comparison = compare(current, previous, COMPARISON_FIELDS)
    trends = PerformanceTrends(
        open_rate_trend=comparison["average_open_rate"].trend,
        click_rate_trend=comparison["average_click_rate"].trend,
        revenue_trend=comparison["total_revenue"].trend,
    )

    values: dict[str, float] = {
        "average_open_rate": current.average_open_rate,
        "average_click_rate": current.average_click_rate,
    }
    top_name = ""
    if current.top_campaigns:
        values["top_campaign_revenue"] = current.top_campaigns[0].revenue
        top_name = current.top_campaigns[0].name

    alerts = classify_marketing(values, thresholds, top_campaign=top_name)
    alerts += trend_alerts(
        Domain.MARKETING,
        {"Open rate": trends.open_rate_trend, "Click rate": trends.click_rate_trend},
    )

    return MarketingReport(
        date=day,
        campaigns=CampaignSection(
            total_campaigns=current.total_campaigns,
            total_recipients=current.total_recipients,
            total_opens=current.total_opens,
            total_clicks=current.total_clicks,
            average_open_rate=current.average_open_rate,
            average_click_rate=current.average_click_rate,
            total_revenue=current.total_revenue,
            roi=campaign_roi(current),
        ),
        top_campaigns=current.top_campaigns,
        performance_trends=trends,
        comparison=comparison,
        alerts=alerts,
    )


def build_marketing_snapshot(day: datetime.date, summary: CampaignSummary) -> MarketingSnapshot:
    return MarketingSnapshot(
        date=day,
        campaigns_sent=summary.total_campaigns,
        average_open_rate=summary.average_open_rate,
        average_click_rate=summary.average_click_rate,
        revenue_attributed=summary.total_revenue,
    )


class MarketingAggregator:
    """Weekly campaign report with prior-week comparison, or a one-day snapshot."""

    def __init__(self, source: CampaignSource) -> None:
        self._source = source

    async def summarize(self, window: Window) -> CampaignSummary:
        campaigns = await self._source.fetch_campaigns(window)
        summary = summarize_campaigns(campaigns)
        logger.info(
            "campaigns_summarized",
            start=window.start.isoformat(),
            end=window.end.isoformat(),
            campaigns=summary.total_campaigns,
            revenue=round(summary.total_revenue, 2),
        )
        return summary

    async def weekly_report(
        self,
        end_day: datetime.date,
        thresholds: ThresholdConfig,
        tz: datetime.tzinfo = datetime.UTC,
    ) -> MarketingReport:
        current, previous = await asyncio.gather(
            self.summarize(trailing_window(end_day, 7, tz)),
            self.summarize(trailing_window(end_day - datetime.timedelta(days=7), 7, tz)),
        )
        report = build_marketing_report(end_day, current, previous, thresholds)
        logger.info("marketing_report_built", date=end_day.isoformat(), alerts=len(report.alerts))
        return report

    async def daily_snapshot(
        self,
        day: datetime.date,
        tz: datetime.tzinfo = datetime.UTC,
    ) -> MarketingSnapshot:
        """Campaigns sent the day before *day*. Snapshots carry no alerts."""
        summary = await self.summarize(day_window(day - datetime.timedelta(days=1), tz))
        return build_marketing_snapshot(day, summary)
