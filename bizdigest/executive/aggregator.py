"""Executive aggregator — fans out to the domain aggregators and builds the digest.

Both flows fetch their three domain reports concurrently and wait for all of
them. A digest is either complete or not produced: if any branch fails the
whole call raises :class:`DigestGenerationError` naming every failed domain.
"""

from __future__ import annotations

import asyncio
import datetime
from collections.abc import Awaitable, Iterable
from typing import Any
from zoneinfo import ZoneInfo

import structlog

from bizdigest.core.config import ThresholdConfig
from bizdigest.core.types import (
    Alert,
    AlertBuckets,
    Digest,
    DigestReports,
    DigestSummary,
    Domain,
    FinanceReport,
    MarketingHeadline,
    MarketingReport,
    MarketingSnapshot,
    OperationsReport,
    ProductionHeadline,
    ReportType,
    SalesHeadline,
    Severity,
    StockHeadline,
)
from bizdigest.domains.finance import FinanceAggregator
from bizdigest.domains.marketing import MarketingAggregator
from bizdigest.domains.operations import OperationsAggregator
from bizdigest.executive.actions import synthesize_actions
from bizdigest.executive.exceptions import DigestGenerationError, DomainUnavailableError

logger = structlog.stdlib.get_logger()


def partition_alerts(alerts: Iterable[Alert]) -> AlertBuckets:
    """Split alerts into critical and warning buckets, keeping input order.

    Info alerts are not promoted; they stay in their domain report.
    """
    critical: list[Alert] = []
    warning: list[Alert] = []
    for alert in alerts:
        if alert.severity == Severity.CRITICAL:
            critical.append(alert)
        elif alert.severity == Severity.WARNING:
            warning.append(alert)
    return AlertBuckets(critical=critical, warning=warning)


def _marketing_headline(marketing: MarketingReport | MarketingSnapshot) -> MarketingHeadline:
    if isinstance(marketing, MarketingSnapshot):
        return MarketingHeadline(
            campaigns=marketing.campaigns_sent,
            open_rate=marketing.average_open_rate,
            click_rate=marketing.average_click_rate,
            revenue=marketing.revenue_attributed,
        )
    return MarketingHeadline(
        campaigns=marketing.campaigns.total_campaigns,
        open_rate=marketing.campaigns.average_open_rate,
        click_rate=marketing.campaigns.average_click_rate,
        revenue=marketing.campaigns.total_revenue,
    )


def build_digest(
    day: datetime.date,
    report_type: ReportType,
    finance: FinanceReport,
    operations: OperationsReport,
    marketing: MarketingReport | MarketingSnapshot,
    thresholds: ThresholdConfig,
) -> Digest:
    """Merge three domain reports into a digest.

    Alerts are concatenated finance, operations, then marketing (a daily
    snapshot carries none). Actions consider marketing only when a full
    marketing report is present.
    """
    full_marketing = marketing if isinstance(marketing, MarketingReport) else None
    alerts = [*finance.alerts, *operations.alerts]
    if full_marketing is not None:
        alerts.extend(full_marketing.alerts)

    return Digest(
        date=day,
        type=report_type,
        summary=DigestSummary(
            sales=SalesHeadline(
                revenue=finance.sales.total_revenue,
                change_percentage=finance.sales.revenue_change_percentage,
                orders=finance.sales.total_orders,
                margin_percentage=finance.margins.margin_percentage,
            ),
            stock=StockHeadline(
                value=operations.stock.total_value,
                items_to_reorder=operations.stock.items_below_reorder,
            ),
            production=ProductionHeadline(
                yield_percentage=operations.production.average_yield_percentage,
                waste_percentage=operations.production.waste_percentage,
                batches=operations.production.total_batches,
            ),
            marketing=_marketing_headline(marketing),
        ),
        alerts=partition_alerts(alerts),
        actions=synthesize_actions(finance, operations, full_marketing, thresholds),
        reports=DigestReports(finance=finance, operations=operations, marketing=marketing),
    )


async def _guard(domain: Domain, branch: Awaitable[Any]) -> Any:
    try:
        return await branch
    except Exception as exc:
        raise DomainUnavailableError(domain, exc) from exc


class ExecutiveAggregator:
    """Produces daily digests and weekly summaries.

    Usage::

        executive = ExecutiveAggregator(finance, operations, marketing, thresholds)
        digest = await executive.daily_digest(datetime.date(2024, 3, 4))
    """

    def __init__(
        self,
        finance: FinanceAggregator,
        operations: OperationsAggregator,
        marketing: MarketingAggregator,
        thresholds: ThresholdConfig,
        timezone: str | datetime.tzinfo = "UTC",
        yield_window_days: int = 7,
    ) -> None:
        self._finance = finance
        self._operations = operations
        self._marketing = marketing
        self._thresholds = thresholds
        self._tz = ZoneInfo(timezone) if isinstance(timezone, str) else timezone
        self._yield_window_days = yield_window_days

    @property
    def thresholds(self) -> ThresholdConfig:
        return self._thresholds

    def today(self) -> datetime.date:
        """Current date in the reporting timezone."""
        return datetime.datetime.now(self._tz).date()

    async def daily_digest(self, day: datetime.date | None = None) -> Digest:
        """Digest for *day* (default: yesterday).

        Finance compares against the previous day, operations uses the
        trailing yield window and marketing contributes a one-day snapshot.
        """
        day = day or self.today() - datetime.timedelta(days=1)
        logger.info("digest_started", type=ReportType.DAILY, date=day.isoformat())

        reports = await self._fan_in(
            {
                Domain.FINANCE: self._finance.daily_report(day, self._thresholds, self._tz),
                Domain.OPERATIONS: self._operations_report(day),
                Domain.MARKETING: self._marketing.daily_snapshot(day, self._tz),
            }
        )
        return self._finish(
            build_digest(
                day,
                ReportType.DAILY,
                reports[Domain.FINANCE],
                reports[Domain.OPERATIONS],
                reports[Domain.MARKETING],
                self._thresholds,
            )
        )

    async def weekly_digest(self, end_day: datetime.date | None = None) -> Digest:
        """Summary for the 7 days ending *end_day* (default: today).

        Operations is the daily report for *end_day*; finance and marketing
        compare against the preceding 7 days.
        """
        end_day = end_day or self.today()
        logger.info("digest_started", type=ReportType.WEEKLY, date=end_day.isoformat())

        reports = await self._fan_in(
            {
                Domain.FINANCE: self._finance.weekly_report(end_day, self._thresholds, self._tz),
                Domain.OPERATIONS: self._operations_report(end_day),
                Domain.MARKETING: self._marketing.weekly_report(
                    end_day, self._thresholds, self._tz
                ),
            }
        )
        return self._finish(
            build_digest(
                end_day,
                ReportType.WEEKLY,
                reports[Domain.FINANCE],
                reports[Domain.OPERATIONS],
                reports[Domain.MARKETING],
                self._thresholds,
            )
        )

    def _operations_report(self, day: datetime.date) -> Awaitable[OperationsReport]:
        return self._operations.daily_report(
            day,
            self._thresholds,
            self._tz,
            yield_window_days=self._yield_window_days,
        )

    async def _fan_in(self, branches: dict[Domain, Awaitable[Any]]) -> dict[Domain, Any]:
        """Run every branch to completion; raise if any of them failed."""
        results = await asyncio.gather(
            *(_guard(domain, branch) for domain, branch in branches.items()),
            return_exceptions=True,
        )

        failures: list[DomainUnavailableError] = []
        for result in results:
            if isinstance(result, DomainUnavailableError):
                failures.append(result)
            elif isinstance(result, BaseException):
                raise result

        if failures:
            for failure in failures:
                logger.error(
                    "domain_unavailable",
                    domain=failure.domain,
                    error=str(failure.cause),
                    error_type=type(failure.cause).__name__,
                )
            raise DigestGenerationError(
                {failure.domain: failure.cause for failure in failures}
            ) from failures[0]

        return dict(zip(branches, results, strict=True))

    @staticmethod
    def _finish(digest: Digest) -> Digest:
        logger.info(
            "digest_generated",
            type=digest.type,
            date=digest.date.isoformat(),
            critical=len(digest.alerts.critical),
            warning=len(digest.alerts.warning),
            actions=len(digest.actions),
        )
        return digest
