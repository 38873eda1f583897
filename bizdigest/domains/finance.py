"""Finance aggregator — sales totals, margins and top products."""

from __future__ import annotations

import asyncio
import datetime
from collections.abc import Iterable

import structlog

from bizdigest.core.config import ThresholdConfig
from bizdigest.core.types import (
    FinanceReport,
    MarginSection,
    OrderRecord,
    ProductSales,
    ReportType,
    SalesSection,
    SalesSummary,
    Window,
    day_window,
    trailing_window,
)
from bizdigest.domains.thresholds import classify_finance
from bizdigest.domains.trend import classify_trend, compare, percent_change
from bizdigest.sources.base import SalesSource

logger = structlog.stdlib.get_logger()

# Unit cost assumed as a share of price when the platform carries no cost.
DEFAULT_COST_RATIO = 0.6

TOP_PRODUCTS_LIMIT = 10

COMPARISON_FIELDS = (
    "total_revenue",
    "total_orders",
    "average_order_value",
    "margin_percentage",
)


def summarize_orders(orders: Iterable[OrderRecord]) -> SalesSummary:
    """Fold orders into a SalesSummary in a single pass.

    Revenue is the sum of order totals; cost is the sum of line quantity ×
    unit cost. Top products are ranked by line revenue with a stable sort, so
    products with equal revenue keep their first-seen order.
    """
    total_orders = 0
    total_revenue = 0.0
    total_cost = 0.0
    products: dict[str, tuple[int, float]] = {}

    for order in orders:
        total_orders += 1
        total_revenue += order.total_price
        for item in order.line_items:
            unit_cost = item.unit_cost
            if unit_cost is None:
                unit_cost = item.price * DEFAULT_COST_RATIO
            total_cost += item.quantity * unit_cost

            quantity, revenue = products.get(item.name, (0, 0.0))
            products[item.name] = (quantity + item.quantity, revenue + item.quantity * item.price)

    ranked = sorted(products.items(), key=lambda entry: entry[1][1], reverse=True)
    gross_margin = total_revenue - total_cost

    return SalesSummary(
        total_orders=total_orders,
        total_revenue=total_revenue,
        total_cost=total_cost,
        gross_margin=gross_margin,
        margin_percentage=gross_margin / total_revenue * 100 if total_revenue > 0 else 0.0,
        average_order_value=total_revenue / total_orders if total_orders > 0 else 0.0,
        top_products=[
            ProductSales(name=name, quantity_sold=quantity, revenue=revenue)
            for name, (quantity, revenue) in ranked[:TOP_PRODUCTS_LIMIT]
        ],
    )


def build_finance_report(
    day: datetime.date,
    period: ReportType,
    current: SalesSummary,
    previous: SalesSummary,
    thresholds: ThresholdConfig,
) -> FinanceReport:
    """Compare two sales summaries and classify the result."""
    revenue_change_pct = percent_change(current.total_revenue, previous.total_revenue)
    aov_change_pct = percent_change(current.average_order_value, previous.average_order_value)

    alerts = classify_finance(
        {
            "revenue_drop_percentage": -revenue_change_pct,
            "margin_percentage": current.margin_percentage,
            "aov_drop_percentage": -aov_change_pct,
        },
        thresholds,
    )

    return FinanceReport(
        date=day,
        period=period,
        sales=SalesSection(
            total_revenue=current.total_revenue,
            total_orders=current.total_orders,
            average_order_value=current.average_order_value,
            previous_period_revenue=previous.total_revenue,
            revenue_change=current.total_revenue - previous.total_revenue,
            revenue_change_percentage=revenue_change_pct,
            aov_change_percentage=aov_change_pct,
            revenue_trend=classify_trend(current.total_revenue, previous.total_revenue),
        ),
        margins=MarginSection(
            total_cost=current.total_cost,
            gross_margin=current.gross_margin,
            margin_percentage=current.margin_percentage,
        ),
        top_products=current.top_products,
        comparison=compare(current, previous, COMPARISON_FIELDS),
        alerts=alerts,
    )


class FinanceAggregator:
    """Fetches orders for the current and comparison windows and builds reports."""

    def __init__(self, source: SalesSource) -> None:
        self._source = source

    async def summarize(self, window: Window) -> SalesSummary:
        orders = await self._source.fetch_orders(window)
        summary = summarize_orders(orders)
        logger.info(
            "sales_summarized",
            start=window.start.isoformat(),
            end=window.end.isoformat(),
            orders=summary.total_orders,
            revenue=round(summary.total_revenue, 2),
        )
        return summary

    async def daily_report(
        self,
        day: datetime.date,
        thresholds: ThresholdConfig,
        tz: datetime.tzinfo = datetime.UTC,
    ) -> FinanceReport:
        """*day* against the calendar day before it."""
        current, previous = await asyncio.gather(
            self.summarize(day_window(day, tz)),
            self.summarize(day_window(day - datetime.timedelta(days=1), tz)),
        )
        return self._finish(build_finance_report(day, ReportType.DAILY, current, previous, thresholds))

    async def weekly_report(
        self,
        end_day: datetime.date,
        thresholds: ThresholdConfig,
        tz: datetime.tzinfo = datetime.UTC,
    ) -> FinanceReport:
        """The 7 days ending *end_day* against the 7 days before them."""
        current, previous = await asyncio.gather(
            self.summarize(trailing_window(end_day, 7, tz)),
            self.summarize(trailing_window(end_day - datetime.timedelta(days=7), 7, tz)),
        )
        return self._finish(
            build_finance_report(end_day, ReportType.WEEKLY, current, previous, thresholds)
        )

    @staticmethod
    def _finish(report: FinanceReport) -> FinanceReport:
        logger.info(
            "finance_report_built",
            period=report.period,
            date=report.date.isoformat(),
            revenue_change_pct=round(report.sales.revenue_change_percentage, 2),
            alerts=len(report.alerts),
        )
        return report
