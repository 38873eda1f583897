"""Expanded markdown rendering — every section of every domain report."""

from __future__ import annotations

from bizdigest.core.types import (
    Alert,
    ComparisonResult,
    Digest,
    FinanceReport,
    MarketingReport,
    MarketingSnapshot,
    OperationsReport,
    ReportType,
)
from bizdigest.render.formatting import (
    PRIORITY_MARKERS,
    SEVERITY_MARKERS,
    TREND_MARKERS,
    long_date,
    money,
    period_noun,
    quantity,
    titled,
)

TOP_PRODUCTS_SHOWN = 5
PURCHASE_ORDERS_SHOWN = 5

_TITLES = {
    ReportType.DAILY: "Daily Executive Digest",
    ReportType.WEEKLY: "Weekly Executive Summary",
}


def _alert_lines(alerts: list[Alert], heading: str) -> list[str]:
    if not alerts:
        return []
    lines = [f"#### ⚠️ {heading}"]
    lines.extend(f"- {SEVERITY_MARKERS[a.severity]} {a.message}" for a in alerts)
    lines.append("")
    return lines


def _change_lines(comparison: ComparisonResult, heading: str, rows: list[tuple[str, str, str]]) -> list[str]:
    """One line per (label, metric, kind) row present in *comparison*.

    Percentage metrics show the change in points; counts and money show the
    relative change.
    """
    rows = [row for row in rows if row[1] in comparison.metrics]
    if not rows:
        return []
    lines = [f"#### {heading}"]
    for label, metric, kind in rows:
        delta = comparison[metric]
        if kind == "percent":
            lines.append(
                f"- {label}: {delta.previous:.1f}% → {delta.current:.1f}% ({delta.delta:+.1f} pts)"
            )
        else:
            fmt = money if kind == "money" else quantity
            lines.append(
                f"- {label}: {fmt(delta.previous)} → {fmt(delta.current)}"
                f" ({delta.delta_percentage:+.1f}%)"
            )
    lines.append("")
    return lines


# ── Domain sections ─────────────────────────────────────────────


def finance_section(report: FinanceReport) -> list[str]:
    sales = report.sales
    change = sales.revenue_change_percentage
    arrow = "↑" if change >= 0 else "↓"
    dot = "🟢" if change >= 0 else "🔴"
    noun = period_noun(report.period)

    lines = [
        "#### Sales Summary",
        f"- **Total Revenue**: {money(sales.total_revenue)}",
        f"- **Change**: {dot} {arrow} {abs(change):.1f}% vs previous {noun}"
        f" ({money(sales.previous_period_revenue)}) {TREND_MARKERS[sales.revenue_trend]}",
        f"- **Total Orders**: {sales.total_orders:,}",
        f"- **Average Order Value**: {money(sales.average_order_value)}"
        f" ({sales.aov_change_percentage:+.1f}%)",
        "",
        "#### Margins",
        f"- **Total Cost**: {money(report.margins.total_cost)}",
        f"- **Gross Margin**: {money(report.margins.gross_margin)}",
        f"- **Margin %**: {report.margins.margin_percentage:.1f}%",
        "",
    ]

    lines += _change_lines(
        report.comparison,
        f"vs Previous {noun.title()}",
        [
            ("Orders", "total_orders", "count"),
            ("Average Order Value", "average_order_value", "money"),
            ("Margin", "margin_percentage", "percent"),
        ],
    )

    if report.top_products:
        lines.append("#### Top Products")
        for rank, product in enumerate(report.top_products[:TOP_PRODUCTS_SHOWN], start=1):
            lines.append(
                f"{rank}. **{product.name}** - {product.quantity_sold:,} units,"
                f" {money(product.revenue)}"
            )
        lines.append("")

    lines.extend(_alert_lines(report.alerts, "Alerts"))
    return lines


def operations_section(report: OperationsReport) -> list[str]:
    stock = report.stock
    production = report.production
    warehouse = report.warehouse

    lines = [
        "#### Stock Summary",
        f"- **Total Stock Value**: {money(stock.total_value)}",
        f"- **Total Items**: {stock.total_items:,}",
        f"- **Items Below Reorder**: {stock.items_below_reorder}",
        "",
    ]

    if stock.reorder_alerts:
        lines.append(f"#### 🔔 Reorder Alerts (Top {len(stock.reorder_alerts)})")
        for alert in stock.reorder_alerts:
            lines.append(
                f"- **{alert.product}**: {quantity(alert.current)} units"
                f" (reorder at {quantity(alert.reorder_level)},"
                f" {quantity(alert.on_order)} on order)"
            )
        lines.append("")

    lines += [
        "#### Production & Yields",
        f"- **Window**: {production.window_start.isoformat()} to {production.window_end.isoformat()}",
        f"- **Total Batches**: {production.total_batches}",
        f"- **Average Yield**: {production.average_yield_percentage:.1f}%"
        f" {TREND_MARKERS[production.yield_trend]}",
        f"- **Waste**: {production.waste_percentage:.1f}%",
        "",
    ]

    lines += _change_lines(
        report.comparison,
        "vs Previous Yield Window",
        [
            ("Average Yield", "average_yield_percentage", "percent"),
            ("Waste", "waste_percentage", "percent"),
            ("Batches", "total_batches", "count"),
        ],
    )

    if production.yield_by_product:
        lines.append("#### Yield by Product Type")
        for name, rollup in production.yield_by_product.items():
            lines.append(
                f"- **{name}**: {rollup.yield_percentage:.1f}% ({rollup.batches} batches)"
            )
        lines.append("")

    if production.yield_alerts:
        lines.append("#### Low-Yield Batches")
        for batch in production.yield_alerts:
            lines.append(
                f"- **{batch.batch_id}** ({batch.product_type}):"
                f" {batch.yield_percentage:.1f}% on {batch.date}"
            )
        lines.append("")

    lines += [
        "#### Warehouse Dispatch",
        f"- **Total Dispatches**: {warehouse.total_dispatches}",
        f"- **Completed**: {warehouse.completed}",
        f"- **Pending**: {warehouse.pending}",
        f"- **In Progress**: {warehouse.in_progress}",
        f"- **Items Dispatched**: {warehouse.total_items_dispatched:,}",
        f"- **Completion Rate**: {warehouse.completion_rate:.1f}%",
        "",
    ]

    if report.purchase_orders:
        lines.append("#### Open Purchase Orders")
        for po in report.purchase_orders[:PURCHASE_ORDERS_SHOWN]:
            lines.append(
                f"- **{po.po_number}** - {po.supplier} - {money(po.value)}"
                f" (Expected: {po.expected_date})"
            )
        lines.append("")

    lines.extend(_alert_lines(report.alerts, "Alerts"))
    return lines


def marketing_section(report: MarketingReport | MarketingSnapshot) -> list[str]:
    if isinstance(report, MarketingSnapshot):
        return [
            "#### Campaign Snapshot",
            f"- **Campaigns Sent**: {report.campaigns_sent}",
            f"- **Average Open Rate**: {report.average_open_rate:.1f}%",
            f"- **Average Click Rate**: {report.average_click_rate:.1f}%",
            f"- **Revenue Attributed**: {money(report.revenue_attributed)}",
            "",
        ]

    campaigns = report.campaigns
    trends = report.performance_trends
    lines = [
        f"#### Campaign Performance ({report.period})",
        f"- **Total Campaigns**: {campaigns.total_campaigns}",
        f"- **Total Recipients**: {campaigns.total_recipients:,}",
        f"- **Average Open Rate**: {campaigns.average_open_rate:.1f}%"
        f" {TREND_MARKERS[trends.open_rate_trend]}",
        f"- **Average Click Rate**: {campaigns.average_click_rate:.1f}%"
        f" {TREND_MARKERS[trends.click_rate_trend]}",
        f"- **Revenue Attributed**: {money(campaigns.total_revenue)}"
        f" {TREND_MARKERS[trends.revenue_trend]}",
        f"- **ROI**: {campaigns.roi:,.1f}%",
        "",
    ]

    if report.top_campaigns:
        lines.append("#### Top Campaigns")
        for rank, campaign in enumerate(report.top_campaigns, start=1):
            lines += [
                f"{rank}. **{campaign.name}**",
                f"   - Revenue: {money(campaign.revenue)}",
                f"   - Open Rate: {campaign.open_rate:.1f}%",
                f"   - Click Rate: {campaign.click_rate:.1f}%",
            ]
        lines.append("")

    comparison = report.comparison
    if comparison.metrics:
        open_rate = comparison["average_open_rate"]
        click_rate = comparison["average_click_rate"]
        revenue = comparison["total_revenue"]
        lines += [
            "#### Week-over-Week Comparison",
            f"- Open Rate: {open_rate.previous:.1f}% → {open_rate.current:.1f}%",
            f"- Click Rate: {click_rate.previous:.1f}% → {click_rate.current:.1f}%",
            f"- Revenue: {money(revenue.previous)} → {money(revenue.current)}",
            "",
        ]

    lines.extend(_alert_lines(report.alerts, "Alerts & Insights"))
    return lines


# ── Digest ──────────────────────────────────────────────────────


def render_markdown(digest: Digest, company: str = "") -> str:
    """Render the full digest: header, one section per domain, then action items."""
    lines = [
        f"# {titled(company, _TITLES[digest.type])}",
        f"**{long_date(digest.date)}**",
        "",
        "## Executive Summary",
        "",
        f"- **Critical Alerts**: {len(digest.alerts.critical)}",
        f"- **Warnings**: {len(digest.alerts.warning)}",
        f"- **Action Items**: {len(digest.actions)}",
        "",
        "### 💰 Finance",
        *finance_section(digest.reports.finance),
        "---",
        "",
        "### 🏭 Operations",
        *operations_section(digest.reports.operations),
        "---",
        "",
        "### 📧 Marketing",
        *marketing_section(digest.reports.marketing),
        "---",
        "",
    ]

    if digest.actions:
        lines += ["## 📋 Action Items", ""]
        for index, action in enumerate(digest.actions, start=1):
            lines.append(
                f"{index}. {PRIORITY_MARKERS[action.priority]}"
                f" **[{action.department.upper()}]** {action.description}"
            )
        lines.append("")

    return "\n".join(lines)
