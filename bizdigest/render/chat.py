"""Compact chat-message rendering (Slack mrkdwn)."""

from __future__ import annotations

from bizdigest.core.types import Alert, Department, Digest, MarketingSnapshot, ReportType
from bizdigest.executive.actions import sort_by_priority
from bizdigest.render.formatting import (
    PRIORITY_MARKERS,
    SEVERITY_MARKERS,
    long_date,
    money,
    signed_pct,
    titled,
)

# Display markers only; alerting boundaries live in the threshold config.
YIELD_MARKER_BELOW = 80.0
CTR_MARKER_ABOVE = 2.5
ACTIONS_SHOWN = 3

_TITLES = {
    ReportType.DAILY: "🌅 Daily Report",
    ReportType.WEEKLY: "📊 Weekly Summary",
}


def metric_lines(digest: Digest) -> list[str]:
    """The fixed four-line key metrics block."""
    summary = digest.summary
    sales_marker = "📈" if summary.sales.change_percentage >= 0 else "📉"

    stock = f"• Stock: £{summary.stock.value / 1000:,.0f}k"
    if summary.stock.items_to_reorder > 0:
        stock += f" ⚠️ {summary.stock.items_to_reorder} items to reorder"

    production = f"• Yield: {summary.production.yield_percentage:.1f}%"
    if summary.production.yield_percentage < YIELD_MARKER_BELOW:
        production += " 🔴"

    ctr = f"• Campaign CTR: {summary.marketing.click_rate:.1f}%"
    if summary.marketing.click_rate > CTR_MARKER_ABOVE:
        ctr += " 🎯"

    return [
        f"• Sales: {money(summary.sales.revenue, 0)}"
        f" ({signed_pct(summary.sales.change_percentage)}) {sales_marker}",
        stock,
        production,
        ctr,
    ]


def render_chat_message(digest: Digest, company: str = "") -> str:
    """Title, key metrics, every critical alert and the top actions by priority."""
    lines = [
        f"*{titled(company, _TITLES[digest.type])}* – {long_date(digest.date)}",
        "",
        "*Key Metrics:*",
        *metric_lines(digest),
    ]

    if digest.alerts.critical:
        lines += ["", "🚨 *Critical Alerts:*"]
        lines.extend(f"• {alert.message}" for alert in digest.alerts.critical)

    if digest.actions:
        lines += ["", "✅ *Action Items:*"]
        for action in sort_by_priority(digest.actions)[:ACTIONS_SHOWN]:
            lines.append(f"• [{action.department.upper()}] {action.description}")

    return "\n".join(lines) + "\n"


# ── Alert pushes and department reports ─────────────────────────

_DEPARTMENT_TITLES = {
    Department.FINANCE: "💰 Finance Update",
    Department.OPERATIONS: "🏭 Operations Update",
    Department.MARKETING: "📧 Marketing Update",
}


def render_alert_message(alert: Alert) -> str:
    """Single-alert push: ``🚨 *[CRITICAL]* <message>``."""
    return f"{SEVERITY_MARKERS[alert.severity]} *[{alert.severity.upper()}]* {alert.message}"


def department_alerts(digest: Digest, department: Department) -> list[Alert]:
    """Alerts raised by the domain report a department owns."""
    reports = digest.reports
    if department == Department.FINANCE:
        return list(reports.finance.alerts)
    if department == Department.OPERATIONS:
        return list(reports.operations.alerts)
    if isinstance(reports.marketing, MarketingSnapshot):
        return []
    return list(reports.marketing.alerts)


def render_department_message(digest: Digest, department: Department, company: str = "") -> str:
    """One department's alerts and action items, for its own channel."""
    lines = [f"*{titled(company, _DEPARTMENT_TITLES[department])}* – {long_date(digest.date)}"]

    alerts = department_alerts(digest, department)
    if alerts:
        lines += ["", "*Alerts:*"]
        lines.extend(f"• {SEVERITY_MARKERS[a.severity]} {a.message}" for a in alerts)

    actions = [a for a in sort_by_priority(digest.actions) if a.department == department]
    if actions:
        lines += ["", "✅ *Action Items:*"]
        lines.extend(f"• {PRIORITY_MARKERS[a.priority]} {a.description}" for a in actions)

    if not alerts and not actions:
        lines += ["", "No alerts or actions."]

    return "\n".join(lines) + "\n"
