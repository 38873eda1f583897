"""Shared text helpers for the markdown and chat renderers."""

from __future__ import annotations

import datetime

from bizdigest.core.types import Priority, ReportType, Severity, Trend

SEVERITY_MARKERS: dict[Severity, str] = {
    Severity.CRITICAL: "🚨",
    Severity.WARNING: "⚠️",
    Severity.INFO: "ℹ️",
}

PRIORITY_MARKERS: dict[Priority, str] = {
    Priority.HIGH: "🔴",
    Priority.MEDIUM: "🟡",
    Priority.LOW: "🟢",
}

TREND_MARKERS: dict[Trend, str] = {
    Trend.UP: "📈",
    Trend.DOWN: "📉",
    Trend.STABLE: "➡️",
}


def money(value: float, decimals: int = 2) -> str:
    """Pounds sterling with thousands separators: ``£84,210.50``."""
    return f"£{value:,.{decimals}f}"


def quantity(value: float) -> str:
    """Whole quantities without a trailing ``.0``."""
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.2f}"


def signed_pct(value: float) -> str:
    return f"{value:+.1f}%"


def long_date(day: datetime.date) -> str:
    """``Monday, March 4, 2024``."""
    return f"{day:%A, %B} {day.day}, {day.year}"


def titled(company: str, title: str) -> str:
    return f"{company} {title}" if company else title


def period_noun(report_type: ReportType) -> str:
    return "day" if report_type == ReportType.DAILY else "week"
