"""Trend classification and period-over-period comparison."""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel

from bizdigest.core.types import ComparisonResult, MetricDelta, Trend

# Changes within ±5% of the previous value are "stable".
TREND_BAND_PERCENT = 5.0


def percent_change(current: float, previous: float) -> float:
    """Percentage change from *previous* to *current*; 0 when previous is 0."""
    if previous == 0:
        return 0.0
    return (current - previous) / previous * 100


def classify_trend(current: float, previous: float) -> Trend:
    """Classify the direction of *current* relative to *previous*.

    A zero baseline is always stable. Otherwise the change must exceed the
    band strictly: +5% exactly is still stable.
    """
    if previous == 0:
        return Trend.STABLE
    change = percent_change(current, previous)
    if change > TREND_BAND_PERCENT:
        return Trend.UP
    if change < -TREND_BAND_PERCENT:
        return Trend.DOWN
    return Trend.STABLE


def metric_delta(current: float, previous: float) -> MetricDelta:
    return MetricDelta(
        current=current,
        previous=previous,
        delta=current - previous,
        delta_percentage=percent_change(current, previous),
        trend=classify_trend(current, previous),
    )


def compare(
    current: BaseModel,
    previous: BaseModel,
    fields: Iterable[str],
) -> ComparisonResult:
    """Build a ComparisonResult over the named numeric fields of two summaries."""
    return ComparisonResult(
        metrics={
            name: metric_delta(
                float(getattr(current, name)),
                float(getattr(previous, name)),
            )
            for name in fields
        },
    )
