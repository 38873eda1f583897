"""Threshold / alert engine — pure classification of metric values.

Each metric has a fixed direction (alert when BELOW or ABOVE a boundary) and
an ordered list of tiers. Tiers are checked most-severe first and the first
one that fires is the only alert for that metric, so a metric past its
critical boundary never also reports a warning.

Count rules (e.g. items below reorder level) fire at WARNING whenever the
count is positive. Output order follows rule order, not severity.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import StrEnum

import structlog
from pydantic import BaseModel

from bizdigest.core.config import ThresholdConfig
from bizdigest.core.types import Alert, AlertType, Domain, Severity, Trend

logger = structlog.stdlib.get_logger()


class Direction(StrEnum):
    """Side of the boundary on which a metric is considered unhealthy."""

    BELOW = "below"
    ABOVE = "above"


@dataclass(frozen=True)
class Tier:
    """One severity level of a threshold rule."""

    severity: Severity
    threshold_key: str
    message: str


@dataclass(frozen=True)
class ThresholdRule:
    """Compare a metric against one or more configured boundaries."""

    metric: str
    alert_type: AlertType
    direction: Direction
    tiers: tuple[Tier, ...]


@dataclass(frozen=True)
class CountRule:
    """Warn whenever a count metric is non-zero."""

    metric: str
    alert_type: AlertType
    message: str


Rule = ThresholdRule | CountRule


# ── Rule tables ─────────────────────────────────────────────────

FINANCE_RULES: tuple[Rule, ...] = (
    ThresholdRule(
        metric="revenue_drop_percentage",
        alert_type=AlertType.REVENUE_DROP,
        direction=Direction.ABOVE,
        tiers=(
            Tier(
                Severity.WARNING,
                "revenue_drop_alert_percentage",
                "Revenue dropped by {value:.1f}% compared to previous period",
            ),
        ),
    ),
    ThresholdRule(
        metric="margin_percentage",
        alert_type=AlertType.MARGIN_LOW,
        direction=Direction.BELOW,
        tiers=(
            Tier(
                Severity.CRITICAL,
                "margin_critical_percentage",
                "Margin critically low at {value:.1f}%",
            ),
            Tier(
                Severity.WARNING,
                "margin_warning_percentage",
                "Margin below target at {value:.1f}%",
            ),
        ),
    ),
    ThresholdRule(
        metric="aov_drop_percentage",
        alert_type=AlertType.AOV_DROP,
        direction=Direction.ABOVE,
        tiers=(
            Tier(
                Severity.INFO,
                "aov_drop_alert_percentage",
                "Average order value dropped by {value:.1f}%",
            ),
        ),
    ),
)

OPERATIONS_RULES: tuple[Rule, ...] = (
    ThresholdRule(
        metric="total_stock_value",
        alert_type=AlertType.STOCK_VALUE_LOW,
        direction=Direction.BELOW,
        tiers=(
            Tier(
                Severity.CRITICAL,
                "stock_value_critical",
                "Stock value critically low at £{value:,.0f}",
            ),
            Tier(
                Severity.WARNING,
                "stock_value_warning",
                "Stock value below target at £{value:,.0f}",
            ),
        ),
    ),
    CountRule(
        metric="items_below_reorder",
        alert_type=AlertType.REORDER_REQUIRED,
        message="{count} items below reorder level",
    ),
    ThresholdRule(
        metric="average_yield_percentage",
        alert_type=AlertType.YIELD_LOW,
        direction=Direction.BELOW,
        tiers=(
            Tier(
                Severity.CRITICAL,
                "yield_critical_percentage",
                "Average yield critically low at {value:.1f}%",
            ),
            Tier(
                Severity.WARNING,
                "yield_warning_percentage",
                "Average yield below target at {value:.1f}%",
            ),
        ),
    ),
    ThresholdRule(
        metric="waste_percentage",
        alert_type=AlertType.WASTE_HIGH,
        direction=Direction.ABOVE,
        tiers=(
            Tier(
                Severity.CRITICAL,
                "waste_critical_percentage",
                "Waste percentage critically high at {value:.1f}%",
            ),
            Tier(
                Severity.WARNING,
                "waste_warning_percentage",
                "Waste percentage above target at {value:.1f}%",
            ),
        ),
    ),
    ThresholdRule(
        metric="completion_rate",
        alert_type=AlertType.DISPATCH_DELAYED,
        direction=Direction.BELOW,
        tiers=(
            Tier(
                Severity.WARNING,
                "dispatch_completion_warning",
                "Dispatch completion rate at {value:.1f}%",
            ),
        ),
    ),
)

MARKETING_RULES: tuple[Rule, ...] = (
    ThresholdRule(
        metric="average_open_rate",
        alert_type=AlertType.LOW_OPEN_RATE,
        direction=Direction.BELOW,
        tiers=(
            Tier(
                Severity.CRITICAL,
                "open_rate_critical",
                "Average open rate critically low at {value:.1f}%",
            ),
            Tier(
                Severity.WARNING,
                "open_rate_warning",
                "Average open rate below target at {value:.1f}%",
            ),
        ),
    ),
    ThresholdRule(
        metric="average_click_rate",
        alert_type=AlertType.LOW_CLICK_RATE,
        direction=Direction.BELOW,
        tiers=(
            Tier(
                Severity.CRITICAL,
                "click_rate_critical",
                "Average click rate critically low at {value:.1f}%",
            ),
            Tier(
                Severity.WARNING,
                "click_rate_warning",
                "Average click rate below target at {value:.1f}%",
            ),
        ),
    ),
    ThresholdRule(
        metric="top_campaign_revenue",
        alert_type=AlertType.HIGH_PERFORMING_CAMPAIGN,
        direction=Direction.ABOVE,
        tiers=(
            Tier(
                Severity.INFO,
                "high_performing_campaign_revenue",
                'Top campaign "{top_campaign}" generated £{value:,.2f}',
            ),
        ),
    ),
)


# ── Evaluation ──────────────────────────────────────────────────


def breaches(value: float, boundary: float, direction: Direction) -> bool:
    """Strict comparison: a value equal to the boundary does not breach."""
    if direction == Direction.BELOW:
        return value < boundary
    return value > boundary


def evaluate_rule(
    domain: Domain,
    rule: Rule,
    value: float,
    thresholds: BaseModel,
    context: Mapping[str, object],
) -> Alert | None:
    """Return the single alert a rule produces for *value*, if any."""
    if isinstance(rule, CountRule):
        if value > 0:
            return Alert(
                domain=domain,
                type=rule.alert_type,
                message=rule.message.format(count=int(value), **context),
                severity=Severity.WARNING,
            )
        return None

    for tier in rule.tiers:
        boundary = float(getattr(thresholds, tier.threshold_key))
        if breaches(value, boundary, rule.direction):
            return Alert(
                domain=domain,
                type=rule.alert_type,
                message=tier.message.format(value=value, threshold=boundary, **context),
                severity=tier.severity,
            )
    return None


def classify(
    domain: Domain,
    values: Mapping[str, float],
    rules: Sequence[Rule],
    thresholds: BaseModel,
    context: Mapping[str, object] | None = None,
) -> list[Alert]:
    """Map metric values to alerts using *rules* and a domain's thresholds.

    Args:
        domain: Domain stamped on every alert.
        values: Metric name → current value.
        rules: Rules evaluated in order.
        thresholds: The domain's threshold section (read, never mutated).
        context: Extra fields available to message templates.

    Returns:
        Alerts in rule order, at most one per rule.
    """
    ctx = dict(context or {})
    alerts: list[Alert] = []
    for rule in rules:
        value = values.get(rule.metric)
        if value is None:
            logger.debug("threshold_metric_missing", domain=domain, metric=rule.metric)
            continue
        alert = evaluate_rule(domain, rule, float(value), thresholds, ctx)
        if alert is not None:
            alerts.append(alert)
    return alerts


def trend_alerts(
    domain: Domain,
    trends: Mapping[str, Trend],
    period: str = "week",
) -> list[Alert]:
    """Info alerts for each labelled metric that is trending down."""
    return [
        Alert(
            domain=domain,
            type=AlertType.TREND_ALERT,
            message=f"{label} trending down compared to previous {period}",
            severity=Severity.INFO,
        )
        for label, trend in trends.items()
        if trend == Trend.DOWN
    ]


def classify_finance(values: Mapping[str, float], thresholds: ThresholdConfig) -> list[Alert]:
    return classify(Domain.FINANCE, values, FINANCE_RULES, thresholds.finance)


def classify_operations(values: Mapping[str, float], thresholds: ThresholdConfig) -> list[Alert]:
    return classify(Domain.OPERATIONS, values, OPERATIONS_RULES, thresholds.operations)


def classify_marketing(
    values: Mapping[str, float],
    thresholds: ThresholdConfig,
    top_campaign: str = "",
) -> list[Alert]:
    return classify(
        Domain.MARKETING,
        values,
        MARKETING_RULES,
        thresholds.marketing,
        context={"top_campaign": top_campaign},
    )
