"""Domain aggregators — finance, operations and marketing metrics, thresholds, trends."""

from bizdigest.domains.finance import FinanceAggregator, build_finance_report, summarize_orders
from bizdigest.domains.marketing import (
    MarketingAggregator,
    build_marketing_report,
    build_marketing_snapshot,
    summarize_campaigns,
)
from bizdigest.domains.operations import (
    OperationsAggregator,
    build_operations_report,
    summarize_dispatches,
    summarize_stock,
    summarize_yields,
)
from bizdigest.domains.thresholds import (
    classify,
    classify_finance,
    classify_marketing,
    classify_operations,
    trend_alerts,
)
from bizdigest.domains.trend import classify_trend, compare, percent_change

__all__ = [
    "FinanceAggregator",
    "MarketingAggregator",
    "OperationsAggregator",
    "build_finance_report",
    "build_marketing_report",
    "build_marketing_snapshot",
    "build_operations_report",
    "classify",
    "classify_finance",
    "classify_marketing",
    "classify_operations",
    "classify_trend",
    "compare",
    "percent_change",
    "summarize_campaigns",
    "summarize_dispatches",
    "summarize_orders",
    "summarize_stock",
    "summarize_yields",
    "trend_alerts",
]
