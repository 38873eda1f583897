"""Domain types — normalized records, metric summaries, reports and the digest."""

from __future__ import annotations

import datetime
from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from bizdigest.core.convert import SafeFloat, SafeInt


class FrozenModel(BaseModel):
    """Base for values that must not change once computed."""

    model_config = ConfigDict(frozen=True)


# ── Enums ───────────────────────────────────────────────────────


class Domain(StrEnum):
    """Business area aggregated into the digest."""

    FINANCE = "finance"
    OPERATIONS = "operations"
    MARKETING = "marketing"


class Severity(StrEnum):
    """Alert severity."""

    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


# Display priority, lower sorts first.
SEVERITY_ORDER: dict[Severity, int] = {
    Severity.CRITICAL: 0,
    Severity.WARNING: 1,
    Severity.INFO: 2,
}


class Trend(StrEnum):
    """Direction of a metric versus its prior-period value."""

    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class Priority(StrEnum):
    """Action item priority."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


PRIORITY_ORDER: dict[Priority, int] = {
    Priority.HIGH: 0,
    Priority.MEDIUM: 1,
    Priority.LOW: 2,
}


class Department(StrEnum):
    """Department an action item is addressed to."""

    FINANCE = "finance"
    OPERATIONS = "operations"
    MARKETING = "marketing"


class ReportType(StrEnum):
    """Digest cadence."""

    DAILY = "daily"
    WEEKLY = "weekly"


class AlertType(StrEnum):
    """Kind of alert raised by a domain aggregator."""

    REVENUE_DROP = "revenue_drop"
    MARGIN_LOW = "margin_low"
    AOV_DROP = "aov_drop"
    STOCK_VALUE_LOW = "stock_value_low"
    REORDER_REQUIRED = "reorder_required"
    YIELD_LOW = "yield_low"
    WASTE_HIGH = "waste_high"
    DISPATCH_DELAYED = "dispatch_delayed"
    LOW_OPEN_RATE = "low_open_rate"
    LOW_CLICK_RATE = "low_click_rate"
    HIGH_PERFORMING_CAMPAIGN = "high_performing_campaign"
    TREND_ALERT = "trend_alert"


class DispatchStatus(StrEnum):
    """Warehouse dispatch status as reported by the inventory system."""

    COMPLETED = "completed"
    PENDING = "pending"
    IN_PROGRESS = "in_progress"


class IntegrationMethod(StrEnum):
    """How production yield data is obtained."""

    API = "API"
    CSV = "CSV"


# ── Windows ─────────────────────────────────────────────────────


class Window(FrozenModel):
    """Inclusive time interval over which records are aggregated."""

    start: datetime.datetime
    end: datetime.datetime

    def contains(self, moment: datetime.datetime) -> bool:
        return self.start <= moment <= self.end

    def shift(self, days: int) -> Window:
        delta = datetime.timedelta(days=days)
        return Window(start=self.start + delta, end=self.end + delta)

    @property
    def start_date(self) -> datetime.date:
        return self.start.date()

    @property
    def end_date(self) -> datetime.date:
        return self.end.date()


def day_window(day: datetime.date, tz: datetime.tzinfo = datetime.UTC) -> Window:
    """Window covering one calendar day in *tz*."""
    return Window(
        start=datetime.datetime.combine(day, datetime.time.min, tzinfo=tz),
        end=datetime.datetime.combine(day, datetime.time.max, tzinfo=tz),
    )


def trailing_window(
    end_day: datetime.date,
    days: int,
    tz: datetime.tzinfo = datetime.UTC,
) -> Window:
    """Window covering *days* calendar days ending on (and including) *end_day*."""
    first = end_day - datetime.timedelta(days=days - 1)
    return Window(
        start=day_window(first, tz).start,
        end=day_window(end_day, tz).end,
    )


# ── Normalized source records ───────────────────────────────────


class OrderLineItem(BaseModel):
    """A single line of a sales order."""

    name: str = ""
    quantity: SafeInt = 0
    price: SafeFloat = 0.0
    unit_cost: float | None = None


class OrderRecord(BaseModel):
    """A sales order from the commerce platform."""

    order_id: str = ""
    created_at: str = ""
    total_price: SafeFloat = 0.0
    line_items: list[OrderLineItem] = Field(default_factory=list)


class StockItem(BaseModel):
    """Current stock position of one product."""

    product_code: str = ""
    product_name: str = ""
    quantity_available: SafeFloat = 0.0
    quantity_allocated: SafeFloat = 0.0
    quantity_on_order: SafeFloat = 0.0
    reorder_level: SafeFloat = 0.0
    location: str = ""
    unit_cost: SafeFloat = 0.0

    @property
    def value(self) -> float:
        return self.unit_cost * self.quantity_available

    @property
    def below_reorder(self) -> bool:
        return self.quantity_available < self.reorder_level


class DispatchRecord(BaseModel):
    """A warehouse dispatch for one day."""

    dispatch_id: str = ""
    status: str = ""
    items_count: SafeInt = 0


class PurchaseOrder(BaseModel):
    """An open purchase order."""

    po_number: str = ""
    supplier: str = ""
    total_value: SafeFloat = 0.0
    expected_date: str = ""
    items_count: SafeInt = 0


class YieldRecord(BaseModel):
    """One production batch with its weights in kilograms."""

    batch_id: str = ""
    product_type: str = ""
    input_weight: SafeFloat = 0.0
    output_weight: SafeFloat = 0.0
    waste_weight: SafeFloat = 0.0
    production_date: str = ""

    @property
    def yield_percentage(self) -> float:
        if self.input_weight == 0:
            return 0.0
        return self.output_weight / self.input_weight * 100


class CampaignRecord(BaseModel):
    """An email campaign with its delivery statistics."""

    campaign_id: str = ""
    name: str = ""
    send_time: str = ""
    recipients: SafeInt = 0
    opens: SafeInt = 0
    unique_opens: SafeInt = 0
    clicks: SafeInt = 0
    unique_clicks: SafeInt = 0
    open_rate: SafeFloat = 0.0
    click_rate: SafeFloat = 0.0
    revenue: SafeFloat = 0.0


# ── Metric summaries ────────────────────────────────────────────


class ProductSales(FrozenModel):
    name: str
    quantity_sold: int = 0
    revenue: float = 0.0


class SalesSummary(FrozenModel):
    """Sales totals for one window."""

    total_orders: int = 0
    total_revenue: float = 0.0
    total_cost: float = 0.0
    gross_margin: float = 0.0
    margin_percentage: float = 0.0
    average_order_value: float = 0.0
    top_products: list[ProductSales] = Field(default_factory=list)


class ReorderAlert(FrozenModel):
    product: str
    current: float = 0.0
    reorder_level: float = 0.0
    on_order: float = 0.0


class StockSummary(FrozenModel):
    """Stock position snapshot."""

    total_stock_value: float = 0.0
    total_items: int = 0
    items_below_reorder: int = 0
    reorder_alerts: list[ReorderAlert] = Field(default_factory=list)


class ProductYield(FrozenModel):
    batches: int = 0
    input_weight: float = 0.0
    output_weight: float = 0.0
    waste_weight: float = 0.0
    yield_percentage: float = 0.0


class BatchYieldAlert(FrozenModel):
    batch_id: str
    product_type: str = ""
    yield_percentage: float = 0.0
    date: str = ""


class YieldSummary(FrozenModel):
    """Production yield totals for one window."""

    total_batches: int = 0
    total_input_weight: float = 0.0
    total_output_weight: float = 0.0
    total_waste_weight: float = 0.0
    average_yield_percentage: float = 0.0
    waste_percentage: float = 0.0
    by_product_type: dict[str, ProductYield] = Field(default_factory=dict)
    alerts: list[BatchYieldAlert] = Field(default_factory=list)


class DispatchSummary(FrozenModel):
    """Warehouse dispatch counts for one day."""

    total_dispatches: int = 0
    completed: int = 0
    pending: int = 0
    in_progress: int = 0
    total_items_dispatched: int = 0
    completion_rate: float = 0.0


class CampaignPerformance(FrozenModel):
    name: str
    revenue: float = 0.0
    open_rate: float = 0.0
    click_rate: float = 0.0


class CampaignSummary(FrozenModel):
    """Email campaign totals for one window."""

    total_campaigns: int = 0
    total_recipients: int = 0
    total_opens: int = 0
    total_clicks: int = 0
    total_revenue: float = 0.0
    average_open_rate: float = 0.0
    average_click_rate: float = 0.0
    top_campaigns: list[CampaignPerformance] = Field(default_factory=list)


# ── Comparison, alerts, actions ─────────────────────────────────


class MetricDelta(FrozenModel):
    """Current vs previous value of one tracked metric."""

    current: float = 0.0
    previous: float = 0.0
    delta: float = 0.0
    delta_percentage: float = 0.0
    trend: Trend = Trend.STABLE


class ComparisonResult(FrozenModel):
    """Per-metric deltas between the current and previous window."""

    metrics: dict[str, MetricDelta] = Field(default_factory=dict)

    def __getitem__(self, name: str) -> MetricDelta:
        return self.metrics[name]

    def __contains__(self, name: object) -> bool:
        return name in self.metrics


class Alert(FrozenModel):
    """A classified threshold breach or noteworthy observation."""

    domain: Domain
    type: AlertType
    message: str
    severity: Severity


class ActionItem(FrozenModel):
    """A recommended follow-up for one department."""

    priority: Priority
    department: Department
    description: str


# ── Domain reports ──────────────────────────────────────────────


class SalesSection(FrozenModel):
    total_revenue: float = 0.0
    total_orders: int = 0
    average_order_value: float = 0.0
    previous_period_revenue: float = 0.0
    revenue_change: float = 0.0
    revenue_change_percentage: float = 0.0
    aov_change_percentage: float = 0.0
    revenue_trend: Trend = Trend.STABLE


class MarginSection(FrozenModel):
    total_cost: float = 0.0
    gross_margin: float = 0.0
    margin_percentage: float = 0.0


class FinanceReport(FrozenModel):
    """Sales and margin report for one period."""

    date: datetime.date
    period: ReportType
    sales: SalesSection
    margins: MarginSection
    top_products: list[ProductSales] = Field(default_factory=list)
    comparison: ComparisonResult = ComparisonResult()
    alerts: list[Alert] = Field(default_factory=list)


class StockSection(FrozenModel):
    total_value: float = 0.0
    total_items: int = 0
    items_below_reorder: int = 0
    reorder_alerts: list[ReorderAlert] = Field(default_factory=list)


class ProductionSection(FrozenModel):
    window_start: datetime.date
    window_end: datetime.date
    total_batches: int = 0
    average_yield_percentage: float = 0.0
    waste_percentage: float = 0.0
    yield_trend: Trend = Trend.STABLE
    yield_by_product: dict[str, ProductYield] = Field(default_factory=dict)
    yield_alerts: list[BatchYieldAlert] = Field(default_factory=list)


class PurchaseOrderLine(FrozenModel):
    po_number: str
    supplier: str = ""
    value: float = 0.0
    expected_date: str = ""


class OperationsReport(FrozenModel):
    """Stock, production and warehouse report for one day."""

    date: datetime.date
    stock: StockSection
    production: ProductionSection
    warehouse: DispatchSummary
    purchase_orders: list[PurchaseOrderLine] = Field(default_factory=list)
    comparison: ComparisonResult = ComparisonResult()
    alerts: list[Alert] = Field(default_factory=list)


class CampaignSection(FrozenModel):
    total_campaigns: int = 0
    total_recipients: int = 0
    total_opens: int = 0
    total_clicks: int = 0
    average_open_rate: float = 0.0
    average_click_rate: float = 0.0
    total_revenue: float = 0.0
    roi: float = 0.0


class PerformanceTrends(FrozenModel):
    open_rate_trend: Trend = Trend.STABLE
    click_rate_trend: Trend = Trend.STABLE
    revenue_trend: Trend = Trend.STABLE


class MarketingReport(FrozenModel):
    """Campaign performance with prior-period comparison."""

    kind: Literal["report"] = "report"
    date: datetime.date
    period: ReportType = ReportType.WEEKLY
    campaigns: CampaignSection
    top_campaigns: list[CampaignPerformance] = Field(default_factory=list)
    performance_trends: PerformanceTrends = PerformanceTrends()
    comparison: ComparisonResult = ComparisonResult()
    alerts: list[Alert] = Field(default_factory=list)


class MarketingSnapshot(FrozenModel):
    """Lightweight single-day campaign snapshot. Carries no alerts."""

    kind: Literal["snapshot"] = "snapshot"
    date: datetime.date
    period: ReportType = ReportType.DAILY
    campaigns_sent: int = 0
    average_open_rate: float = 0.0
    average_click_rate: float = 0.0
    revenue_attributed: float = 0.0


# ── Digest ──────────────────────────────────────────────────────


class SalesHeadline(FrozenModel):
    revenue: float = 0.0
    change_percentage: float = 0.0
    orders: int = 0
    margin_percentage: float = 0.0


class StockHeadline(FrozenModel):
    value: float = 0.0
    items_to_reorder: int = 0


class ProductionHeadline(FrozenModel):
    yield_percentage: float = 0.0
    waste_percentage: float = 0.0
    batches: int = 0


class MarketingHeadline(FrozenModel):
    campaigns: int = 0
    open_rate: float = 0.0
    click_rate: float = 0.0
    revenue: float = 0.0


class DigestSummary(FrozenModel):
    """Flattened headline view used for compact rendering."""

    sales: SalesHeadline
    stock: StockHeadline
    production: ProductionHeadline
    marketing: MarketingHeadline


class AlertBuckets(FrozenModel):
    critical: list[Alert] = Field(default_factory=list)
    warning: list[Alert] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.critical) + len(self.warning)


class DigestReports(FrozenModel):
    finance: FinanceReport
    operations: OperationsReport
    marketing: Annotated[
        MarketingReport | MarketingSnapshot,
        Field(discriminator="kind"),
    ]


class Digest(FrozenModel):
    """Merged, alert- and action-annotated report for one window."""

    date: datetime.date
    type: ReportType
    summary: DigestSummary
    alerts: AlertBuckets
    actions: list[ActionItem] = Field(default_factory=list)
    reports: DigestReports
