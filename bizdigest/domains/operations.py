"""Operations aggregator — stock position, production yields, warehouse dispatch."""

from __future__ import annotations

import asyncio
import datetime
from collections.abc import Iterable
from dataclasses import dataclass

import structlog

from bizdigest.core.config import ThresholdConfig
from bizdigest.core.types import (
    BatchYieldAlert,
    DispatchRecord,
    DispatchStatus,
    DispatchSummary,
    OperationsReport,
    ProductionSection,
    ProductYield,
    PurchaseOrder,
    PurchaseOrderLine,
    ReorderAlert,
    StockItem,
    StockSection,
    StockSummary,
    Window,
    YieldRecord,
    YieldSummary,
    trailing_window,
)
from bizdigest.domains.thresholds import classify_operations
from bizdigest.domains.trend import compare
from bizdigest.sources.base import InventorySource, YieldSource

logger = structlog.stdlib.get_logger()

REORDER_ALERTS_LIMIT = 10
BATCH_ALERTS_LIMIT = 5
PURCHASE_ORDERS_LIMIT = 10

COMPARISON_FIELDS = ("average_yield_percentage", "waste_percentage", "total_batches")


def _ratio_pct(part: float, whole: float) -> float:
    return part / whole * 100 if whole > 0 else 0.0


# ── Stock ───────────────────────────────────────────────────────


def summarize_stock(items: Iterable[StockItem]) -> StockSummary:
    """Total stock value and the products below their reorder level, in input order."""
    total_value = 0.0
    total_items = 0
    reorder_alerts: list[ReorderAlert] = []

    for item in items:
        total_items += 1
        total_value += item.value
        if item.below_reorder:
            reorder_alerts.append(
                ReorderAlert(
                    product=item.product_name,
                    current=item.quantity_available,
                    reorder_level=item.reorder_level,
                    on_order=item.quantity_on_order,
                )
            )

    return StockSummary(
        total_stock_value=total_value,
        total_items=total_items,
        items_below_reorder=len(reorder_alerts),
        reorder_alerts=reorder_alerts,
    )


# ── Yields ──────────────────────────────────────────────────────


@dataclass
class _Rollup:
    batches: int = 0
    input_weight: float = 0.0
    output_weight: float = 0.0
    waste_weight: float = 0.0

    def add(self, record: YieldRecord) -> None:
        self.batches += 1
        self.input_weight += record.input_weight
        self.output_weight += record.output_weight
        self.waste_weight += record.waste_weight

    def freeze(self) -> ProductYield:
        return ProductYield(
            batches=self.batches,
            input_weight=self.input_weight,
            output_weight=self.output_weight,
            waste_weight=self.waste_weight,
            yield_percentage=_ratio_pct(self.output_weight, self.input_weight),
        )


def summarize_yields(
    records: Iterable[YieldRecord],
    batch_alert_percentage: float = 80.0,
) -> YieldSummary:
    """Fold production batches into totals and a per-product-type rollup.

    Ratios are only computed once every record has been folded. A batch with
    no input weight has no measurable yield and never raises a batch alert.
    """
    totals = _Rollup()
    by_type: dict[str, _Rollup] = {}
    alerts: list[BatchYieldAlert] = []

    for record in records:
        totals.add(record)
        by_type.setdefault(record.product_type, _Rollup()).add(record)
        if record.input_weight > 0 and record.yield_percentage < batch_alert_percentage:
            alerts.append(
                BatchYieldAlert(
                    batch_id=record.batch_id,
                    product_type=record.product_type,
                    yield_percentage=record.yield_percentage,
                    date=record.production_date,
                )
            )

    return YieldSummary(
        total_batches=totals.batches,
        total_input_weight=totals.input_weight,
        total_output_weight=totals.output_weight,
        total_waste_weight=totals.waste_weight,
        average_yield_percentage=_ratio_pct(totals.output_weight, totals.input_weight),
        waste_percentage=_ratio_pct(totals.waste_weight, totals.input_weight),
        by_product_type={name: rollup.freeze() for name, rollup in by_type.items()},
        alerts=alerts,
    )


# ── Dispatch ────────────────────────────────────────────────────


def summarize_dispatches(records: Iterable[DispatchRecord]) -> DispatchSummary:
    counts = {status: 0 for status in DispatchStatus}
    total = 0
    items_dispatched = 0

    for record in records:
        total += 1
        items_dispatched += record.items_count
        if record.status in counts:
            counts[DispatchStatus(record.status)] += 1

    return DispatchSummary(
        total_dispatches=total,
        completed=counts[DispatchStatus.COMPLETED],
        pending=counts[DispatchStatus.PENDING],
        in_progress=counts[DispatchStatus.IN_PROGRESS],
        total_items_dispatched=items_dispatched,
        completion_rate=_ratio_pct(counts[DispatchStatus.COMPLETED], total),
    )


# ── Report ──────────────────────────────────────────────────────


def build_operations_report(
    day: datetime.date,
    stock: StockSummary,
    yields: YieldSummary,
    previous_yields: YieldSummary,
    dispatches: DispatchSummary,
    purchase_orders: Iterable[PurchaseOrder],
    thresholds: ThresholdConfig,
    yield_window: Window | None = None,
) -> OperationsReport:
    """Assemble the operations report and classify it.

    Yield and waste are compared against the yield window immediately
    preceding *yield_window* (both default to windows ending on *day*).
    """
    window = yield_window or trailing_window(day, 7)
    comparison = compare(yields, previous_yields, COMPARISON_FIELDS)

    alerts = classify_operations(
        {
            "total_stock_value": stock.total_stock_value,
            "items_below_reorder": stock.items_below_reorder,
            "average_yield_percentage": yields.average_yield_percentage,
            "waste_percentage": yields.waste_percentage,
            "completion_rate": dispatches.completion_rate,
        },
        thresholds,
    )

    return OperationsReport(
        date=day,
        stock=StockSection(
            total_value=stock.total_stock_value,
            total_items=stock.total_items,
            items_below_reorder=stock.items_below_reorder,
            reorder_alerts=stock.reorder_alerts[:REORDER_ALERTS_LIMIT],
        ),
        production=ProductionSection(
            window_start=window.start_date,
            window_end=window.end_date,
            total_batches=yields.total_batches,
            average_yield_percentage=yields.average_yield_percentage,
            waste_percentage=yields.waste_percentage,
            yield_trend=comparison["average_yield_percentage"].trend,
            yield_by_product=yields.by_product_type,
            yield_alerts=yields.alerts[:BATCH_ALERTS_LIMIT],
        ),
        warehouse=dispatches,
        purchase_orders=[
            PurchaseOrderLine(
                po_number=po.po_number,
                supplier=po.supplier,
                value=po.total_value,
                expected_date=po.expected_date,
            )
            for po in list(purchase_orders)[:PURCHASE_ORDERS_LIMIT]
        ],
        comparison=comparison,
        alerts=alerts,
    )


class OperationsAggregator:
    """Combines the inventory system and the production yield source.

    Stock, dispatches, open purchase orders and both yield windows are
    fetched concurrently; any failure propagates.
    """

    def __init__(self, inventory: InventorySource, yields: YieldSource) -> None:
        self._inventory = inventory
        self._yields = yields

    async def daily_report(
        self,
        day: datetime.date,
        thresholds: ThresholdConfig,
        tz: datetime.tzinfo = datetime.UTC,
        yield_window_days: int = 7,
    ) -> OperationsReport:
        yield_window = trailing_window(day, yield_window_days, tz)
        prior_window = trailing_window(
            day - datetime.timedelta(days=yield_window_days), yield_window_days, tz
        )

        stock_items, dispatches, purchase_orders, current_yields, prior_yields = (
            await asyncio.gather(
                self._inventory.fetch_stock_levels(),
                self._inventory.fetch_dispatches(day),
                self._inventory.fetch_open_purchase_orders(),
                self._yields.fetch_yields(yield_window),
                self._yields.fetch_yields(prior_window),
            )
        )

        batch_alert_pct = thresholds.operations.batch_yield_alert_percentage
        report = build_operations_report(
            day,
            summarize_stock(stock_items),
            summarize_yields(current_yields, batch_alert_pct),
            summarize_yields(prior_yields, batch_alert_pct),
            summarize_dispatches(dispatches),
            purchase_orders,
            thresholds,
            yield_window,
        )
        logger.info(
            "operations_report_built",
            date=day.isoformat(),
            stock_value=round(report.stock.total_value, 2),
            batches=report.production.total_batches,
            dispatches=report.warehouse.total_dispatches,
            alerts=len(report.alerts),
        )
        return report
