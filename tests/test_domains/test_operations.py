"""Tests for bizdigest/domains/operations.py — stock, yields, dispatch, report."""

from __future__ import annotations

import datetime

import pytest

from bizdigest.core.config import ThresholdConfig
from bizdigest.core.types import (
    AlertType,
    DispatchRecord,
    DispatchSummary,
    PurchaseOrder,
    Severity,
    StockItem,
    StockSummary,
    Trend,
    Window,
    YieldRecord,
    YieldSummary,
)
from bizdigest.domains.operations import (
    OperationsAggregator,
    build_operations_report,
    summarize_dispatches,
    summarize_stock,
    summarize_yields,
)
from bizdigest.sources.base import InventorySource, YieldSource
from bizdigest.sources.exceptions import SourceParseError

# ── Helpers ─────────────────────────────────────────────────────


def _stock(**kw: object) -> StockItem:
    defaults: dict[str, object] = {
        "product_code": "SKU-1",
        "product_name": "Beef Mince",
        "quantity_available": 100,
        "reorder_level": 10,
        "unit_cost": 5,
    }
    defaults.update(kw)
    return StockItem(**defaults)  # type: ignore[arg-type]


def _batch(**kw: object) -> YieldRecord:
    defaults: dict[str, object] = {
        "batch_id": "B-1",
        "product_type": "Beef",
        "input_weight": 100,
        "output_weight": 90,
        "waste_weight": 5,
        "production_date": "2024-03-04",
    }
    defaults.update(kw)
    return YieldRecord(**defaults)  # type: ignore[arg-type]


def _dispatch(status: str, items: int = 1) -> DispatchRecord:
    return DispatchRecord(dispatch_id=f"D-{status}", status=status, items_count=items)


class FakeInventory(InventorySource):
    def __init__(
        self,
        stock: list[StockItem] | None = None,
        dispatches: list[DispatchRecord] | None = None,
        purchase_orders: list[PurchaseOrder] | None = None,
    ) -> None:
        self.stock = stock or []
        self.dispatches = dispatches or []
        self.purchase_orders = purchase_orders or []
        self.dispatch_days: list[datetime.date] = []

    async def fetch_stock_levels(self) -> list[StockItem]:
        return self.stock

    async def fetch_dispatches(self, day: datetime.date) -> list[DispatchRecord]:
        self.dispatch_days.append(day)
        return self.dispatches

    async def fetch_open_purchase_orders(self) -> list[PurchaseOrder]:
        return self.purchase_orders


class FakeYields(YieldSource):
    def __init__(self, by_end: dict[datetime.date, list[YieldRecord]] | None = None) -> None:
        self.by_end = by_end or {}
        self.windows: list[Window] = []

    async def fetch_yields(self, window: Window) -> list[YieldRecord]:
        self.windows.append(window)
        return self.by_end.get(window.end_date, [])


class BrokenYields(YieldSource):
    async def fetch_yields(self, window: Window) -> list[YieldRecord]:
        raise SourceParseError("aptean export missing columns: batch_id")


class TestSummarizeStock:
    def test_value_and_reorder(self) -> None:
        summary = summarize_stock([
            _stock(product_name="Lamb Chops", quantity_available=4, reorder_level=10, unit_cost=12),
            _stock(quantity_available=100, unit_cost=5),
        ])
        assert summary.total_stock_value == pytest.approx(548.0)
        assert summary.total_items == 2
        assert summary.items_below_reorder == 1
        assert summary.reorder_alerts[0].product == "Lamb Chops"
        assert summary.reorder_alerts[0].current == 4

    def test_empty(self) -> None:
        summary = summarize_stock([])
        assert summary.total_stock_value == 0
        assert summary.reorder_alerts == []


class TestSummarizeYields:
    def test_ratios_over_totals(self) -> None:
        summary = summarize_yields([
            _batch(input_weight=100, output_weight=90, waste_weight=5),
            _batch(batch_id="B-2", input_weight=300, output_weight=210, waste_weight=60),
        ])
        assert summary.total_batches == 2
        assert summary.average_yield_percentage == pytest.approx(75.0)
        assert summary.waste_percentage == pytest.approx(16.25)

    def test_zero_input_is_zero_not_error(self) -> None:
        summary = summarize_yields([_batch(input_weight=0, output_weight=0, waste_weight=0)])
        assert summary.average_yield_percentage == 0.0
        assert summary.waste_percentage == 0.0
        assert summary.alerts == []

    def test_no_records(self) -> None:
        summary = summarize_yields([])
        assert summary.total_batches == 0
        assert summary.by_product_type == {}

    def test_rollup_by_product_type(self) -> None:
        summary = summarize_yields([
            _batch(product_type="Beef", input_weight=100, output_weight=80),
            _batch(product_type="Beef", input_weight=100, output_weight=100),
            _batch(product_type="Pork", input_weight=50, output_weight=45),
        ])
        beef = summary.by_product_type["Beef"]
        assert beef.batches == 2
        assert beef.yield_percentage == pytest.approx(90.0)
        assert summary.by_product_type["Pork"].yield_percentage == pytest.approx(90.0)

    def test_batch_alerts_below_threshold(self) -> None:
        summary = summarize_yields(
            [
                _batch(batch_id="LOW", output_weight=70),
                _batch(batch_id="EDGE", output_weight=80),
                _batch(batch_id="OK", output_weight=95),
            ],
            batch_alert_percentage=80,
        )
        assert [a.batch_id for a in summary.alerts] == ["LOW"]
        assert summary.alerts[0].yield_percentage == pytest.approx(70.0)


class TestSummarizeDispatches:
    def test_counts_and_rate(self) -> None:
        summary = summarize_dispatches([
            _dispatch("completed", 5),
            _dispatch("completed", 3),
            _dispatch("pending", 2),
            _dispatch("in_progress"),
            _dispatch("cancelled"),
        ])
        assert summary.total_dispatches == 5
        assert summary.completed == 2
        assert summary.pending == 1
        assert summary.in_progress == 1
        assert summary.total_items_dispatched == 12
        assert summary.completion_rate == pytest.approx(40.0)

    def test_no_dispatches(self) -> None:
        summary = summarize_dispatches([])
        assert summary.completion_rate == 0.0


class TestBuildOperationsReport:
    def test_reorder_list_truncated_but_count_kept(self) -> None:
        stock = summarize_stock([
            _stock(product_name=f"Item {i}", quantity_available=1, unit_cost=100_000) for i in range(12)
        ])
        report = build_operations_report(
            datetime.date(2024, 3, 4),
            stock,
            YieldSummary(),
            YieldSummary(),
            DispatchSummary(),
            [],
            ThresholdConfig(),
        )
        assert report.stock.items_below_reorder == 12
        assert len(report.stock.reorder_alerts) == 10

    def test_stock_value_critical(self) -> None:
        report = build_operations_report(
            datetime.date(2024, 3, 4),
            StockSummary(total_stock_value=485_000, total_items=200),
            YieldSummary(average_yield_percentage=90, waste_percentage=5),
            YieldSummary(average_yield_percentage=90, waste_percentage=5),
            DispatchSummary(total_dispatches=10, completed=10, completion_rate=100),
            [],
            ThresholdConfig(),
        )
        assert len(report.alerts) == 1
        assert report.alerts[0].type == AlertType.STOCK_VALUE_LOW
        assert report.alerts[0].severity == Severity.CRITICAL

    def test_default_yield_window_and_trend(self) -> None:
        report = build_operations_report(
            datetime.date(2024, 3, 10),
            StockSummary(total_stock_value=600_000),
            YieldSummary(total_batches=4, average_yield_percentage=70),
            YieldSummary(total_batches=4, average_yield_percentage=90),
            DispatchSummary(),
            [PurchaseOrder(po_number=f"PO-{i}", total_value=100) for i in range(12)],
            ThresholdConfig(),
        )
        assert report.production.window_start == datetime.date(2024, 3, 4)
        assert report.production.window_end == datetime.date(2024, 3, 10)
        assert report.production.yield_trend == Trend.DOWN
        assert len(report.purchase_orders) == 10
        assert report.purchase_orders[0].po_number == "PO-0"


class TestOperationsAggregator:
    async def test_daily_report(self) -> None:
        day = datetime.date(2024, 3, 10)
        inventory = FakeInventory(
            stock=[_stock(quantity_available=200_000, unit_cost=3)],
            dispatches=[_dispatch("completed"), _dispatch("pending")],
            purchase_orders=[PurchaseOrder(po_number="PO-1", supplier="Acme", total_value=950)],
        )
        yields = FakeYields({
            day: [_batch(output_weight=88)],
            datetime.date(2024, 3, 3): [_batch(output_weight=92)],
        })

        report = await OperationsAggregator(inventory, yields).daily_report(day, ThresholdConfig())

        assert inventory.dispatch_days == [day]
        assert sorted(w.end_date for w in yields.windows) == [datetime.date(2024, 3, 3), day]
        assert report.stock.total_value == 600_000
        assert report.production.average_yield_percentage == pytest.approx(88.0)
        assert report.comparison["average_yield_percentage"].previous == pytest.approx(92.0)
        assert report.warehouse.completion_rate == pytest.approx(50.0)
        assert report.purchase_orders[0].supplier == "Acme"
        assert [a.type for a in report.alerts] == [AlertType.DISPATCH_DELAYED]

    async def test_custom_yield_window(self) -> None:
        yields = FakeYields()
        report = await OperationsAggregator(FakeInventory(), yields).daily_report(
            datetime.date(2024, 3, 10), ThresholdConfig(), yield_window_days=3
        )
        assert report.production.window_start == datetime.date(2024, 3, 8)
        assert sorted(w.start_date for w in yields.windows) == [
            datetime.date(2024, 3, 5),
            datetime.date(2024, 3, 8),
        ]

    async def test_yield_failure_propagates(self) -> None:
        with pytest.raises(SourceParseError):
            await OperationsAggregator(FakeInventory(), BrokenYields()).daily_report(
                datetime.date(2024, 3, 10), ThresholdConfig()
            )
