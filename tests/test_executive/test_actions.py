"""Tests for bizdigest/executive/actions.py — rule order, caps and priority sort."""

from __future__ import annotations

import datetime

from bizdigest.core.config import ThresholdConfig
from bizdigest.core.types import (
    ActionItem,
    CampaignSection,
    Department,
    DispatchSummary,
    FinanceReport,
    MarginSection,
    MarketingReport,
    OperationsReport,
    Priority,
    ProductionSection,
    PurchaseOrderLine,
    ReorderAlert,
    ReportType,
    SalesSection,
    StockSection,
)
from bizdigest.executive.actions import sort_by_priority, synthesize_actions

DAY = datetime.date(2024, 3, 4)

# ── Helpers ─────────────────────────────────────────────────────


def _finance(margin: float = 40.0) -> FinanceReport:
    return FinanceReport(
        date=DAY,
        period=ReportType.DAILY,
        sales=SalesSection(total_revenue=1000),
        margins=MarginSection(margin_percentage=margin),
    )


def _operations(
    reorder: list[str] | None = None,
    purchase_orders: list[str] | None = None,
    avg_yield: float = 90.0,
) -> OperationsReport:
    reorder = reorder or []
    return OperationsReport(
        date=DAY,
        stock=StockSection(
            total_value=600_000,
            items_below_reorder=len(reorder),
            reorder_alerts=[ReorderAlert(product=name) for name in reorder],
        ),
        production=ProductionSection(
            window_start=DAY - datetime.timedelta(days=6),
            window_end=DAY,
            average_yield_percentage=avg_yield,
        ),
        warehouse=DispatchSummary(),
        purchase_orders=[PurchaseOrderLine(po_number=po) for po in purchase_orders or []],
    )


def _marketing(open_rate: float = 25.0) -> MarketingReport:
    return MarketingReport(date=DAY, campaigns=CampaignSection(average_open_rate=open_rate))


class TestSynthesizeActions:
    def test_healthy_reports_produce_nothing(self) -> None:
        assert synthesize_actions(_finance(), _operations(), _marketing()) == []

    def test_reorder_names_at_most_three(self) -> None:
        actions = synthesize_actions(
            _finance(),
            _operations(reorder=["Ribeye", "Brisket", "Mince", "Bacon", "Chops"]),
        )
        assert len(actions) == 1
        assert actions[0].priority == Priority.HIGH
        assert actions[0].department == Department.OPERATIONS
        assert actions[0].description == "Reorder 3 critical items: Ribeye, Brisket, Mince"

    def test_purchase_orders_name_at_most_two(self) -> None:
        actions = synthesize_actions(_finance(), _operations(purchase_orders=["PO-1", "PO-2", "PO-3"]))
        assert actions == [
            ActionItem(
                priority=Priority.MEDIUM,
                department=Department.FINANCE,
                description="Approve pending POs: PO-1, PO-2",
            )
        ]

    def test_low_margin(self) -> None:
        actions = synthesize_actions(_finance(margin=12.34), _operations())
        assert actions[0].description == "Review pricing - margin at 12.3%"
        assert actions[0].priority == Priority.HIGH

    def test_margin_at_boundary_is_not_flagged(self) -> None:
        assert synthesize_actions(_finance(margin=15.0), _operations()) == []

    def test_low_yield_including_zero(self) -> None:
        actions = synthesize_actions(_finance(), _operations(avg_yield=0.0))
        assert actions[0].description == "Investigate low yield (0.0%) - check production processes"

    def test_open_rate_only_with_marketing_report(self) -> None:
        assert synthesize_actions(_finance(), _operations(), None) == []
        actions = synthesize_actions(_finance(), _operations(), _marketing(open_rate=12))
        assert actions[0].department == Department.MARKETING
        assert actions[0].description == "Review email subject lines - open rate at 12.0%"

    def test_rule_order(self) -> None:
        actions = synthesize_actions(
            _finance(margin=10),
            _operations(reorder=["Ribeye"], purchase_orders=["PO-9"], avg_yield=70),
            _marketing(open_rate=5),
        )
        assert [(a.priority, a.department) for a in actions] == [
            (Priority.HIGH, Department.OPERATIONS),
            (Priority.MEDIUM, Department.FINANCE),
            (Priority.HIGH, Department.FINANCE),
            (Priority.HIGH, Department.OPERATIONS),
            (Priority.MEDIUM, Department.MARKETING),
        ]

    def test_configurable_boundaries(self) -> None:
        t = ThresholdConfig(operations={"yield_action_percentage": 95})  # type: ignore[arg-type]
        actions = synthesize_actions(_finance(), _operations(avg_yield=90), thresholds=t)
        assert len(actions) == 1


class TestSortByPriority:
    def test_stable_within_priority(self) -> None:
        items = [
            ActionItem(priority=Priority.MEDIUM, department=Department.FINANCE, description="a"),
            ActionItem(priority=Priority.HIGH, department=Department.OPERATIONS, description="b"),
            ActionItem(priority=Priority.LOW, department=Department.MARKETING, description="c"),
            ActionItem(priority=Priority.HIGH, department=Department.FINANCE, description="d"),
        ]
        assert [a.description for a in sort_by_priority(items)] == ["b", "d", "a", "c"]
