"""Tests for bizdigest/render — structured, markdown and chat renderings."""

from __future__ import annotations

import datetime
import json

from bizdigest.core.config import ThresholdConfig
from bizdigest.core.types import (
    Alert,
    AlertType,
    CampaignSummary,
    Department,
    Digest,
    DispatchSummary,
    Domain,
    ProductSales,
    PurchaseOrder,
    ReorderAlert,
    ReportType,
    SalesSummary,
    Severity,
    StockSummary,
    YieldSummary,
)
from bizdigest.domains.finance import build_finance_report
from bizdigest.domains.marketing import build_marketing_report, build_marketing_snapshot
from bizdigest.domains.operations import build_operations_report
from bizdigest.executive.aggregator import build_digest
from bizdigest.render import (
    digest_to_dict,
    render_alert_message,
    render_chat_message,
    render_department_message,
    render_json,
    render_markdown,
)
from bizdigest.render.chat import metric_lines
from bizdigest.render.formatting import long_date, money

DAY = datetime.date(2024, 3, 4)

# ── Helpers ─────────────────────────────────────────────────────


def _digest(
    report_type: ReportType = ReportType.DAILY,
    stock_value: float = 485_000,
    reorder: int = 3,
    avg_yield: float = 78.5,
    margin: float = 12.0,
    click_rate: float = 2.8,
) -> Digest:
    thresholds = ThresholdConfig()
    finance = build_finance_report(
        DAY,
        report_type,
        SalesSummary(
            total_orders=145,
            total_revenue=84210.50,
            margin_percentage=margin,
            average_order_value=580.76,
            top_products=[ProductSales(name="Ribeye Steak", quantity_sold=40, revenue=1200)],
        ),
        SalesSummary(total_orders=140, total_revenue=80100.00, average_order_value=572.14),
        thresholds,
    )
    operations = build_operations_report(
        DAY,
        StockSummary(
            total_stock_value=stock_value,
            total_items=120,
            items_below_reorder=reorder,
            reorder_alerts=[ReorderAlert(product=f"Item {i}", current=2, reorder_level=10) for i in range(reorder)],
        ),
        YieldSummary(total_batches=12, average_yield_percentage=avg_yield, waste_percentage=6),
        YieldSummary(total_batches=12, average_yield_percentage=avg_yield, waste_percentage=6),
        DispatchSummary(total_dispatches=10, completed=10, completion_rate=100),
        [PurchaseOrder(po_number="PO-1", supplier="Acme", total_value=950)],
        thresholds,
    )
    campaigns = CampaignSummary(
        total_campaigns=2,
        total_revenue=900,
        average_open_rate=24,
        average_click_rate=click_rate,
    )
    if report_type == ReportType.DAILY:
        marketing = build_marketing_snapshot(DAY, campaigns)
    else:
        marketing = build_marketing_report(DAY, campaigns, campaigns, thresholds)
    return build_digest(DAY, report_type, finance, operations, marketing, thresholds)


class TestFormatting:
    def test_money(self) -> None:
        assert money(84210.5) == "£84,210.50"
        assert money(84210.5, 0) == "£84,210"

    def test_long_date(self) -> None:
        assert long_date(DAY) == "Monday, March 4, 2024"


class TestStructured:
    def test_round_trip_is_equal(self) -> None:
        for report_type in ReportType:
            digest = _digest(report_type)
            assert Digest.model_validate_json(render_json(digest)) == digest

    def test_dict_is_json_compatible(self) -> None:
        data = digest_to_dict(_digest())
        assert data["type"] == "daily"
        assert data["date"] == "2024-03-04"
        assert data["reports"]["marketing"]["kind"] == "snapshot"
        json.dumps(data)

    def test_deterministic(self) -> None:
        assert render_json(_digest()) == render_json(_digest())


class TestMarkdown:
    def test_daily_sections(self) -> None:
        text = render_markdown(_digest(), company="Piper's Farm")
        assert text.startswith("# Piper's Farm Daily Executive Digest\n**Monday, March 4, 2024**")
        for heading in ("## Executive Summary", "### 💰 Finance", "### 🏭 Operations", "### 📧 Marketing"):
            assert heading in text
        assert "#### Campaign Snapshot" in text
        assert "- **Total Revenue**: £84,210.50" in text
        assert "1. **Ribeye Steak** - 40 units, £1,200.00" in text

    def test_finance_previous_period_block(self) -> None:
        text = render_markdown(_digest())
        assert (
            "#### vs Previous Day\n"
            "- Orders: 140 → 145 (+3.6%)\n"
            "- Average Order Value: £572.14 → £580.76 (+1.5%)\n"
            "- Margin: 0.0% → 12.0% (+12.0 pts)\n"
        ) in text
        assert "#### vs Previous Week" in render_markdown(_digest(ReportType.WEEKLY))

    def test_operations_previous_window_block(self) -> None:
        text = render_markdown(_digest())
        assert (
            "#### vs Previous Yield Window\n"
            "- Average Yield: 78.5% → 78.5% (+0.0 pts)\n"
            "- Waste: 6.0% → 6.0% (+0.0 pts)\n"
            "- Batches: 12 → 12 (+0.0%)\n"
        ) in text

    def test_weekly_title_and_comparison(self) -> None:
        text = render_markdown(_digest(ReportType.WEEKLY))
        assert text.startswith("# Weekly Executive Summary")
        assert "#### Week-over-Week Comparison" in text
        assert "vs previous week" in text

    def test_action_items_numbered(self) -> None:
        digest = _digest()
        text = render_markdown(digest)
        assert "## 📋 Action Items" in text
        assert "1. 🔴 **[OPERATIONS]** Reorder 3 critical items: Item 0, Item 1, Item 2" in text

    def test_no_actions_section_when_empty(self) -> None:
        text = render_markdown(_digest(reorder=0, avg_yield=90, margin=40))
        assert "Approve pending POs" in text
        text_without = render_markdown(
            _digest(reorder=0, avg_yield=90, margin=40).model_copy(update={"actions": []})
        )
        assert "## 📋 Action Items" not in text_without


class TestChat:
    def test_metric_block(self) -> None:
        assert metric_lines(_digest()) == [
            "• Sales: £84,210 (+5.1%) 📈",
            "• Stock: £485k ⚠️ 3 items to reorder",
            "• Yield: 78.5% 🔴",
            "• Campaign CTR: 2.8% 🎯",
        ]

    def test_metric_block_without_markers(self) -> None:
        lines = metric_lines(_digest(stock_value=600_000, reorder=0, avg_yield=90, click_rate=2.5))
        assert lines[1:] == [
            "• Stock: £600k",
            "• Yield: 90.0%",
            "• Campaign CTR: 2.5%",
        ]

    def test_critical_alerts_listed(self) -> None:
        text = render_chat_message(_digest(), company="Piper's Farm")
        assert text.startswith("*Piper's Farm 🌅 Daily Report* – Monday, March 4, 2024")
        assert "🚨 *Critical Alerts:*" in text
        assert "• Stock value critically low at £485,000" in text
        assert text.endswith("\n")

    def test_top_three_actions_by_priority(self) -> None:
        digest = _digest()
        text = render_chat_message(digest)
        action_lines = text.split("✅ *Action Items:*\n", 1)[1].strip().splitlines()
        # rule order is reorder (high), POs (medium), pricing (high), yield (high)
        assert action_lines == [
            "• [OPERATIONS] Reorder 3 critical items: Item 0, Item 1, Item 2",
            "• [FINANCE] Review pricing - margin at 12.0%",
            "• [OPERATIONS] Investigate low yield (78.5%) - check production processes",
        ]

    def test_weekly_title(self) -> None:
        assert render_chat_message(_digest(ReportType.WEEKLY)).startswith("*📊 Weekly Summary*")


class TestAlertAndDepartmentMessages:
    def test_alert_message(self) -> None:
        alert = Alert(
            domain=Domain.OPERATIONS,
            type=AlertType.STOCK_VALUE_LOW,
            message="Stock value critically low at £485,000",
            severity=Severity.CRITICAL,
        )
        assert render_alert_message(alert) == "🚨 *[CRITICAL]* Stock value critically low at £485,000"

    def test_finance_department_message(self) -> None:
        text = render_department_message(_digest(), Department.FINANCE, company="Piper's Farm")
        assert text.startswith("*Piper's Farm 💰 Finance Update* – Monday, March 4, 2024\n")
        assert "• 🚨 Margin critically low at 12.0%" in text
        action_lines = text.split("✅ *Action Items:*\n", 1)[1].strip().splitlines()
        assert action_lines == [
            "• 🔴 Review pricing - margin at 12.0%",
            "• 🟡 Approve pending POs: PO-1",
        ]
        assert "Reorder" not in text

    def test_operations_department_message(self) -> None:
        text = render_department_message(_digest(), Department.OPERATIONS)
        assert text.startswith("*🏭 Operations Update*")
        assert "• 🚨 Stock value critically low at £485,000" in text
        assert "• 🔴 Reorder 3 critical items: Item 0, Item 1, Item 2" in text
        assert "Approve pending POs" not in text

    def test_daily_marketing_has_nothing_to_report(self) -> None:
        text = render_department_message(_digest(), Department.MARKETING)
        assert text.endswith("\n\nNo alerts or actions.\n")
