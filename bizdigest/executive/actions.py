"""Action-item synthesis from the finance, operations and marketing reports.

Every rule is evaluated, in a fixed order, and contributes at most one item.
The output keeps that rule order; callers that want priority order use
:func:`sort_by_priority`.
"""

from __future__ import annotations

from collections.abc import Iterable

from bizdigest.core.config import ThresholdConfig
from bizdigest.core.types import (
    PRIORITY_ORDER,
    ActionItem,
    Department,
    FinanceReport,
    MarketingReport,
    OperationsReport,
    Priority,
)

REORDER_PRODUCTS_LIMIT = 3
PURCHASE_ORDERS_LIMIT = 2


def synthesize_actions(
    finance: FinanceReport,
    operations: OperationsReport,
    marketing: MarketingReport | None = None,
    thresholds: ThresholdConfig | None = None,
) -> list[ActionItem]:
    """Derive follow-up actions for each department.

    Args:
        finance: Finance report for the period.
        operations: Operations report for the day.
        marketing: Weekly marketing report; absent for daily digests, in which
            case the open-rate rule does not apply.
        thresholds: Source of the action boundaries. Defaults apply when None.

    Returns:
        Action items in rule order.
    """
    limits = thresholds or ThresholdConfig()
    actions: list[ActionItem] = []

    reorder = operations.stock.reorder_alerts[:REORDER_PRODUCTS_LIMIT]
    if operations.stock.items_below_reorder > 0 and reorder:
        actions.append(
            ActionItem(
                priority=Priority.HIGH,
                department=Department.OPERATIONS,
                description=(
                    f"Reorder {len(reorder)} critical items: "
                    + ", ".join(alert.product for alert in reorder)
                ),
            )
        )

    if operations.purchase_orders:
        pending = operations.purchase_orders[:PURCHASE_ORDERS_LIMIT]
        actions.append(
            ActionItem(
                priority=Priority.MEDIUM,
                department=Department.FINANCE,
                description="Approve pending POs: " + ", ".join(po.po_number for po in pending),
            )
        )

    margin = finance.margins.margin_percentage
    if margin < limits.finance.margin_action_percentage:
        actions.append(
            ActionItem(
                priority=Priority.HIGH,
                department=Department.FINANCE,
                description=f"Review pricing - margin at {margin:.1f}%",
            )
        )

    avg_yield = operations.production.average_yield_percentage
    if avg_yield < limits.operations.yield_action_percentage:
        actions.append(
            ActionItem(
                priority=Priority.HIGH,
                department=Department.OPERATIONS,
                description=(
                    f"Investigate low yield ({avg_yield:.1f}%) - check production processes"
                ),
            )
        )

    if marketing is not None:
        open_rate = marketing.campaigns.average_open_rate
        if open_rate < limits.marketing.open_rate_action_percentage:
            actions.append(
                ActionItem(
                    priority=Priority.MEDIUM,
                    department=Department.MARKETING,
                    description=f"Review email subject lines - open rate at {open_rate:.1f}%",
                )
            )

    return actions


def sort_by_priority(actions: Iterable[ActionItem]) -> list[ActionItem]:
    """High before medium before low; equal priorities keep their order."""
    return sorted(actions, key=lambda action: PRIORITY_ORDER[action.priority])
