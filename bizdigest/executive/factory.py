"""Convenience factory for wiring the digest pipeline from settings."""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import Any

from bizdigest.core.config import Settings
from bizdigest.domains.finance import FinanceAggregator
from bizdigest.domains.marketing import MarketingAggregator
from bizdigest.domains.operations import OperationsAggregator
from bizdigest.executive.aggregator import ExecutiveAggregator
from bizdigest.sources.aptean import create_yield_source
from bizdigest.sources.klaviyo import KlaviyoSource
from bizdigest.sources.orderwise import OrderwiseSource
from bizdigest.sources.shopify import ShopifySource


def create_executive(
    settings: Settings,
) -> tuple[ExecutiveAggregator, list[AbstractAsyncContextManager[Any]]]:
    """Build the executive aggregator and the source adapters it reads from.

    The Aptean variant (API or CSV) is chosen here, once.

    Returns:
        (executive, sources) — enter every source before generating a digest.
    """
    shopify = ShopifySource(settings.sources.shopify)
    orderwise = OrderwiseSource(settings.sources.orderwise)
    aptean = create_yield_source(settings.sources.aptean)
    klaviyo = KlaviyoSource(settings.sources.klaviyo)

    executive = ExecutiveAggregator(
        finance=FinanceAggregator(shopify),
        operations=OperationsAggregator(orderwise, aptean),
        marketing=MarketingAggregator(klaviyo),
        thresholds=settings.thresholds,
        timezone=settings.reporting.timezone,
        yield_window_days=settings.reporting.yield_window_days,
    )
    return executive, [shopify, orderwise, aptean, klaviyo]
