"""Shopify adapter — orders from the Admin REST API."""

from __future__ import annotations

from typing import Any

import structlog

from bizdigest.core.config import ShopifyConfig, get_settings
from bizdigest.core.convert import normalize_date, optional_float, safe_get
from bizdigest.core.types import OrderLineItem, OrderRecord, Window
from bizdigest.sources.base import HttpSource, SalesSource, expect_list

logger = structlog.stdlib.get_logger()


def _parse_line_item(raw: dict[str, Any]) -> OrderLineItem:
    """Normalize a Shopify line item.

    The variant's ``compare_at_price`` stands in for unit cost when it parses
    as a number; otherwise cost is left unset and the aggregator applies its
    fallback ratio.
    """
    cost = safe_get(raw, "variant.compare_at_price")
    return OrderLineItem(
        name=str(raw.get("name") or "").strip() or "Unknown Product",
        quantity=raw.get("quantity"),
        price=raw.get("price"),
        unit_cost=optional_float(cost),
    )


def _parse_order(raw: dict[str, Any]) -> OrderRecord:
    line_items = raw.get("line_items")
    return OrderRecord(
        order_id=str(raw.get("id", "")),
        created_at=normalize_date(raw.get("created_at")) or "",
        total_price=raw.get("total_price"),
        line_items=[
            _parse_line_item(item)
            for item in (line_items if isinstance(line_items, list) else [])
            if isinstance(item, dict)
        ],
    )


class ShopifySource(HttpSource, SalesSource):
    """Reads orders for a window, following ``Link: rel="next"`` pagination."""

    name = "shopify"

    def __init__(self, config: ShopifyConfig | None = None) -> None:
        cfg = config or get_settings().sources.shopify
        super().__init__(
            base_url=f"https://{cfg.store_url}/admin/api/{cfg.api_version}",
            headers={
                "X-Shopify-Access-Token": cfg.access_token.get_secret_value(),
                "Content-Type": "application/json",
            },
            timeout_secs=cfg.timeout_secs,
        )
        self._config = cfg

    async def fetch_orders(self, window: Window) -> list[OrderRecord]:
        url: str | None = "/orders.json"
        params: dict[str, Any] | None = {
            "status": "any",
            "created_at_min": window.start.isoformat(),
            "created_at_max": window.end.isoformat(),
            "limit": self._config.page_limit,
        }
        orders: list[OrderRecord] = []
        pages = 0

        while url:
            response = await self._request("GET", url, params=params)
            body = self._decode(response, self.name)
            orders.extend(_parse_order(o) for o in expect_list(body, self.name, "orders"))
            pages += 1
            url = response.links.get("next", {}).get("url")
            # Cursor URLs carry their own query string.
            params = None

        logger.info(
            "shopify_orders_fetched",
            count=len(orders),
            pages=pages,
            start=window.start.isoformat(),
            end=window.end.isoformat(),
        )
        return orders
