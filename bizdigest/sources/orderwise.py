"""Orderwise adapter — stock levels, warehouse dispatches, purchase orders."""

from __future__ import annotations

import datetime
from typing import Any

import structlog

from bizdigest.core.config import OrderwiseConfig, get_settings
from bizdigest.core.types import DispatchRecord, PurchaseOrder, StockItem
from bizdigest.sources.base import HttpSource, InventorySource, expect_list
from bizdigest.sources.exceptions import SourceAuthError, SourceConnectionError, SourceError

logger = structlog.stdlib.get_logger()


def _parse_stock_item(raw: dict[str, Any]) -> StockItem:
    return StockItem(
        product_code=str(raw.get("product_code") or ""),
        product_name=str(raw.get("product_name") or "").strip() or "Unknown Product",
        quantity_available=raw.get("quantity_available"),
        quantity_allocated=raw.get("quantity_allocated"),
        quantity_on_order=raw.get("quantity_on_order"),
        reorder_level=raw.get("reorder_level"),
        location=str(raw.get("location") or ""),
        unit_cost=raw.get("unit_cost"),
    )


def _parse_dispatch(raw: dict[str, Any]) -> DispatchRecord:
    return DispatchRecord(
        dispatch_id=str(raw.get("id") or raw.get("dispatch_id") or ""),
        status=str(raw.get("status") or "").lower(),
        items_count=raw.get("items_count"),
    )


def _parse_purchase_order(raw: dict[str, Any]) -> PurchaseOrder:
    line_items = raw.get("line_items")
    return PurchaseOrder(
        po_number=str(raw.get("po_number") or ""),
        supplier=str(raw.get("supplier_name") or ""),
        total_value=raw.get("total_value"),
        expected_date=str(raw.get("expected_delivery_date") or ""),
        items_count=len(line_items) if isinstance(line_items, list) else 0,
    )


class OrderwiseSource(HttpSource, InventorySource):
    """Bearer-key client with optional username/password token exchange.

    When a username is configured, :meth:`connect` exchanges the credentials
    at ``/auth/token`` and replaces the bearer header with the issued token.
    """

    name = "orderwise"

    def __init__(self, config: OrderwiseConfig | None = None) -> None:
        cfg = config or get_settings().sources.orderwise
        super().__init__(
            base_url=cfg.base_url,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {cfg.api_key.get_secret_value()}",
            },
            timeout_secs=cfg.timeout_secs,
        )
        self._config = cfg

    async def connect(self) -> None:
        await super().connect()
        if self._config.username:
            await self.authenticate()

    async def authenticate(self) -> str:
        """Exchange username/password for an access token."""
        http = self._http
        if http is None:
            raise SourceConnectionError(f"{self.name} client not connected")

        try:
            response = await self._request(
                "POST",
                "/auth/token",
                json={
                    "username": self._config.username,
                    "password": self._config.password.get_secret_value(),
                },
            )
        except SourceError as exc:
            raise SourceAuthError(f"orderwise authentication failed: {exc}") from exc

        body = self._decode(response, self.name)
        token = body.get("access_token") if isinstance(body, dict) else None
        if not token:
            raise SourceAuthError("orderwise token response missing access_token")

        http.headers["Authorization"] = f"Bearer {token}"
        logger.info("orderwise_authenticated")
        return str(token)

    async def fetch_stock_levels(self) -> list[StockItem]:
        body = await self._get_json("/stock/levels")
        items = [_parse_stock_item(raw) for raw in expect_list(body, self.name)]
        logger.info("orderwise_stock_fetched", count=len(items))
        return items

    async def fetch_dispatches(self, day: datetime.date) -> list[DispatchRecord]:
        body = await self._get_json("/warehouse/dispatches", params={"date": day.isoformat()})
        dispatches = [_parse_dispatch(raw) for raw in expect_list(body, self.name)]
        logger.info("orderwise_dispatches_fetched", count=len(dispatches), date=day.isoformat())
        return dispatches

    async def fetch_open_purchase_orders(self) -> list[PurchaseOrder]:
        body = await self._get_json("/purchase-orders", params={"status": "open"})
        orders = [_parse_purchase_order(raw) for raw in expect_list(body, self.name)]
        logger.info("orderwise_purchase_orders_fetched", count=len(orders))
        return orders
