"""Source adapter contracts and the shared HTTP client lifecycle.

Each adapter returns normalized records for a requested window and raises a
:class:`SourceError` (never an empty list) when the upstream system cannot be
reached or rejects the request.
"""

from __future__ import annotations

import abc
import datetime
from types import TracebackType
from typing import Any

import httpx
import structlog

from bizdigest.core.types import (
    CampaignRecord,
    DispatchRecord,
    OrderRecord,
    PurchaseOrder,
    StockItem,
    Window,
    YieldRecord,
)
from bizdigest.sources.exceptions import (
    SourceAuthError,
    SourceConnectionError,
    SourceParseError,
)

logger = structlog.stdlib.get_logger()


# ── Contracts ───────────────────────────────────────────────────


class SalesSource(abc.ABC):
    """Commerce platform: orders placed within a window."""

    @abc.abstractmethod
    async def fetch_orders(self, window: Window) -> list[OrderRecord]:
        """Return every order created within *window*."""


class InventorySource(abc.ABC):
    """Stock, warehouse dispatch and purchasing system."""

    @abc.abstractmethod
    async def fetch_stock_levels(self) -> list[StockItem]:
        """Return the current stock position of every product."""

    @abc.abstractmethod
    async def fetch_dispatches(self, day: datetime.date) -> list[DispatchRecord]:
        """Return the warehouse dispatches scheduled for *day*."""

    @abc.abstractmethod
    async def fetch_open_purchase_orders(self) -> list[PurchaseOrder]:
        """Return purchase orders that are still open."""


class YieldSource(abc.ABC):
    """Production system: batch yields within a window."""

    @abc.abstractmethod
    async def fetch_yields(self, window: Window) -> list[YieldRecord]:
        """Return every production batch dated within *window*."""


class CampaignSource(abc.ABC):
    """Email marketing platform: campaigns sent within a window."""

    @abc.abstractmethod
    async def fetch_campaigns(self, window: Window) -> list[CampaignRecord]:
        """Return every campaign sent within *window* with its statistics."""


# ── HTTP lifecycle ──────────────────────────────────────────────


class HttpSource:
    """Mixin owning an ``httpx.AsyncClient`` with error translation.

    Usage::

        async with ShopifySource(config) as shopify:
            orders = await shopify.fetch_orders(window)
    """

    name: str = "http"

    def __init__(
        self,
        base_url: str,
        headers: dict[str, str] | None = None,
        timeout_secs: float = 30.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._headers = dict(headers or {})
        self._timeout_secs = timeout_secs
        self._http: httpx.AsyncClient | None = None

    @property
    def connected(self) -> bool:
        """Whether the HTTP client is active."""
        return self._http is not None and not self._http.is_closed

    async def connect(self) -> None:
        """Create the httpx async client."""
        if self.connected:
            return
        self._http = httpx.AsyncClient(
            base_url=self._base_url,
            headers=self._headers,
            timeout=httpx.Timeout(self._timeout_secs),
        )

    async def close(self) -> None:
        """Close the httpx async client."""
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    async def _request(
        self,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send a request, mapping transport and status failures to SourceErrors."""
        if self._http is None:
            raise SourceConnectionError(f"{self.name} client not connected")

        try:
            response = await self._http.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.warning("source_request_failed", source=self.name, url=url, status=status)
            if status in (401, 403):
                raise SourceAuthError(f"{self.name} rejected credentials ({status})") from exc
            raise SourceConnectionError(f"{self.name} returned {status}") from exc
        except httpx.HTTPError as exc:
            logger.warning("source_request_failed", source=self.name, url=url, error=str(exc))
            raise SourceConnectionError(f"{self.name} request failed: {exc}") from exc
        return response

    @staticmethod
    def _decode(response: httpx.Response, source: str) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise SourceParseError(f"{source} returned invalid JSON") from exc

    async def _get_json(self, url: str, **kwargs: Any) -> Any:
        response = await self._request("GET", url, **kwargs)
        return self._decode(response, self.name)

    async def __aenter__(self) -> HttpSource:
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()


def expect_list(body: Any, source: str, key: str | None = None) -> list[dict[str, Any]]:
    """Extract a list of objects from a response body, or raise SourceParseError.

    Non-dict entries are dropped; a malformed record must not sink the batch.
    """
    items = body.get(key) if key is not None and isinstance(body, dict) else body
    if not isinstance(items, list):
        where = f" under {key!r}" if key else ""
        raise SourceParseError(f"{source} response missing list{where}")
    return [item for item in items if isinstance(item, dict)]
