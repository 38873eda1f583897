"""Source adapters — commerce, inventory, production and email marketing systems."""

from bizdigest.sources.aptean import ApteanApiSource, ApteanCsvSource, create_yield_source
from bizdigest.sources.base import (
    CampaignSource,
    HttpSource,
    InventorySource,
    SalesSource,
    YieldSource,
)
from bizdigest.sources.exceptions import (
    SourceAuthError,
    SourceConnectionError,
    SourceError,
    SourceParseError,
)
from bizdigest.sources.klaviyo import KlaviyoSource
from bizdigest.sources.orderwise import OrderwiseSource
from bizdigest.sources.shopify import ShopifySource

__all__ = [
    "ApteanApiSource",
    "ApteanCsvSource",
    "CampaignSource",
    "HttpSource",
    "InventorySource",
    "KlaviyoSource",
    "OrderwiseSource",
    "SalesSource",
    "ShopifySource",
    "SourceAuthError",
    "SourceConnectionError",
    "SourceError",
    "SourceParseError",
    "YieldSource",
    "create_yield_source",
]
