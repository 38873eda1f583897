#!/usr/bin/env python3
"""Connection check: open every configured source and make one cheap fetch.

Usage:
    python -m scripts.check_connections
    python -m scripts.check_connections --config config/settings.yaml

Prints one status line per source and exits with status 1 when any fails.
"""

from __future__ import annotations

import argparse
import asyncio
import datetime
import sys
from dataclasses import dataclass
from typing import Any
from zoneinfo import ZoneInfo

import structlog

from bizdigest.core.config import load_settings
from bizdigest.core.logging import setup_logging
from bizdigest.core.types import day_window, trailing_window
from bizdigest.executive.factory import create_executive
from bizdigest.sources.base import CampaignSource, InventorySource, SalesSource, YieldSource
from bizdigest.sources.exceptions import SourceError

logger = structlog.stdlib.get_logger()

# Lookback for the yield and campaign fetches.
LOOKBACK_DAYS = 7


@dataclass(frozen=True)
class ConnectionResult:
    source: str
    ok: bool
    detail: str


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Check credentials and reachability of every data source.")
    parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level override (default: from config)",
    )
    return parser.parse_args(argv)


async def sample_fetch(source: Any, today: datetime.date, tz: datetime.tzinfo) -> str:
    """One small read against *source*; returns a short description of what came back."""
    if isinstance(source, SalesSource):
        orders = await source.fetch_orders(day_window(today - datetime.timedelta(days=1), tz))
        return f"{len(orders)} orders yesterday"
    if isinstance(source, InventorySource):
        stock = await source.fetch_stock_levels()
        return f"{len(stock)} stock items"
    if isinstance(source, YieldSource):
        batches = await source.fetch_yields(trailing_window(today, LOOKBACK_DAYS, tz))
        return f"{len(batches)} batches in {LOOKBACK_DAYS} days"
    if isinstance(source, CampaignSource):
        campaigns = await source.fetch_campaigns(trailing_window(today, LOOKBACK_DAYS, tz))
        return f"{len(campaigns)} campaigns in {LOOKBACK_DAYS} days"
    raise TypeError(f"no sample fetch for {type(source).__name__}")


async def check_source(source: Any, today: datetime.date, tz: datetime.tzinfo) -> ConnectionResult:
    name = getattr(source, "name", type(source).__name__)
    try:
        async with source:
            detail = await sample_fetch(source, today, tz)
    except SourceError as exc:
        logger.warning("connection_check_failed", source=name, error=str(exc))
        return ConnectionResult(name, False, str(exc))

    logger.info("connection_check_passed", source=name, detail=detail)
    return ConnectionResult(name, True, detail)


async def check_all(sources: list[Any], today: datetime.date, tz: datetime.tzinfo) -> list[ConnectionResult]:
    """Check every source concurrently; results keep the order of *sources*."""
    return list(await asyncio.gather(*(check_source(s, today, tz) for s in sources)))


def print_results(results: list[ConnectionResult]) -> None:
    for result in results:
        status = "✅" if result.ok else "❌"
        print(f"{status} {result.source}: {result.detail}")
    passed = sum(1 for r in results if r.ok)
    print(f"\n{passed}/{len(results)} systems connected successfully")


async def run(args: argparse.Namespace) -> int:
    settings = load_settings(args.config)
    setup_logging(level=args.log_level)
    tz = ZoneInfo(settings.reporting.timezone)

    _, sources = create_executive(settings)
    results = await check_all(sources, datetime.datetime.now(tz).date(), tz)
    print_results(results)
    return 0 if all(r.ok for r in results) else 1


def main(argv: list[str] | None = None) -> None:
    sys.exit(asyncio.run(run(parse_args(argv))))


if __name__ == "__main__":
    main()
