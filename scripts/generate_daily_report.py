#!/usr/bin/env python3
"""Daily digest CLI — fetch every source, build the digest, write and publish it.

Usage:
    python -m scripts.generate_daily_report
    python -m scripts.generate_daily_report 2024-03-04
    python -m scripts.generate_daily_report 2024-03-04 --config config/settings.yaml --no-publish

Writes ``<output_dir>/daily/<date>_digest.json``, ``<date>_digest.md`` and
``<date>_slack.txt``. Exits with status 1 when any source fails.
"""

from __future__ import annotations

import argparse
import asyncio
import datetime
import sys
from contextlib import AsyncExitStack

import structlog

from bizdigest.core.config import load_settings
from bizdigest.core.logging import setup_logging
from bizdigest.core.types import Digest, ReportType
from bizdigest.delivery.artifacts import write_artifacts
from bizdigest.delivery.factory import create_publisher
from bizdigest.executive.exceptions import DigestGenerationError
from bizdigest.executive.factory import create_executive
from bizdigest.render.chat import render_chat_message
from bizdigest.sources.exceptions import SourceError

logger = structlog.stdlib.get_logger()


def build_parser(description: str, date_help: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument(
        "date",
        nargs="?",
        type=datetime.date.fromisoformat,
        default=None,
        help=date_help,
    )
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
    parser.add_argument(
        "--no-publish",
        action="store_true",
        help="Write artifacts but do not post to Slack",
    )
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = build_parser(
        "Generate the daily executive digest.",
        "Report date YYYY-MM-DD (default: yesterday)",
    )
    return parser.parse_args(argv)


def print_tally(digest: Digest) -> None:
    total = digest.alerts.total
    if total:
        print(f"\n{total} alert(s) generated")
        print(f"   Critical: {len(digest.alerts.critical)}")
        print(f"   Warning: {len(digest.alerts.warning)}")


async def generate(args: argparse.Namespace, report_type: ReportType) -> int:
    """Run one report end to end. Returns the process exit status."""
    settings = load_settings(args.config)
    setup_logging(level=args.log_level)
    company = settings.reporting.company_name

    executive, sources = create_executive(settings)
    try:
        async with AsyncExitStack() as stack:
            for source in sources:
                await stack.enter_async_context(source)
            if report_type == ReportType.DAILY:
                digest = await executive.daily_digest(args.date)
            else:
                digest = await executive.weekly_digest(args.date)
    except DigestGenerationError as exc:
        logger.error("report_failed", type=report_type, domains=[str(d) for d in exc.domains])
        print(f"Error generating {report_type} report: {exc}", file=sys.stderr)
        return 1
    except SourceError as exc:
        logger.error("report_failed", type=report_type, error=str(exc))
        print(f"Error generating {report_type} report: {exc}", file=sys.stderr)
        return 1

    paths = write_artifacts(digest, settings.reporting.output_dir, company=company)
    for key, path in paths.items():
        print(f"Saved {key}: {path}")

    if not args.no_publish:
        publisher = create_publisher(settings.alerts, company=company)
        try:
            await publisher.publish(digest)
        finally:
            await publisher.close()

    print("\n" + "=" * 60)
    print(render_chat_message(digest, company=company), end="")
    print("=" * 60)
    print_tally(digest)
    return 0


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    sys.exit(asyncio.run(generate(args, ReportType.DAILY)))


if __name__ == "__main__":
    main()
