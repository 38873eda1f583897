#!/usr/bin/env python3
"""Weekly summary CLI — the 7 days ending on a date against the week before.

Usage:
    python -m scripts.generate_weekly_report
    python -m scripts.generate_weekly_report 2024-03-10 --no-publish

Writes ``<output_dir>/weekly/<date>_summary.json``, ``<date>_summary.md`` and
``<date>_slack.txt``. Exits with status 1 when any source fails.
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from bizdigest.core.types import ReportType
from scripts.generate_daily_report import build_parser, generate


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = build_parser(
        "Generate the weekly executive summary.",
        "Last day of the week YYYY-MM-DD (default: today)",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    sys.exit(asyncio.run(generate(args, ReportType.WEEKLY)))


if __name__ == "__main__":
    main()
