"""Aptean adapter — production batch yields via REST API or CSV export.

The integration method is fixed per deployment; :func:`create_yield_source`
picks the variant once from configuration.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from pathlib import Path
from types import TracebackType
from typing import Any

import pandas as pd
import structlog

from bizdigest.core.config import ApteanConfig, get_settings
from bizdigest.core.convert import normalize_product_name, normalize_weight, parse_datetime
from bizdigest.core.types import IntegrationMethod, Window, YieldRecord
from bizdigest.sources.base import HttpSource, YieldSource, expect_list
from bizdigest.sources.exceptions import SourceConnectionError, SourceParseError

logger = structlog.stdlib.get_logger()

REQUIRED_CSV_COLUMNS = frozenset(
    {"batch_id", "product_type", "input_weight_kg", "output_weight_kg", "production_date"}
)


def _parse_yield(raw: Mapping[str, Any]) -> YieldRecord:
    """Normalize one batch row. Weights are converted to kilograms.

    Sites that weigh in other units add a ``weight_unit`` column
    (``g``, ``lbs``, ``oz``); absent or blank means kilograms.
    """
    unit = str(raw.get("weight_unit") or "kg")
    return YieldRecord(
        batch_id=str(raw.get("batch_id") or ""),
        product_type=normalize_product_name(raw.get("product_type")),
        input_weight=normalize_weight(raw.get("input_weight_kg"), unit),
        output_weight=normalize_weight(raw.get("output_weight_kg"), unit),
        waste_weight=normalize_weight(raw.get("waste_weight_kg"), unit),
        production_date=str(raw.get("production_date") or ""),
    )


# ── REST API ────────────────────────────────────────────────────


class ApteanApiSource(HttpSource, YieldSource):
    """Reads yields from ``/production/yields`` for a date range."""

    name = "aptean"

    def __init__(self, config: ApteanConfig | None = None) -> None:
        cfg = config or get_settings().sources.aptean
        super().__init__(
            base_url=cfg.api_url,
            headers={
                "Authorization": f"Bearer {cfg.api_key.get_secret_value()}",
                "Content-Type": "application/json",
            },
            timeout_secs=cfg.timeout_secs,
        )

    async def fetch_yields(self, window: Window) -> list[YieldRecord]:
        body = await self._get_json(
            "/production/yields",
            params={
                "start_date": window.start_date.isoformat(),
                "end_date": window.end_date.isoformat(),
            },
        )
        records = [_parse_yield(raw) for raw in expect_list(body, self.name)]
        logger.info(
            "aptean_yields_fetched",
            method=IntegrationMethod.API,
            count=len(records),
            start=window.start_date.isoformat(),
            end=window.end_date.isoformat(),
        )
        return records


# ── CSV export ──────────────────────────────────────────────────


class ApteanCsvSource(YieldSource):
    """Reads yields from the nightly CSV export on a shared path.

    Rows are kept when their production *date* falls within the window's
    calendar dates; rows with an unparseable date are skipped and counted.
    """

    name = "aptean_csv"

    def __init__(self, config: ApteanConfig | None = None) -> None:
        cfg = config or get_settings().sources.aptean
        self._path = Path(cfg.csv_export_path) / cfg.csv_filename

    @property
    def path(self) -> Path:
        return self._path

    async def connect(self) -> None:
        """Nothing to open; the export is read on every fetch."""

    async def close(self) -> None:
        """Nothing to release."""

    async def fetch_yields(self, window: Window) -> list[YieldRecord]:
        frame = await asyncio.to_thread(self._read_export)

        records: list[YieldRecord] = []
        skipped = 0
        for raw in frame.to_dict(orient="records"):
            produced = parse_datetime(raw.get("production_date"))
            if produced is None:
                skipped += 1
                continue
            if window.start_date <= produced.date() <= window.end_date:
                records.append(_parse_yield(raw))

        logger.info(
            "aptean_yields_fetched",
            method=IntegrationMethod.CSV,
            path=str(self._path),
            count=len(records),
            skipped=skipped,
            start=window.start_date.isoformat(),
            end=window.end_date.isoformat(),
        )
        return records

    def _read_export(self) -> pd.DataFrame:
        try:
            frame = pd.read_csv(
                self._path,
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True,
            )
        except FileNotFoundError as exc:
            raise SourceConnectionError(f"aptean export not found: {self._path}") from exc
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as exc:
            raise SourceParseError(f"aptean export unreadable: {self._path}") from exc

        missing = REQUIRED_CSV_COLUMNS - set(frame.columns)
        if missing:
            raise SourceParseError(
                f"aptean export missing columns: {', '.join(sorted(missing))}"
            )
        return frame

    async def __aenter__(self) -> ApteanCsvSource:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        return None


def create_yield_source(config: ApteanConfig | None = None) -> ApteanApiSource | ApteanCsvSource:
    """Build the yield adapter for the configured integration method."""
    cfg = config or get_settings().sources.aptean
    if cfg.integration_method == IntegrationMethod.CSV:
        return ApteanCsvSource(cfg)
    return ApteanApiSource(cfg)
