"""Tests for bizdigest/core/logging.py — handler wiring and level overrides."""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest
import structlog
import yaml

from bizdigest.core.config import load_settings, reset_settings
from bizdigest.core.logging import setup_logging


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    httpx_level = logging.getLogger("httpx").level
    reset_settings()
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("httpx").setLevel(httpx_level)
    structlog.reset_defaults()
    reset_settings()


def _settings_file(tmp_path: Path, level: str = "DEBUG", fmt: str = "json") -> Path:
    path = tmp_path / "settings.yaml"
    path.write_text(yaml.dump({"logging": {"level": level, "format": fmt}}))
    return path


class TestSetupLogging:
    def test_uses_configured_level(self, tmp_path: Path) -> None:
        load_settings(_settings_file(tmp_path, level="DEBUG"))
        setup_logging()

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1

    def test_handler_writes_to_stderr(self, tmp_path: Path) -> None:
        load_settings(_settings_file(tmp_path))
        setup_logging()

        handler = logging.getLogger().handlers[0]
        assert isinstance(handler, logging.StreamHandler)
        assert handler.stream is sys.stderr
        assert isinstance(handler.formatter, structlog.stdlib.ProcessorFormatter)

    def test_override_beats_config(self, tmp_path: Path) -> None:
        load_settings(_settings_file(tmp_path, level="DEBUG"))
        setup_logging(level="error", fmt="console")
        assert logging.getLogger().level == logging.ERROR

    def test_unknown_level_falls_back_to_info(self, tmp_path: Path) -> None:
        load_settings(_settings_file(tmp_path))
        setup_logging(level="chatty")
        assert logging.getLogger().level == logging.INFO

    def test_httpx_requests_quieted(self, tmp_path: Path) -> None:
        load_settings(_settings_file(tmp_path, level="DEBUG"))
        setup_logging()
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_httpx_follows_stricter_root(self, tmp_path: Path) -> None:
        load_settings(_settings_file(tmp_path))
        setup_logging(level="ERROR")
        assert logging.getLogger("httpx").level == logging.ERROR
