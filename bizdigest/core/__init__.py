"""Core module — config, types, conversions, logging."""

from bizdigest.core.config import (
    Settings,
    ThresholdConfig,
    get_settings,
    load_settings,
    load_thresholds,
    reset_settings,
)
from bizdigest.core.logging import setup_logging
from bizdigest.core.types import (
    ActionItem,
    Alert,
    ComparisonResult,
    Digest,
    Domain,
    Priority,
    ReportType,
    Severity,
    Trend,
    Window,
    day_window,
    trailing_window,
)

__all__ = [
    "ActionItem",
    "Alert",
    "ComparisonResult",
    "Digest",
    "Domain",
    "Priority",
    "ReportType",
    "Settings",
    "Severity",
    "ThresholdConfig",
    "Trend",
    "Window",
    "day_window",
    "get_settings",
    "load_settings",
    "load_thresholds",
    "reset_settings",
    "setup_logging",
    "trailing_window",
]
