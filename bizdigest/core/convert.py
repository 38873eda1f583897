"""Fallback conversions for loosely-typed upstream data.

Applied at the adapter boundary so aggregation code can rely on real numbers.
Every helper returns a typed default instead of raising.
"""

from __future__ import annotations

import datetime
import math
import re
from collections.abc import Mapping
from typing import Annotated, Any

from pydantic import BeforeValidator

_WEIGHT_TO_KG: dict[str, float] = {
    "kg": 1.0,
    "g": 0.001,
    "lbs": 0.453592,
    "oz": 0.0283495,
}

# Unix timestamps above this are treated as milliseconds.
_MILLIS_CUTOFF = 9_999_999_999


def optional_float(value: Any) -> float | None:
    """Parse *value* as a finite float, or ``None`` for null/blank/garbage."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def safe_float(value: Any, fallback: float = 0.0) -> float:
    """Parse *value* as a float, returning *fallback* for null/blank/garbage."""
    result = optional_float(value)
    return fallback if result is None else result


def safe_int(value: Any, fallback: int = 0) -> int:
    """Parse *value* as an int (truncating decimals), else *fallback*."""
    if value is None or isinstance(value, bool):
        return fallback
    if isinstance(value, int):
        return value
    parsed = safe_float(value, fallback=math.nan)
    if math.isnan(parsed):
        return fallback
    return int(parsed)


def normalize_date(value: Any) -> str | None:
    """Normalize a date-ish value to an ISO 8601 string.

    Accepts ``datetime``/``date`` objects, ISO strings (with or without a
    trailing ``Z``) and unix timestamps in seconds or milliseconds.
    Returns None when the value cannot be interpreted.
    """
    if value is None or value == "" or isinstance(value, bool):
        return None

    if isinstance(value, datetime.datetime):
        return value.isoformat()
    if isinstance(value, datetime.date):
        return value.isoformat()

    if isinstance(value, int | float):
        seconds = value / 1000 if value > _MILLIS_CUTOFF else value
        try:
            return datetime.datetime.fromtimestamp(seconds, tz=datetime.UTC).isoformat()
        except (OverflowError, OSError, ValueError):
            return None

    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.datetime.fromisoformat(text).isoformat()
    except ValueError:
        return None


def parse_datetime(value: Any) -> datetime.datetime | None:
    """Parse a date-ish value into a datetime (UTC assumed when naive)."""
    iso = normalize_date(value)
    if iso is None:
        return None
    parsed = datetime.datetime.fromisoformat(iso)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=datetime.UTC)
    return parsed


def safe_get(obj: Any, path: str, fallback: Any = None) -> Any:
    """Read a dotted path (``"a.b.c"``) from nested mappings."""
    if not obj or not path:
        return fallback
    current: Any = obj
    for key in path.split("."):
        if not isinstance(current, Mapping) or key not in current:
            return fallback
        current = current[key]
    return fallback if current is None else current


def normalize_product_name(name: Any) -> str:
    """Trim, collapse whitespace and title-case a product name."""
    if not isinstance(name, str) or not name.strip():
        return "Unknown Product"
    words = re.sub(r"\s+", " ", name.strip()).split(" ")
    return " ".join(w[:1].upper() + w[1:].lower() for w in words)


def clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


def normalize_percentage(value: Any) -> float:
    """Coerce to a float in the 0–100 range."""
    return clamp(safe_float(value), 0.0, 100.0)


def normalize_weight(value: Any, unit: str = "kg") -> float:
    """Convert a weight in kg/g/lbs/oz to kilograms. Unknown units pass through."""
    return safe_float(value) * _WEIGHT_TO_KG.get(unit.lower(), 1.0)


# Pydantic field types that absorb malformed input.
SafeFloat = Annotated[float, BeforeValidator(safe_float)]
SafeInt = Annotated[int, BeforeValidator(safe_int)]
