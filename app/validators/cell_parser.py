"""
app/validators/cell_parser.py

Lenient cell-level parsing for spreadsheet exports.

Nothing in this module raises on bad input: an earning that cannot be
parsed is worth 0 and a date that cannot be parsed is absent.
"""

from __future__ import annotations

import logging
import math
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

logger = logging.getLogger(__name__)

TIMESTAMP_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%Y-%m-%d %H:%M:%S",
    "%Y/%m/%d %H:%M:%S",
    "%m/%d/%Y %H:%M:%S",
    "%b %d, %Y",
    "%B %d, %Y",
)


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, (list, tuple)):
        return all(str(item).strip() == "" for item in value)
    return str(value).strip() == ""


def is_completely_empty_row(row: Mapping[Any, Any]) -> bool:
    """
    Return True when all values in the row are empty or whitespace.
    """

    return all(is_blank(value) for value in row.values())


def parse_optional_string(value: Any) -> str | None:
    if is_blank(value):
        return None
    return str(value).strip()


def parse_earning(value: Any) -> float:
    """
    Parse one earning cell.

    Numbers pass through; strings lose their comma thousands separators and
    are parsed as decimals. Blank and unparsable cells are worth 0.
    """

    if is_blank(value) or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else 0.0

    raw_value = str(value).strip().replace(",", "")
    try:
        parsed = Decimal(raw_value)
    except (InvalidOperation, ValueError):
        logger.debug("Unparsable earning value treated as 0: %r", value)
        return 0.0
    if not parsed.is_finite():
        logger.debug("Non-finite earning value treated as 0: %r", value)
        return 0.0
    return float(parsed)


def parse_date(value: Any) -> datetime | None:
    """
    Parse a date cell into a timezone-aware datetime, or None.
    """

    if is_blank(value):
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)

    raw = str(value).strip()
    normalized = raw[:-1] + "+00:00" if raw.endswith("Z") else raw
    try:
        parsed = datetime.fromisoformat(normalized)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed
    except ValueError:
        pass

    for fmt in TIMESTAMP_FORMATS:
        try:
            parsed = datetime.strptime(raw, fmt)
            return parsed.replace(tzinfo=timezone.utc)
        except ValueError:
            continue

    logger.debug("Unparsable date value ignored: %r", value)
    return None


def format_locale_date(value: datetime) -> str:
    """Format *value* as a Vietnamese locale date string (d/m/yyyy, unpadded)."""
    return f"{value.day}/{value.month}/{value.year}"
