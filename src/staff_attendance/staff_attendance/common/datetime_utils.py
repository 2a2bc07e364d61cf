from __future__ import annotations

import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Union

from ..core.exceptions import InvalidDateFormat, InvalidTimeFormat

DateLike = Union[str, date, datetime]

_DAY_KEY_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})(?:[T ].*)?$")
_MONTH_KEY_RE = re.compile(r"^\d{4}-\d{2}$")


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError) as exc:
        raise InvalidDateFormat(f"Invalid date: {value!r}") from exc


def normalize_day_key(value: DateLike) -> str:
    """Reduce a date, datetime, bare date string or ISO date-time string to YYYY-MM-DD.

    Idempotent: a normalized key maps to itself.
    """

    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if not isinstance(value, str):
        raise InvalidDateFormat(f"Unsupported date value: {value!r}")

    match = _DAY_KEY_RE.match(value.strip())
    if not match:
        raise InvalidDateFormat(f"Invalid date: {value!r}")
    key = match.group(1)
    # Rejects impossible calendar days such as 2025-02-30.
    parse_iso_date(key)
    return key


def is_month_key(value: str) -> bool:
    if not _MONTH_KEY_RE.match(value or ""):
        return False
    month = int(value[5:7])
    return 1 <= month <= 12


def month_key(value: DateLike) -> str:
    """YYYY-MM prefix of any date-like value."""
    return normalize_day_key(value)[:7]


def parse_clock_minutes(value: str) -> int:
    """Parse HH:MM (optionally HH:MM:SS) into minutes since midnight."""

    if not isinstance(value, str):
        raise InvalidTimeFormat(f"Invalid time: {value!r}")

    parts = value.strip().split(":")
    if len(parts) not in (2, 3) or not all(p.isdigit() for p in parts):
        raise InvalidTimeFormat(f"Invalid time: {value!r}")

    hours, minutes = int(parts[0]), int(parts[1])
    seconds = int(parts[2]) if len(parts) == 3 else 0
    if hours > 23 or minutes > 59 or seconds > 59:
        raise InvalidTimeFormat(f"Invalid time: {value!r}")
    return hours * 60 + minutes


def round_half_up(value: float) -> int:
    """Round like the dashboard does (0.5 goes up), not banker's rounding."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def today_local() -> date:
    """Current local date.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return date.today()
