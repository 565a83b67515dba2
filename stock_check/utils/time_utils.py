"""
Date helpers for run dates and trailing-return horizons.

Key concepts:
  - Run dates are plain ``YYYY-MM-DD`` strings in the output contract.
  - The prediction date is the next calendar day (no trading calendar).
  - Trailing horizons subtract whole calendar months from the latest bar,
    clamping to the last day of the target month (May 31 - 3m = Feb 28/29).
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta, timezone
from typing import Optional


def utcnow() -> datetime:
    """Return the current UTC datetime with timezone info."""
    return datetime.now(tz=timezone.utc)


def utcnow_iso() -> str:
    """Return the current UTC time as an ISO-8601 string with ``Z`` suffix."""
    return utcnow().isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso_date(value: str) -> Optional[date]:
    """Parse a ``YYYY-MM-DD`` string, returning ``None`` when malformed.

    Only the dashed, zero-padded form is accepted; ``20260101`` and
    ``2026-W01-1`` are rejected even though ``date.fromisoformat`` takes them.
    """
    text = str(value).strip()
    if len(text) != 10:
        return None
    try:
        return datetime.strptime(text, "%Y-%m-%d").date()
    except ValueError:
        return None


def next_calendar_day(value: date) -> date:
    """Return the day after ``value`` (the default prediction date)."""
    return value + timedelta(days=1)


def subtract_months(value: date, months: int) -> date:
    """Return ``value`` shifted back by ``months`` calendar months.

    The day is clamped to the length of the target month.

    Args:
        value:  Reference date.
        months: Non-negative number of months to subtract.

    Returns:
        The shifted date.

    Raises:
        ValueError: If ``months`` is negative.
    """
    if months < 0:
        raise ValueError(f"months must be >= 0, got {months}.")
    total = value.year * 12 + (value.month - 1) - months
    year, month = divmod(total, 12)
    month += 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)
