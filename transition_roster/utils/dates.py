from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date, datetime, timedelta
from typing import Any
from zoneinfo import ZoneInfo

import pandas as pd

"""School calendar arithmetic and date parsing.

Holidays are compared as ``YYYY-MM-DD`` strings. Human facing dates are
rendered ``MM/DD/YYYY``.
"""

__all__ = [
    "to_date",
    "format_iso",
    "format_mmddyyyy",
    "format_due_date",
    "normalize_holidays",
    "is_weekend",
    "is_holiday",
    "add_workdays",
    "today_in",
]

logger = logging.getLogger(__name__)


def to_date(value: Any, *, context: str = "") -> date | None:
    """Coerce a cell value to a ``date``.

    Accepts native dates/datetimes, pandas Timestamps and date strings.
    Blank values return None quietly; anything unparseable logs a warning
    and returns None.
    """
    if value is None:
        return None
    if isinstance(value, pd.Timestamp):
        return None if pd.isna(value) else value.date()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, float) and pd.isna(value):
        return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        parsed = pd.to_datetime(text, errors="coerce")
        if not pd.isna(parsed):
            return parsed.date()
    where = f" ({context})" if context else ""
    logger.warning(f"unparseable date{where}: {value!r}")
    return None


def format_iso(d: date) -> str:
    return d.strftime("%Y-%m-%d")


def format_mmddyyyy(d: date | None) -> str | None:
    return d.strftime("%m/%d/%Y") if d is not None else None


def format_due_date(d: date) -> str:
    """Reminder e-mail style ``MM-DD-YYYY``."""
    return d.strftime("%m-%d-%Y")


def normalize_holidays(values: Iterable[Any]) -> frozenset[str]:
    """Normalize holiday entries (dates or strings) to ISO strings.

    Entries that do not parse are dropped with a warning.
    """
    out: set[str] = set()
    for v in values:
        d = to_date(v, context="holiday list")
        if d is not None:
            out.add(format_iso(d))
    return frozenset(out)


def is_weekend(d: date) -> bool:
    return d.weekday() >= 5


def is_holiday(d: date, holidays: Iterable[str]) -> bool:
    return format_iso(d) in holidays


def add_workdays(start: date, n: int, holidays: Iterable[str] = ()) -> date:
    """Advance ``start`` by ``n`` school days.

    Steps one calendar day at a time and counts only days that are neither
    weekend nor holiday. The start day itself is never counted.
    """
    hol = holidays if isinstance(holidays, (set, frozenset)) else frozenset(holidays)
    current = start
    added = 0
    while added < n:
        current += timedelta(days=1)
        if not is_weekend(current) and not is_holiday(current, hol):
            added += 1
    return current


def today_in(timezone: str) -> date:
    return datetime.now(ZoneInfo(timezone)).date()
