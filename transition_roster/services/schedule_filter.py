from __future__ import annotations

from datetime import date
from typing import Any

from ..models import columns as col
from ..models.student_record import RawRow
from ..utils.dates import to_date

"""Active schedule selection.

A schedule row is active while its withdrawal date is blank.
"""

__all__ = [
    "is_active",
    "filter_active",
    "most_recent_entry_date",
]


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def is_active(row: RawRow) -> bool:
    return _blank(row.get(col.WITHDRAWAL_DATE))


def filter_active(rows: list[RawRow] | None) -> list[RawRow]:
    """Rows with an empty, None or absent withdrawal date, order preserved."""
    return [r for r in rows or [] if is_active(r)]


def most_recent_entry_date(rows: list[RawRow] | None) -> date | None:
    """Latest parseable entry date among ``rows``; None when none parse."""
    best: date | None = None
    for row in rows or []:
        d = to_date(row.get(col.ENTRY_DATE), context="schedule entry date")
        if d is not None and (best is None or d > best):
            best = d
    return best
