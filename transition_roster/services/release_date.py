from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import date
from typing import Any

import pandas as pd

from ..excel.reader import SheetData
from ..models import columns as col
from ..models.student_record import MergedStudentRecord
from ..sources.loader import extract_student_id
from ..utils.dates import add_workdays, to_date
from .schedule_filter import most_recent_entry_date

"""Anticipated release date.

The exit date is the entry date advanced by the placement days plus the days
the student was enrolled but absent, counted in school days:

    add_workdays(entry, placement + max(enrollment - attendance, 0), holidays)

Missing inputs give None, never an exception.
"""

__all__ = [
    "estimate_exit_date",
    "placement_backup_from_sheet",
    "exit_date_for",
]

logger = logging.getLogger(__name__)


def _number(value: Any, what: str) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str) and not value.strip():
        return None
    n = pd.to_numeric(value, errors="coerce")
    if pd.isna(n):
        logger.warning(f"unparseable {what}: {value!r}")
        return None
    return int(n)


def estimate_exit_date(
    entry_date: Any,
    placement_days: Any,
    days_in_attendance: Any,
    days_in_enrollment: Any,
    holidays: Iterable[str] = (),
) -> date | None:
    """Projected exit date, or None when any input is missing, zero or unparseable."""
    entry = to_date(entry_date, context="entry date")
    if entry is None:
        return None
    placement = _number(placement_days, "placement days")
    attendance = _number(days_in_attendance, "days in attendance")
    enrollment = _number(days_in_enrollment, "days in enrollment")
    if not placement or not attendance or not enrollment:
        return None
    absent = max(enrollment - attendance, 0)
    return add_workdays(entry, placement + absent, holidays)


def placement_backup_from_sheet(sheet: SheetData | None) -> dict[int, Any]:
    """Student id -> placement days from the backup sheet.

    Headers are matched case-insensitively (``student id``,
    ``placement days``); an unusable sheet gives an empty map.
    """
    if sheet is None:
        return {}
    by_lower = {c.strip().lower(): c for c in sheet.columns}
    id_col = by_lower.get("student id")
    days_col = by_lower.get("placement days")
    if id_col is None or days_col is None:
        logger.warning(f"placement backup '{sheet.sheet_name}': student id / placement days headers not found")
        return {}
    result: dict[int, Any] = {}
    for row in sheet.rows:
        sid = extract_student_id(row.get(id_col))
        if sid is not None and row.get(days_col) is not None:
            result[sid] = row[days_col]
    return result


def exit_date_for(
    record: MergedStudentRecord,
    holidays: Iterable[str] = (),
    placement_backup: Mapping[int, Any] | None = None,
) -> date | None:
    """Assemble fallback-resolved inputs for one student and compute the exit date."""
    placement = record.first("Registrations").get(col.PLACEMENT_DAYS)
    if not placement and placement_backup:
        placement = placement_backup.get(record.student_id)
    entry = record.first("EntryWithdrawal").get(col.ENTRY_DATE)
    if not entry:
        entry = most_recent_entry_date(record.schedules)
    counts = record.first("AttendanceEnrollmentCount")
    return estimate_exit_date(
        entry,
        placement,
        counts.get(col.DAYS_IN_ATTENDANCE),
        counts.get(col.DAYS_IN_ENROLLMENT),
        holidays,
    )
