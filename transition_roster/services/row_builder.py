from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import date
from typing import Any

from ..models import columns as col
from ..models.period import REGULAR_PERIODS, Period
from ..models.student_record import MergedStudentRecord
from ..models.teacher_input import PERIOD_FIELDS, SPECIAL_EDUCATION_FIELDS, TeacherInput
from ..utils.dates import format_mmddyyyy, to_date
from .release_date import exit_date_for
from .schedule_filter import most_recent_entry_date
from .teacher_input import DEFAULT_CASE_MANAGER_COURSE, reconcile

"""Output row projection.

One fixed-width row per student. Column order is a contract shared with the
output sheet and with the next run, which reads the same sheet back as the
legacy roster (``"{period} Period - {field}"`` keys).
"""

__all__ = [
    "OUTPUT_COLUMNS",
    "MANUAL_COLUMNS",
    "STUDENT_ID_COLUMN",
    "PerStudentDataError",
    "entry_date_for",
    "build_row",
    "error_row",
    "is_error_row",
]

logger = logging.getLogger(__name__)

# Filled in by staff on the sheet; carried over from the previous export.
MANUAL_COLUMNS: tuple[str, ...] = (
    "Parent Notice Date",
    "Withdrawn Date",
    "Attendance Recovery",
    "Credit Retrieval",
    "Campus Mentor",
    "Other Intervention 1",
    "Other Intervention 2",
    "Additional Notes or Counseling Services and Support",
    "Licensed Social Worker Consultation",
    "Ready to Create Transition Letter",
)

OUTPUT_COLUMNS: tuple[str, ...] = (
    col.DATE_ADDED,
    col.LAST,
    col.FIRST,
    col.STUDENT_ID,
    col.GRADE,
    *(p.legacy_prefix + f for p in REGULAR_PERIODS for f in PERIOD_FIELDS),
    *(Period.SPECIAL_EDUCATION.legacy_prefix + f for f in SPECIAL_EDUCATION_FIELDS),
    col.REGULAR_CAMPUS,
    col.FIRST_DAY_OF_AEP,
    "Anticipated Release Date",
    MANUAL_COLUMNS[0],
    MANUAL_COLUMNS[1],
    MANUAL_COLUMNS[2],
    "Eligibility",
    MANUAL_COLUMNS[3],
    col.BEHAVIOR_CONTRACT,
    MANUAL_COLUMNS[4],
    MANUAL_COLUMNS[5],
    MANUAL_COLUMNS[6],
    "504",
    "ESL",
    MANUAL_COLUMNS[7],
    MANUAL_COLUMNS[8],
    MANUAL_COLUMNS[9],
    col.STUDENT_EMAIL,
    "Guardian Name",
    "Guardian Email",
    col.MERGED_DOC_ID,
    col.MERGED_DOC_URL,
    col.MERGED_DOC_LINK,
    col.MERGE_STATUS,
)

STUDENT_ID_COLUMN = OUTPUT_COLUMNS.index(col.STUDENT_ID)


class PerStudentDataError(Exception):
    """Raised when a student lacks data required for a row (entry date)."""


def _cell(value: Any) -> Any:
    return "" if value is None else value


def _flag(text: Any, needle: str) -> str:
    return "Yes" if needle in ("" if text is None else str(text)) else "No"


def entry_date_for(record: MergedStudentRecord) -> date | None:
    """Entry/withdrawal entry date, else the latest active schedule entry date."""
    d = to_date(record.first("EntryWithdrawal").get(col.ENTRY_DATE), context=f"entry date {record.student_id}")
    return d or most_recent_entry_date(record.schedules)


def _names(tentative: Mapping[str, Any], ew: Mapping[str, Any]) -> tuple[Any, Any]:
    last, first = tentative.get(col.LAST), tentative.get(col.FIRST)
    if not last or not first:
        full = ew.get(col.EW_FULL_NAME)
        if isinstance(full, str) and "," in full:
            backup_last, _, backup_first = full.partition(",")
            last = last or backup_last.strip()
            first = first or backup_first.strip()
    return last, first


def error_row(student_id: Any, message: str, today: date | None = None) -> list[Any]:
    """Visibly marked row carrying the student id and the error message."""
    row: list[Any] = [""] * len(OUTPUT_COLUMNS)
    row[0] = format_mmddyyyy(today or date.today())
    row[1] = col.ERROR_MARKER
    row[2] = col.ERROR_MARKER
    row[3] = student_id
    row[4] = f"Error: {message}"
    return row


def is_error_row(row: list[Any]) -> bool:
    return len(row) > 2 and row[1] == col.ERROR_MARKER and row[2] == col.ERROR_MARKER


def _project(
    student_id: int,
    record: MergedStudentRecord,
    teacher_input: TeacherInput,
    entry: date,
    holidays: Iterable[str],
    placement_backup: Mapping[int, Any] | None,
    today: date,
) -> list[Any]:
    tentative = record.first("TENTATIVE")
    ew = record.first("EntryWithdrawal")
    reg = record.first("Registrations")
    contact = record.first("ContactInfo")

    added = to_date(tentative.get(col.DATE_ADDED), context=f"date added {student_id}") or today
    last, first = _names(tentative, ew)
    grade = tentative.get(col.GRADE) or ew.get(col.GRADE_LEVEL)
    exit_date = exit_date_for(record, holidays, placement_backup)
    factors = reg.get(col.EDUCATIONAL_FACTORS)
    manual = {name: _cell(tentative.get(name)) for name in MANUAL_COLUMNS}

    row: list[Any] = [format_mmddyyyy(added), _cell(last), _cell(first), student_id, _cell(grade)]
    for period in REGULAR_PERIODS:
        row.extend(teacher_input.get(period, f) for f in PERIOD_FIELDS)
    row.extend(teacher_input.get(Period.SPECIAL_EDUCATION, f) for f in SPECIAL_EDUCATION_FIELDS)
    row.extend([
        _cell(reg.get(col.HOME_CAMPUS) or tentative.get(col.CANON_HOME_CAMPUS)),
        format_mmddyyyy(entry),
        _cell(format_mmddyyyy(exit_date)),
        manual[MANUAL_COLUMNS[0]],
        manual[MANUAL_COLUMNS[1]],
        manual[MANUAL_COLUMNS[2]],
        _cell(reg.get(col.ELIGIBILITY)),
        manual[MANUAL_COLUMNS[3]],
        _cell(reg.get(col.BEHAVIOR_CONTRACT)),
        manual[MANUAL_COLUMNS[4]],
        manual[MANUAL_COLUMNS[5]],
        manual[MANUAL_COLUMNS[6]],
        _flag(factors, "504"),
        _flag(factors, "ESL"),
        manual[MANUAL_COLUMNS[7]],
        manual[MANUAL_COLUMNS[8]],
        manual[MANUAL_COLUMNS[9]],
        _cell(contact.get(col.STUDENT_EMAIL)),
        _cell(contact.get(col.PARENT_NAME)),
        _cell(contact.get(col.GUARDIAN_EMAIL)),
        _cell(tentative.get(col.MERGED_DOC_ID)),
        _cell(tentative.get(col.MERGED_DOC_URL)),
        _cell(tentative.get(col.MERGED_DOC_LINK)),
        _cell(tentative.get(col.MERGE_STATUS)),
    ])
    if len(row) != len(OUTPUT_COLUMNS):
        raise ValueError(f"row has {len(row)} cells, expected {len(OUTPUT_COLUMNS)}")
    return row


def build_row(
    student_id: int,
    record: MergedStudentRecord,
    teacher_input: TeacherInput | None = None,
    *,
    holidays: Iterable[str] = (),
    placement_backup: Mapping[int, Any] | None = None,
    case_manager_course: str = DEFAULT_CASE_MANAGER_COURSE,
    today: date | None = None,
) -> list[Any]:
    """Project one merged record into an output row.

    Raises:
        PerStudentDataError: no entry date on file; the caller skips the student

    Any other failure while building the row degrades to :func:`error_row`.
    """
    entry = entry_date_for(record)
    if entry is None:
        raise PerStudentDataError(f"student {student_id}: no entry date")
    today = today or date.today()
    try:
        if teacher_input is None:
            teacher_input = reconcile(
                student_id,
                record.form_responses,
                record.schedules,
                record.first("TENTATIVE"),
                case_manager_course=case_manager_course,
            )
        return _project(student_id, record, teacher_input, entry, holidays, placement_backup, today)
    except Exception as e:  # noqa: BLE001
        logger.error(f"student {student_id}: row build failed: {e}")
        return error_row(student_id, str(e), today)
