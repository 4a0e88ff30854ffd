from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date
from typing import Any

from ..models import columns as col
from ..models.student_record import SECTIONS, MergedStudentRecord, RawRow, SourceMap
from ..utils.dates import to_date
from .schedule_filter import filter_active, most_recent_entry_date

"""Record merger.

Builds one ``MergedStudentRecord`` per student of the base map, then attaches
every source section in a fixed order:

    registrations, contact, entry_withdrawal, schedules, attendance,
    form_responses

Schedules are merged after entry/withdrawal because the schedule step may
correct the entry date of both the roster row and the entry/withdrawal row.
"""

__all__ = [
    "MERGE_SOURCES",
    "build_base_map",
    "merge",
]

logger = logging.getLogger(__name__)

# source name -> record section, in merge order
MERGE_SOURCES: tuple[tuple[str, str], ...] = (
    ("registrations", "Registrations"),
    ("contact", "ContactInfo"),
    ("entry_withdrawal", "EntryWithdrawal"),
    ("schedules", "Schedules"),
    ("attendance", "AttendanceEnrollmentCount"),
    ("form_responses", "FormResponses"),
)


def _first(rows: list[RawRow] | None) -> RawRow:
    return rows[0] if rows else {}


def _pick(row: RawRow, keys: tuple[str, ...]) -> Any:
    for k in keys:
        v = row.get(k)
        if v not in (None, ""):
            return v
    return None


def _split_full_name(value: Any) -> tuple[str | None, str | None]:
    """``"Last, First"`` -> (last, first)."""
    if not isinstance(value, str) or "," not in value:
        return None, None
    last, _, first = value.partition(",")
    return last.strip() or None, first.strip() or None


def _recover_identity(
    base: RawRow, ew: RawRow, reg: RawRow
) -> tuple[Any, Any, Any]:
    first = base.get(col.FIRST) or _pick(ew, col.EW_FIRST_NAMES)
    last = base.get(col.LAST) or _pick(ew, col.EW_LAST_NAMES)
    if not first or not last:
        full_last, full_first = _split_full_name(ew.get(col.EW_FULL_NAME))
        first = first or full_first
        last = last or full_last
    first = first or reg.get(col.REG_FIRST_NAME)
    last = last or reg.get(col.REG_LAST_NAME)
    grade = base.get(col.GRADE) or _pick(ew, col.EW_GRADES) or reg.get(col.GRADE_LEVEL)
    return first, last, grade


def _clear_error_marks(sid: int, row: RawRow) -> None:
    """Blank the identity of a row exported as an error on a previous run."""
    if row.get(col.LAST) == col.ERROR_MARKER and row.get(col.FIRST) == col.ERROR_MARKER:
        logger.debug(f"student {sid}: previous export was an error row, recovering identity")
        row[col.LAST] = row[col.FIRST] = row[col.GRADE] = None


def _fallback_row(sid: int, first: Any, last: Any, grade: Any, campus: Any, entry: Any) -> RawRow:
    return {
        col.CANON_STUDENT_ID: sid,
        col.STUDENT_ID: sid,
        col.FIRST: first,
        col.LAST: last,
        col.GRADE: grade,
        col.CANON_HOME_CAMPUS: campus,
        col.CANON_ENTRY_DATE: entry,
        col.FIRST_DAY_OF_AEP: entry,
    }


def build_base_map(
    tentative: SourceMap,
    entry_withdrawal: SourceMap,
    registrations: SourceMap,
) -> dict[int, list[RawRow]]:
    """Canonical roster rows keyed by student id.

    The roster defines the student set. When it is empty the entry/withdrawal
    log is used, then registrations. Blank names are recovered from the other
    two sources; a student is never dropped for lack of a name. Error rows
    read back from a previous export count as blank.
    """
    base: dict[int, list[RawRow]] = {}
    if tentative:
        for sid, rows in tentative.items():
            if not rows:
                continue
            row = dict(rows[0])
            _clear_error_marks(sid, row)
            first, last, grade = _recover_identity(
                row, _first(entry_withdrawal.get(sid)), _first(registrations.get(sid))
            )
            row.update({
                col.CANON_STUDENT_ID: sid,
                col.FIRST: first,
                col.LAST: last,
                col.GRADE: grade,
                col.CANON_HOME_CAMPUS: row.get(col.REGULAR_CAMPUS),
                col.CANON_ENTRY_DATE: row.get(col.FIRST_DAY_OF_AEP),
            })
            base[sid] = [row] + [dict(r) for r in rows[1:]]
        return base

    if entry_withdrawal:
        logger.warning("roster is empty, building student list from entry/withdrawal")
        for sid, rows in entry_withdrawal.items():
            ew = _first(rows)
            first, last, grade = _recover_identity({}, ew, _first(registrations.get(sid)))
            base[sid] = [_fallback_row(sid, first, last, grade, ew.get(col.HOME_CAMPUS), ew.get(col.ENTRY_DATE))]
        return base

    if registrations:
        logger.warning("roster and entry/withdrawal are empty, building student list from registrations")
        for sid, rows in registrations.items():
            reg = _first(rows)
            first, last, grade = _recover_identity({}, {}, reg)
            base[sid] = [_fallback_row(sid, first, last, grade, reg.get(col.HOME_CAMPUS), reg.get(col.START_DATE))]
    return base


def _entry_on_file(record: MergedStudentRecord) -> date | None:
    ew = record.first("EntryWithdrawal")
    tent = record.first("TENTATIVE")
    raw = ew.get(col.ENTRY_DATE) or tent.get(col.CANON_ENTRY_DATE) or tent.get(col.FIRST_DAY_OF_AEP)
    return to_date(raw, context=f"entry date {record.student_id}")


def _merge_schedules(record: MergedStudentRecord, rows: list[RawRow]) -> None:
    active = filter_active(rows)
    record.schedules = active
    newest = most_recent_entry_date(active)
    if newest is None:
        return
    on_file = _entry_on_file(record)
    if on_file is not None and newest <= on_file:
        return
    logger.debug(f"student {record.student_id}: entry date {on_file} -> {newest} from schedule")
    if record.tentative:
        record.tentative[0][col.FIRST_DAY_OF_AEP] = newest
        record.tentative[0][col.CANON_ENTRY_DATE] = newest
    if record.entry_withdrawal:
        record.entry_withdrawal[0][col.ENTRY_DATE] = newest
    else:
        record.entry_withdrawal = [{col.ENTRY_DATE: newest, col.STUDENT_ID: record.student_id}]


def merge(sources: Mapping[str, SourceMap | None]) -> dict[int, MergedStudentRecord]:
    """Merge all sources into one record per roster student.

    Returns an empty dict (and logs) when a required source is missing;
    callers abort the run in that case.
    """
    required = ("tentative",) + tuple(name for name, _ in MERGE_SOURCES)
    missing = [name for name in required if sources.get(name) is None]
    if missing:
        logger.error(f"merge: missing required source(s): {', '.join(missing)}")
        return {}

    base = build_base_map(
        sources["tentative"], sources["entry_withdrawal"], sources["registrations"]
    )

    merged: dict[int, MergedStudentRecord] = {}
    for sid, tentative_rows in base.items():
        record = MergedStudentRecord(student_id=sid, tentative=tentative_rows)
        for name, section in MERGE_SOURCES:
            rows = sources[name].get(sid, [])
            if name == "schedules":
                _merge_schedules(record, rows)
            elif name == "entry_withdrawal":
                # copied so the schedule correction never touches loaded rows
                record.entry_withdrawal = [dict(r) for r in rows]
            else:
                setattr(record, SECTIONS[section], list(rows))
        merged[sid] = record
    logger.info(f"merged {len(merged)} students")
    return merged
