from __future__ import annotations
from datetime import date, datetime

from transition_roster.models.student_record import MergedStudentRecord
from transition_roster.services.schedule_filter import filter_active, most_recent_entry_date
from transition_roster.services.student_filter import filter_active as filter_students


ROWS = [
    {"Per Beg": 1, "Wdraw Date": None, "Entry Date": datetime(2025, 8, 11)},
    {"Per Beg": 2, "Wdraw Date": "", "Entry Date": datetime(2025, 8, 18)},
    {"Per Beg": 3, "Entry Date": datetime(2025, 8, 4)},
    {"Per Beg": 4, "Wdraw Date": datetime(2025, 8, 8), "Entry Date": datetime(2025, 9, 1)},
]


def test_schedule_filter_keeps_blank_withdrawal_dates():
    assert [r["Per Beg"] for r in filter_active(ROWS)] == [1, 2, 3]


def test_schedule_filter_idempotent():
    once = filter_active(ROWS)
    assert filter_active(once) == once
    assert filter_active(None) == []


def test_most_recent_entry_date():
    assert most_recent_entry_date(filter_active(ROWS)) == date(2025, 8, 18)
    assert most_recent_entry_date([]) is None


def _merged(*ids: int) -> dict[int, MergedStudentRecord]:
    return {sid: MergedStudentRecord(student_id=sid) for sid in ids}


def test_student_filter_excludes_listed_ids():
    result = filter_students(_merged(1, 2, 3), {2: [{}]}, {3: [{}]})
    assert list(result) == [1]


def test_student_filter_ignores_missing_exclusion_sources():
    assert list(filter_students(_merged(1, 2), None, {})) == [1, 2]


def test_student_filter_keep_reenrolled():
    merged = _merged(1, 2)
    merged[2].schedules = [{"Per Beg": 1, "Wdraw Date": None}]
    assert list(filter_students(merged, {2: [{}]})) == [1]
    assert list(filter_students(merged, {2: [{}]}, keep_reenrolled=True)) == [1, 2]
