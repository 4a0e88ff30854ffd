from __future__ import annotations
from datetime import date, datetime

import pytest

from transition_roster.excel.reader import SheetData
from transition_roster.models.student_record import MergedStudentRecord
from transition_roster.services.release_date import (
    estimate_exit_date,
    exit_date_for,
    placement_backup_from_sheet,
)


def test_exit_date_adds_placement_and_absences():
    # 10 placement days + 2 absent days from Monday 2025-08-11
    assert estimate_exit_date(date(2025, 8, 11), 10, 8, 10) == date(2025, 8, 27)


def test_exit_date_honours_holidays():
    assert estimate_exit_date("08/29/2025", 1, 5, 5, {"2025-09-01"}) == date(2025, 9, 2)


def test_attendance_above_enrollment_adds_nothing():
    assert estimate_exit_date(date(2025, 8, 11), 10, 12, 10) == date(2025, 8, 25)


@pytest.mark.parametrize("entry,placement,att,enrl", [
    (None, 10, 8, 10),
    ("", 10, 8, 10),
    (date(2025, 8, 11), None, 8, 10),
    (date(2025, 8, 11), 0, 8, 10),
    (date(2025, 8, 11), 10, None, 10),
    (date(2025, 8, 11), 10, 8, ""),
    (date(2025, 8, 11), "n/a", 8, 10),
    ("not a date", 10, 8, 10),
])
def test_exit_date_missing_inputs_give_none(entry, placement, att, enrl):
    assert estimate_exit_date(entry, placement, att, enrl) is None


def test_exit_date_for_uses_fallbacks():
    record = MergedStudentRecord(
        student_id=5,
        schedules=[{"Entry Date": datetime(2025, 8, 11), "Wdraw Date": None}],
        attendance=[{"Days in Att": 8, "Days in Enrl": 10}],
    )
    # no registration, no entry/withdrawal row: backup placement + schedule entry date
    assert exit_date_for(record, (), {5: 10}) == date(2025, 8, 27)
    assert exit_date_for(record, (), {}) is None


def test_placement_backup_headers_case_insensitive():
    sheet = SheetData(
        sheet_name="Backup",
        columns=["student ID", "PLACEMENT DAYS"],
        rows=[
            {"student ID": 555555, "PLACEMENT DAYS": 15},
            {"student ID": 55, "PLACEMENT DAYS": 9},
            {"student ID": "x", "PLACEMENT DAYS": 3},
        ],
        positional=[],
    )
    assert placement_backup_from_sheet(sheet) == {555555: 15}
    assert placement_backup_from_sheet(None) == {}
    bad = SheetData(sheet_name="Backup", columns=["id"], rows=[], positional=[])
    assert placement_backup_from_sheet(bad) == {}
