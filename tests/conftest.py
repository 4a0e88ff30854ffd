# Shared pytest fixtures
from __future__ import annotations
import tempfile
from datetime import datetime
from io import StringIO
from pathlib import Path

import pandas as pd
import pytest

from transition_roster.logging.init import reset_logging, setup_logging


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """workbook: ./data/roster.xlsx
output:
  sheet: TENTATIVE-Version2
timezone: America/Chicago
holidays:
  - 2025-09-01
teacher_emails:
  smith@school.org: Smith
  jones@school.org: Jones
reminder:
  recipients: [counselor@school.org]
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "roster.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def labeled_logs() -> StringIO:
    """Fresh application logger writing into a StringIO."""
    reset_logging()
    captured_output = StringIO()
    logger = setup_logging()
    logger.handlers[0].setStream(captured_output)
    yield captured_output
    reset_logging()


def make_workbook(path: Path, sheets: dict[str, list[list[object]]]) -> Path:
    """Write raw rows (header included) to a real .xlsx file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for sheet_name, rows in sheets.items():
            df = pd.DataFrame(rows)
            df.to_excel(writer, sheet_name=sheet_name, header=False, index=False)
    return path


def roster_sheets() -> dict[str, list[list[object]]]:
    """Minimal district workbook: three students, one of them withdrawn."""
    return {
        "TENTATIVE": [
            ["STUDENT ID", "FIRST", "LAST", "GRADE", "REGULAR CAMPUS", "FIRST DAY OF AEP",
             "DATE ADDED TO SPREADSHEET", "1st Period - How would you assess this student's academic growth?"],
            [111111, "Ana", "Zamora", 9, "North HS", datetime(2025, 8, 11), "08/12/2025", "Legacy growth"],
            [222222, "Ben", "Adams", 10, "South HS", datetime(2025, 8, 11), None, None],
            [333333, "Cal", "Moore", 11, "East HS", datetime(2025, 8, 4), None, None],
        ],
        "Registrations SY 24.25": [
            ["STUDENT ID", "Student First Name", "Student Last Name", "Start Date", "Placement Days",
             "Home Campus", "Eligibilty", "Behavior Contract", "Educational Factors"],
            [111111, "Ana", "Zamora", datetime(2025, 8, 11), 30, "North HS", "DAEP", "Yes", "504, ESL"],
            [222222, "Ben", "Adams", datetime(2025, 8, 11), 45, "South HS", "DAEP", "No", None],
            [333333, "Cal", "Moore", datetime(2025, 8, 4), 20, "East HS", "DAEP", "No", None],
        ],
        "ContactInfo": [
            ["Student ID", "Student Email", "Parent Name", "Guardian 1 Email"],
            [111111, "ana@student.org", "Rosa Zamora", "rosa@example.com"],
            [222222, "ben@student.org", "Tom Adams", "tom@example.com"],
        ],
        "Schedules": [
            ["STUDENT ID", "Per Beg", "Course Title", "Teacher Name", "Entry Date", "Wdraw Date"],
            [111111, 1, "English I", "Smith", datetime(2025, 8, 11), None],
            [111111, 9, "Case Manag HS", "Jones", datetime(2025, 8, 11), None],
            [222222, 2, "Algebra I", "Smith", datetime(2025, 8, 11), None],
            [222222, 3, "Biology", "Lee", datetime(2025, 8, 1), datetime(2025, 8, 8)],
        ],
        "Form Responses 1": [
            ["Timestamp", "Email Address", "Student",
             "How would you assess this student's academic growth?",
             "Academic and Behavioral Progress Notes"],
            [datetime(2025, 8, 20, 9, 0), "smith@school.org", "Zamora, Ana (111111)", "Good", "On track"],
        ],
        "Alt HS Attendance & Enrollment Count": [
            ["STUDENT ID", "Name", "Campus", "Grade", "Days in Att", "Days in Enrl"],
            [111111, "Zamora, Ana", "NAHS", 9, 8, 10],
            [222222, "Adams, Ben", "NAHS", 10, 10, 10],
        ],
        "Entry_Withdrawal": [
            ["STUDENT ID", "Student Name(Last, First)", "Entry Date", "Grd Lvl"],
            [111111, "Zamora, Ana", datetime(2025, 8, 11), 9],
            [222222, "Adams, Ben", datetime(2025, 8, 11), 10],
            [333333, "Moore, Cal", datetime(2025, 8, 4), 11],
        ],
        "Withdrawn": [
            ["STUDENT ID", "Reason"],
            [333333, "Moved"],
        ],
        "WD Other": [
            ["STUDENT ID", "Reason"],
        ],
    }


@pytest.fixture()
def roster_workbook(temp_workdir: Path) -> Path:
    return make_workbook(temp_workdir / "data" / "roster.xlsx", roster_sheets())


@pytest.fixture()
def make_xlsx():
    return make_workbook


@pytest.fixture()
def sheets() -> dict[str, list[list[object]]]:
    return roster_sheets()
