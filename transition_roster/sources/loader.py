from __future__ import annotations

import logging
import re
from datetime import date
from pathlib import Path
from typing import Any

from ..excel.reader import SheetData, SheetHeaderError, normalize_sheet, read_workbook
from ..logging.error_log import ErrorLogBuffer
from ..models import columns as col
from ..models.config_models import RosterConfig, SourceConfig
from ..models.student_record import RawRow, SourceMap
from ..models.teacher_input import TEACHER_NAME
from ..utils.dates import to_date

"""Source loaders.

Each configured source sheet becomes ``{student_id: [row, ...]}``. A sheet
that is absent from its workbook loads as ``None`` so the caller can tell a
missing source from an empty one.

Per-source rules:
- registrations: only the row with the latest ``Start Date`` is kept
- form_responses: student id parsed from the ``Student`` text, teacher name
  resolved from ``Email Address``
- attendance: counters read by header, else by position (columns 5 and 6)
"""

__all__ = [
    "UNKNOWN_TEACHER",
    "extract_student_id",
    "SourceLoader",
]

logger = logging.getLogger(__name__)

UNKNOWN_TEACHER = "Unknown"

_ID_IN_PARENS = re.compile(r"\((\d{6,7})\)")
_ID_RANGE = range(100_000, 10_000_000)

# positional fallback for the attendance export
_ATTENDANCE_POSITIONS = {col.DAYS_IN_ATTENDANCE: 4, col.DAYS_IN_ENROLLMENT: 5}


def extract_student_id(value: Any) -> int | None:
    """Student ID from a cell value.

    Accepts ints, integral floats (``123456.0`` as read back from Excel),
    digit strings and free text such as ``"Doe, Jane (123456)"``. IDs are
    6 or 7 digits; anything else yields None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)
    if isinstance(value, int):
        return value if value in _ID_RANGE else None
    text = str(value).strip()
    m = _ID_IN_PARENS.search(text)
    if m:
        return int(m.group(1))
    if text.endswith(".0"):
        text = text[:-2]
    if text.isdigit() and 6 <= len(text) <= 7:
        return int(text)
    return None


class SourceLoader:
    """Loads configured sources from their workbooks.

    Workbooks are read once and shared by every source that lives in them.
    """

    def __init__(self, config: RosterConfig, errors: ErrorLogBuffer | None = None) -> None:
        self.config = config
        self.errors = errors
        self._books: dict[Path, dict[str, Any]] = {}
        self._emails = {k.strip().lower(): v for k, v in config.teacher_emails.items()}

    def _workbook(self, path: Path) -> dict[str, Any] | None:
        if path not in self._books:
            if not path.exists():
                logger.error(f"workbook not found: {path}")
                return None
            self._books[path] = read_workbook(path)
        return self._books[path]

    def read_sheet(self, source: SourceConfig) -> SheetData | None:
        book = self._workbook(Path(self.config.workbook_for(source)))
        if book is None or source.sheet not in book:
            logger.error(f"source '{source.name}': sheet '{source.sheet}' not found")
            return None
        try:
            return normalize_sheet(book[source.sheet], source.sheet, header_row=source.header_row)
        except SheetHeaderError as e:
            logger.error(f"source '{source.name}': {e}")
            return None

    def load(self, name: str) -> SourceMap | None:
        source = self.config.sources.get(name)
        if source is None:
            return None
        sheet = self.read_sheet(source)
        if sheet is None:
            if self.errors is not None:
                self.errors.add(name, -1, "MISSING_SOURCE", f"sheet '{source.sheet}' not found")
            return None
        key = source.key_column
        if name == "form_responses":
            rows = self._form_rows(sheet, key)
        elif name == "attendance":
            rows = self._attendance_rows(sheet)
        else:
            rows = sheet.rows
        if key not in sheet.columns:
            logger.warning(f"source '{name}': key column '{key}' not in header")
        if name == "registrations":
            result = self._latest_by_start_date(rows, key)
        else:
            result = self._group(name, rows, key, source.multiple)
        logger.info(f"loaded source '{name}': {len(result)} students")
        return result

    def load_all(self) -> dict[str, SourceMap | None]:
        return {name: self.load(name) for name in self.config.sources}

    def _group(self, name: str, rows: list[RawRow], key: str, multiple: bool) -> SourceMap:
        result: SourceMap = {}
        for i, row in enumerate(rows):
            sid = extract_student_id(row.get(key))
            if sid is None:
                logger.debug(f"source '{name}': row {i + 1} has no student id")
                continue
            if multiple:
                result.setdefault(sid, []).append(row)
            else:
                if sid in result:
                    logger.warning(f"source '{name}': duplicate student {sid}, keeping latest row")
                result[sid] = [row]
        return result

    def _latest_by_start_date(self, rows: list[RawRow], key: str) -> SourceMap:
        result: SourceMap = {}
        latest: dict[int, date] = {}
        for row in rows:
            sid = extract_student_id(row.get(key))
            if sid is None:
                continue
            start = to_date(row.get(col.START_DATE), context=f"registrations {sid}") or date.min
            if sid not in latest or start > latest[sid]:
                latest[sid] = start
                result[sid] = [row]
        return result

    def teacher_for_email(self, email: Any) -> str:
        if not isinstance(email, str):
            return UNKNOWN_TEACHER
        return self._emails.get(email.strip().lower(), UNKNOWN_TEACHER)

    def _form_rows(self, sheet: SheetData, key: str) -> list[RawRow]:
        rows: list[RawRow] = []
        for i, raw in enumerate(sheet.rows):
            if extract_student_id(raw.get(key)) is None:
                logger.warning(f"form responses: invalid student at row {i + 1}: {raw.get(key)!r}")
                continue
            row = dict(raw)
            row[TEACHER_NAME] = self.teacher_for_email(raw.get(col.EMAIL_ADDRESS))
            rows.append(row)
        return rows

    def _attendance_rows(self, sheet: SheetData) -> list[RawRow]:
        missing = [h for h in _ATTENDANCE_POSITIONS if h not in sheet.columns]
        if not missing:
            return sheet.rows
        rows: list[RawRow] = []
        for raw, values in zip(sheet.rows, sheet.positional, strict=False):
            row = dict(raw)
            for header in missing:
                pos = _ATTENDANCE_POSITIONS[header]
                row[header] = values[pos] if pos < len(values) else None
            rows.append(row)
        return rows
