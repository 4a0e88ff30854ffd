from __future__ import annotations

import logging
from copy import copy
from pathlib import Path
from typing import Any

from openpyxl import Workbook, load_workbook
from openpyxl.styles import PatternFill
from openpyxl.worksheet.worksheet import Worksheet

from ..sources.loader import extract_student_id
from .row_builder import STUDENT_ID_COLUMN, is_error_row

"""Output sheet writer.

The write is a full replace: everything from row 2 down is deleted and the
new rows are written in one pass. Row fills (staff colour coding) are
captured by student id right before the delete and put back right after.
Not transactional; a crash between delete and save leaves the file as it
was on disk because nothing is saved until the end.
"""

__all__ = [
    "FILL_ERROR",
    "capture_row_fills",
    "apply_row_fills",
    "clear_from_row",
    "write_output",
]

logger = logging.getLogger(__name__)

FILL_ERROR = PatternFill("solid", fgColor="F4CCCC")

RowFills = dict[int, list[PatternFill]]


def capture_row_fills(ws: Worksheet, start_row: int = 2) -> RowFills:
    """Solid fills of every data row keyed by the student id in the row."""
    fills: RowFills = {}
    for row in ws.iter_rows(min_row=start_row):
        if len(row) <= STUDENT_ID_COLUMN:
            continue
        sid = extract_student_id(row[STUDENT_ID_COLUMN].value)
        if sid is None or is_error_row([c.value for c in row]):
            continue
        row_fills = [copy(c.fill) for c in row]
        if any(getattr(f, "fill_type", None) for f in row_fills):
            fills[sid] = row_fills
    return fills


def apply_row_fills(ws: Worksheet, fills: RowFills, start_row: int = 2) -> int:
    applied = 0
    for row in ws.iter_rows(min_row=start_row):
        if len(row) <= STUDENT_ID_COLUMN:
            continue
        sid = extract_student_id(row[STUDENT_ID_COLUMN].value)
        saved = fills.get(sid) if sid is not None else None
        if not saved or is_error_row([c.value for c in row]):
            continue
        for cell, fill in zip(row, saved, strict=False):
            cell.fill = copy(fill)
        applied += 1
    return applied


def clear_from_row(ws: Worksheet, start_row: int = 2) -> None:
    if ws.max_row >= start_row:
        ws.delete_rows(start_row, ws.max_row - start_row + 1)


def _open(path: Path, sheet: str, headers: tuple[str, ...]) -> tuple[Workbook, Worksheet]:
    if path.exists():
        wb = load_workbook(path)
    else:
        wb = Workbook()
        wb.active.title = sheet
    if sheet in wb.sheetnames:
        ws = wb[sheet]
    else:
        ws = wb.create_sheet(sheet)
    if ws.max_row < 1 or all(c.value is None for c in ws[1]):
        for i, name in enumerate(headers, start=1):
            ws.cell(row=1, column=i, value=name)
    return wb, ws


def write_output(path: Path, sheet: str, rows: list[list[Any]], headers: tuple[str, ...]) -> int:
    """Replace the data rows of ``sheet`` with ``rows``; returns rows written."""
    path.parent.mkdir(parents=True, exist_ok=True)
    wb, ws = _open(path, sheet, headers)
    fills = capture_row_fills(ws)
    clear_from_row(ws)
    for r, values in enumerate(rows, start=2):
        for c, value in enumerate(values, start=1):
            ws.cell(row=r, column=c, value=value)
        if is_error_row(values):
            for c in range(1, len(values) + 1):
                ws.cell(row=r, column=c).fill = FILL_ERROR
    restored = apply_row_fills(ws, fills)
    wb.save(path)
    logger.info(f"wrote {len(rows)} rows to '{sheet}' ({restored} row colours restored)")
    return len(rows)
