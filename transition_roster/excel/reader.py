from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd

"""Excel reader for the source workbooks.

Sheets are read raw (``header=None``) and normalized here: the configured
header row (1-based) supplies column names, rows below it become dicts.
Fully blank rows are dropped and whitespace-only strings become None.
"""

__all__ = [
    "SheetHeaderError",
    "SheetData",
    "read_workbook",
    "normalize_sheet",
]


class SheetHeaderError(Exception):
    """Raised when the header row is missing or blank."""

@dataclass
class SheetData:
    sheet_name: str
    columns: list[str]
    rows: list[dict[str, Any]]  # normalized (column -> value)
    positional: list[list[Any]]  # same rows, by column index


def read_workbook(path: Path) -> dict[str, pd.DataFrame]:
    """Read a workbook returning raw DataFrames keyed by sheet name."""
    dfs: dict[str, pd.DataFrame] = {}
    with pd.ExcelFile(path) as xls:
        for name in xls.sheet_names:
            dfs[str(name)] = xls.parse(name, header=None)
    return dfs


def _clean(val: Any) -> Any:
    if isinstance(val, str):
        return val if val.strip() else None
    if pd.isna(val):
        return None
    if isinstance(val, pd.Timestamp):
        return val.to_pydatetime()
    return val


def normalize_sheet(df: pd.DataFrame, sheet_name: str, header_row: int = 1) -> SheetData:
    """Normalize a raw DataFrame using ``header_row`` as header.

    Steps:
    1. Validate the header row exists and is not blank
    2. Build column names (blank header cells become ``Unnamed: <i>``)
    3. Rows below the header become data rows; blank rows are skipped
    """
    idx = header_row - 1
    if df.shape[0] <= idx:
        raise SheetHeaderError(f"sheet '{sheet_name}' lacks header row {header_row}")
    header_series = df.iloc[idx]
    if header_series.isna().all():
        raise SheetHeaderError(f"sheet '{sheet_name}' header row {header_row} is blank")
    columns = [
        f"Unnamed: {i}" if pd.isna(c) else str(c).strip()
        for i, c in enumerate(header_series.tolist())
    ]

    rows: list[dict[str, Any]] = []
    positional: list[list[Any]] = []
    for _, raw in df.iloc[idx + 1:].iterrows():
        if raw.isna().all():
            continue
        values = [_clean(v) for v in raw.tolist()]
        if all(v is None for v in values):
            continue
        rows.append(dict(zip(columns, values, strict=False)))
        positional.append(values)

    return SheetData(sheet_name=sheet_name, columns=columns, rows=rows, positional=positional)
