from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Any

from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import REQUIRED_SOURCES, RosterConfig
from ..models.run_result import SyncResult
from ..models.student_record import MergedStudentRecord, SourceMap
from ..sources.loader import SourceLoader
from ..utils.dates import today_in
from .merger import merge
from .progress import ProgressTracker
from .release_date import placement_backup_from_sheet
from .row_builder import OUTPUT_COLUMNS, PerStudentDataError, build_row, is_error_row
from .student_filter import filter_active
from .writer import write_output

"""Run orchestration.

``process_all`` is one roster rebuild: load every source, merge, drop
withdrawn students, build one row per student and replace the output sheet.
A missing required source aborts before anything is written; per-student
problems are logged and counted.
"""

__all__ = [
    "ProcessingError",
    "MissingSourceError",
    "RunLockError",
    "run_lock",
    "load_sources",
    "merge_students",
    "process_all",
]

logger = logging.getLogger(__name__)


class ProcessingError(Exception):
    """Base exception for run failures."""


class MissingSourceError(ProcessingError):
    """A required source sheet could not be loaded."""


class RunLockError(ProcessingError):
    """Another run holds the output lock."""


@contextmanager
def run_lock(target: Path) -> Iterator[Path]:
    """Advisory lock file next to ``target``; a second run fails fast."""
    lock = target.with_name(target.name + ".lock")
    lock.parent.mkdir(parents=True, exist_ok=True)
    try:
        fd = os.open(lock, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
    except FileExistsError as e:
        raise RunLockError(f"another run is in progress (lock file {lock})") from e
    try:
        os.write(fd, str(os.getpid()).encode("ascii"))
        os.close(fd)
        yield lock
    finally:
        lock.unlink(missing_ok=True)


def load_sources(loader: SourceLoader) -> dict[str, SourceMap | None]:
    """Load every configured source; raise when a required one is missing."""
    sources = loader.load_all()
    missing = sorted(
        name for name in REQUIRED_SOURCES if sources.get(name) is None
    )
    if missing:
        raise MissingSourceError(f"missing required source(s): {', '.join(missing)}")
    return sources


def merge_students(config: RosterConfig, errors: ErrorLogBuffer | None = None) -> dict[int, MergedStudentRecord]:
    """Load and merge, without the withdrawal exclusion (reminder input)."""
    return merge(load_sources(SourceLoader(config, errors)))


def _sort_key(row: list[Any]) -> tuple[str, str]:
    return (str(row[1]).lower(), str(row[2]).lower())


def process_all(
    config: RosterConfig,
    *,
    today: date | None = None,
    errors: ErrorLogBuffer | None = None,
    keep_reenrolled: bool = False,
) -> SyncResult:
    """Rebuild the output sheet and return run metrics.

    Raises:
        MissingSourceError: a required source sheet is absent
    """
    start = datetime.now(UTC)
    today = today or today_in(config.timezone)
    errors = errors if errors is not None else ErrorLogBuffer()
    holidays = frozenset(config.holidays)

    loader = SourceLoader(config, errors)
    sources = load_sources(loader)
    merged = merge(sources)
    active = filter_active(
        merged, sources.get("withdrawn"), sources.get("wd_other"), keep_reenrolled=keep_reenrolled
    )

    backup_cfg = config.sources.get("placement_backup")
    backup = placement_backup_from_sheet(loader.read_sheet(backup_cfg)) if backup_cfg else {}

    rows: list[list[Any]] = []
    skipped: list[int] = []
    error_rows = 0
    with ProgressTracker(len(active)) as progress:
        for sid, record in active.items():
            progress.advance()
            try:
                row = build_row(
                    sid,
                    record,
                    holidays=holidays,
                    placement_backup=backup,
                    case_manager_course=config.case_manager_course,
                    today=today,
                )
            except PerStudentDataError as e:
                logger.warning(f"skipped: {e}")
                errors.add("row_builder", sid, "PER_STUDENT_DATA", str(e))
                skipped.append(sid)
                continue
            if is_error_row(row):
                error_rows += 1
                errors.add("row_builder", sid, "PER_STUDENT_COMPUTATION", str(row[4]))
            rows.append(row)
            progress.set_postfix(rows=len(rows), errors=error_rows)

    rows.sort(key=_sort_key)
    written = write_output(Path(config.output.workbook), config.output.sheet, rows, OUTPUT_COLUMNS)

    end = datetime.now(UTC)
    return SyncResult(
        merged_students=len(merged),
        active_students=len(active),
        rows_written=written,
        skipped_students=len(skipped),
        error_rows=error_rows,
        start_time=start,
        end_time=end,
        elapsed_seconds=(end - start).total_seconds(),
        skipped_ids=skipped,
    )
