from __future__ import annotations

from ..models.run_result import ReminderResult, SyncResult

"""SUMMARY line rendering.

Format::

    SUMMARY students=<merged> active=<n> rows=<written> skipped=<n> errors=<n> elapsed_sec=<s>
    SUMMARY reminder sent=<true|false> students=<n> reason=<text>
"""


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # avoid scientific notation
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.2f}"


def render_summary_line(result: SyncResult) -> str:
    """Render the SUMMARY line of a roster rebuild.

    Examples:
        >>> from datetime import datetime, timezone
        >>> t = datetime(2025, 8, 25, 7, 0, 0, tzinfo=timezone.utc)
        >>> r = SyncResult(
        ...     merged_students=12, active_students=10, rows_written=9,
        ...     skipped_students=1, error_rows=1, start_time=t, end_time=t,
        ...     elapsed_seconds=2.0,
        ... )
        >>> render_summary_line(r)
        'SUMMARY students=12 active=10 rows=9 skipped=1 errors=1 elapsed_sec=2'
    """
    return (
        f"SUMMARY students={result.merged_students} "
        f"active={result.active_students} "
        f"rows={result.rows_written} "
        f"skipped={result.skipped_students} "
        f"errors={result.error_rows} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )


def render_reminder_line(result: ReminderResult) -> str:
    return (
        f"SUMMARY reminder sent={str(result.emails_sent).lower()} "
        f"students={result.students_count} "
        f"reason={result.reason}"
    )
