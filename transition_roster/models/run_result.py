from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

"""Run result models.

``SyncResult`` aggregates one roster rebuild for the SUMMARY line and the exit
code. ``ReminderResult`` reports what the reminder run decided.
"""


@dataclass(frozen=True)
class SyncResult:
    """Aggregated metrics of one roster rebuild."""
    merged_students: int  # after merge, before exclusion
    active_students: int  # after withdrawal exclusion
    rows_written: int  # includes error rows
    skipped_students: int  # no entry date
    error_rows: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    skipped_ids: list[int] = field(default_factory=list)

    @property
    def has_failures(self) -> bool:
        return self.error_rows > 0 or self.skipped_students > 0


@dataclass(frozen=True)
class StudentSummary:
    student_id: int | str
    last_name: str
    first_name: str
    grade: str
    start_date: str  # MM/DD/YYYY
    milestone_date: str  # MM/DD/YYYY

    def line(self) -> str:
        return f"{self.last_name}, {self.first_name} ({self.student_id}), Grade: {self.grade}"


@dataclass(frozen=True)
class ReminderResult:
    emails_sent: bool
    students_count: int
    reason: str
    email_type: str | None = None  # student_list / no_students
    recipients: tuple[str, ...] = ()
