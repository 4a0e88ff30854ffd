from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for per-student error logging.

Each record is one JSON Lines entry in ``logs/errors-YYYYMMDD-HHMMSS.log``.
``student_id`` is -1 for source-level errors where no single student can be
blamed (a missing sheet, an unreadable workbook).
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        source: Source name (``schedules``, ``row_builder``, ...) the error came from
        student_id: Student ID, or -1 when the error is not tied to one student
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Human readable description
    """
    timestamp: str  # ISO8601 UTC
    source: str
    student_id: int
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(source: str, student_id: int, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            source=source,
            student_id=student_id,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
