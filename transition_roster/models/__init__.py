"""Domain models for the transition roster.

Configuration, merged student records, teacher input and run results.
"""

from .config_models import OutputConfig, ReminderConfig, RosterConfig, SmtpConfig, SourceConfig
from .period import Period, parse_period
from .run_result import ReminderResult, StudentSummary, SyncResult
from .student_record import MergedStudentRecord, RawRow, SourceMap
from .teacher_input import TeacherInput

__all__ = [
    # Configuration models
    "OutputConfig",
    "ReminderConfig",
    "RosterConfig",
    "SmtpConfig",
    "SourceConfig",
    # Record models
    "MergedStudentRecord",
    "Period",
    "RawRow",
    "SourceMap",
    "TeacherInput",
    "parse_period",
    # Results
    "ReminderResult",
    "StudentSummary",
    "SyncResult",
]
