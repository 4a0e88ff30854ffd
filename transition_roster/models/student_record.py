from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

"""Merged per-student record.

One list of raw rows per named section. Every section exists after a merge,
empty when a source had nothing for the student.
"""

__all__ = [
    "RawRow",
    "SourceMap",
    "SECTIONS",
    "MergedStudentRecord",
]

RawRow = dict[str, Any]
SourceMap = dict[int, list[RawRow]]

# section name -> attribute
SECTIONS: dict[str, str] = {
    "TENTATIVE": "tentative",
    "Registrations": "registrations",
    "ContactInfo": "contact_info",
    "Schedules": "schedules",
    "FormResponses": "form_responses",
    "EntryWithdrawal": "entry_withdrawal",
    "AttendanceEnrollmentCount": "attendance",
}


@dataclass
class MergedStudentRecord:
    student_id: int
    tentative: list[RawRow] = field(default_factory=list)
    registrations: list[RawRow] = field(default_factory=list)
    contact_info: list[RawRow] = field(default_factory=list)
    schedules: list[RawRow] = field(default_factory=list)
    form_responses: list[RawRow] = field(default_factory=list)
    entry_withdrawal: list[RawRow] = field(default_factory=list)
    attendance: list[RawRow] = field(default_factory=list)

    def section(self, name: str) -> list[RawRow]:
        return getattr(self, SECTIONS[name])

    def first(self, name: str) -> RawRow:
        """First row of a section, or an empty dict when the section is empty."""
        rows = self.section(name)
        return rows[0] if rows else {}

    def sections(self) -> dict[str, list[RawRow]]:
        return {name: getattr(self, attr) for name, attr in SECTIONS.items()}
