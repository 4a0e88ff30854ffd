from __future__ import annotations

from dataclasses import dataclass, field

from .period import Period

"""Per-student teacher input structure.

Eight class periods plus the Special Education slot, each with a fixed set of
string fields. Field names match the form question texts so form responses
and legacy roster columns can be copied over by key.
"""

__all__ = [
    "COURSE_TITLE",
    "TEACHER_NAME",
    "TRANSFER_GRADE",
    "CURRENT_GRADE",
    "GROWTH_ASSESSMENT",
    "PROGRESS_NOTES",
    "PERIOD_FIELDS",
    "IDENTITY_FIELDS",
    "ASSESSMENT_FIELDS",
    "CASE_MANAGER",
    "ACCOMMODATIONS",
    "BEHAVIOR_STRENGTHS",
    "BEHAVIOR_NEEDS",
    "FUNCTIONAL_NEEDS",
    "COMMENTS",
    "SPECIAL_EDUCATION_FIELDS",
    "TeacherInput",
]

COURSE_TITLE = "Course Title"
TEACHER_NAME = "Teacher Name"
TRANSFER_GRADE = "Transfer Grade"
CURRENT_GRADE = "Current Grade"
GROWTH_ASSESSMENT = "How would you assess this student's academic growth?"
PROGRESS_NOTES = "Academic and Behavioral Progress Notes"

PERIOD_FIELDS: tuple[str, ...] = (
    COURSE_TITLE,
    TEACHER_NAME,
    TRANSFER_GRADE,
    CURRENT_GRADE,
    GROWTH_ASSESSMENT,
    PROGRESS_NOTES,
)
# Who teaches what: schedule and legacy rows may overwrite these.
IDENTITY_FIELDS: tuple[str, ...] = PERIOD_FIELDS[:4]
# Qualitative input: legacy rows only fill these when still empty.
ASSESSMENT_FIELDS: tuple[str, ...] = PERIOD_FIELDS[4:]

CASE_MANAGER = "Case Manager"
ACCOMMODATIONS = "What accommodations seem to work well with this student to help them be successful?"
BEHAVIOR_STRENGTHS = "What are the student's strengths, as far as behavior?"
BEHAVIOR_NEEDS = "What are the student's needs, as far as behavior?"
FUNCTIONAL_NEEDS = "What are the student's needs, as far as functional skills?"
COMMENTS = "Please add any other comments or concerns here:"

SPECIAL_EDUCATION_FIELDS: tuple[str, ...] = (
    CASE_MANAGER,
    ACCOMMODATIONS,
    BEHAVIOR_STRENGTHS,
    BEHAVIOR_NEEDS,
    FUNCTIONAL_NEEDS,
    COMMENTS,
)


def _empty_slots() -> dict[Period, dict[str, str]]:
    slots: dict[Period, dict[str, str]] = {}
    for period in Period:
        names = SPECIAL_EDUCATION_FIELDS if period is Period.SPECIAL_EDUCATION else PERIOD_FIELDS
        slots[period] = {name: "" for name in names}
    return slots


@dataclass
class TeacherInput:
    """Mutable teacher input, created empty and filled layer by layer."""
    slots: dict[Period, dict[str, str]] = field(default_factory=_empty_slots)

    def get(self, period: Period, name: str) -> str:
        return self.slots[period][name]

    def set(self, period: Period, name: str, value: object) -> None:
        if name not in self.slots[period]:
            raise KeyError(f"{period.label} has no field {name!r}")
        self.slots[period][name] = "" if value is None else str(value)

    def is_empty(self, period: Period, name: str) -> bool:
        return self.slots[period][name] == ""
