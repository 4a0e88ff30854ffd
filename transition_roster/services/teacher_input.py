from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

import pandas as pd

from ..models import columns as col
from ..models.period import REGULAR_PERIODS, Period, parse_period
from ..models.student_record import RawRow
from ..models.teacher_input import (
    ASSESSMENT_FIELDS,
    CASE_MANAGER,
    COURSE_TITLE,
    IDENTITY_FIELDS,
    PERIOD_FIELDS,
    SPECIAL_EDUCATION_FIELDS,
    TEACHER_NAME,
    TeacherInput,
)
from .schedule_filter import filter_active

"""Teacher input reconciliation.

Three layers feed every field:

- schedule: who teaches which period (and the case manager)
- form responses: the teacher's assessment, one response per teacher
- legacy roster row: values exported by earlier runs or typed in by staff

Identity fields (course, teacher, transfer/current grade) take the legacy
value when present, else the schedule value; form responses never touch
them. Assessment fields and Special Education fields take the form value,
else the schedule value, else the legacy value, so a legacy value only fills
what is still empty.
"""

__all__ = [
    "DEFAULT_CASE_MANAGER_COURSE",
    "resolve_identity",
    "resolve_assessment",
    "latest_per_teacher",
    "reconcile",
]

logger = logging.getLogger(__name__)

DEFAULT_CASE_MANAGER_COURSE = "Case Manag HS"

Layer = dict[Period, dict[str, str]]


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        if pd.isna(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value).strip()


def resolve_identity(schedule: str, form: str, legacy: str) -> str:
    """Legacy wins when set, else schedule. Form input is ignored."""
    return legacy or schedule


def resolve_assessment(schedule: str, form: str, legacy: str) -> str:
    """Form wins when set, then schedule; legacy only fills an empty field."""
    return form or schedule or legacy


def _schedule_layer(rows: list[RawRow], case_manager_course: str) -> Layer:
    layer: Layer = {}
    for row in rows:
        period = parse_period(row.get(col.PERIOD_BEGIN))
        if period is None:
            continue
        course = _text(row.get(COURSE_TITLE))
        teacher = _text(row.get(TEACHER_NAME))
        if period.is_regular:
            slot = layer.setdefault(period, {})
            slot[COURSE_TITLE] = course
            slot[TEACHER_NAME] = teacher
        if course == case_manager_course or period is Period.SPECIAL_EDUCATION:
            layer.setdefault(Period.SPECIAL_EDUCATION, {})[CASE_MANAGER] = teacher
    return layer


def _timestamp_field(responses: list[RawRow]) -> str | None:
    for name in col.TIMESTAMP_FIELDS:
        if any(name in r for r in responses):
            return name
    return None


def latest_per_teacher(responses: Iterable[RawRow]) -> list[RawRow]:
    """One response per teacher name, the most recent one.

    Recency comes from the first timestamp-like column found (``Timestamp``,
    ``Date``, ``Submit Time`` ...). Without one, the last response in sheet
    order wins, which relies on the sheet keeping submission order.
    """
    by_teacher: dict[str, list[RawRow]] = {}
    for r in responses:
        teacher = _text(r.get(TEACHER_NAME))
        if not teacher:
            logger.warning("form response without teacher name skipped")
            continue
        by_teacher.setdefault(teacher, []).append(r)

    result: list[RawRow] = []
    for teacher, group in by_teacher.items():
        if len(group) == 1:
            result.append(group[0])
            continue
        field = _timestamp_field(group)
        if field is None:
            logger.warning(f"no timestamp on responses from {teacher}, using last response in sheet order")
            result.append(group[-1])
            continue
        best, best_ts = group[-1], None
        for r in group:
            ts = pd.to_datetime(r.get(field), errors="coerce")
            if pd.isna(ts):
                continue
            if best_ts is None or ts >= best_ts:
                best, best_ts = r, ts
        logger.debug(f"{len(group)} responses from {teacher}, using {best_ts}")
        result.append(best)
    return result


def _is_case_manager_response(response: RawRow, teacher: str, case_manager: str) -> bool:
    if _text(response.get(CASE_MANAGER)):
        return True
    if "case manag" in teacher.lower():
        return True
    return bool(case_manager) and teacher == case_manager


def _form_layer(
    student_id: int,
    responses: list[RawRow],
    schedule_rows: list[RawRow],
    case_manager_course: str,
    case_manager: str,
) -> Layer:
    layer: Layer = {}
    for response in latest_per_teacher(responses):
        teacher = _text(response.get(TEACHER_NAME))
        period: Period | None = None
        for row in schedule_rows:
            if _text(row.get(TEACHER_NAME)) != teacher:
                continue
            if _text(row.get(COURSE_TITLE)) == case_manager_course:
                continue
            p = parse_period(row.get(col.PERIOD_BEGIN))
            if p is not None and p.is_regular:
                period = p
                break
        if period is not None:
            slot = layer.setdefault(period, {})
            for name in ASSESSMENT_FIELDS:
                slot[name] = _text(response.get(name))
        elif _is_case_manager_response(response, teacher, case_manager):
            slot = layer.setdefault(Period.SPECIAL_EDUCATION, {})
            for name in SPECIAL_EDUCATION_FIELDS:
                slot[name] = _text(response.get(name))
        else:
            logger.warning(f"student {student_id}: no schedule match for teacher {teacher}")
    return layer


def _legacy_layer(tentative_row: RawRow | None) -> Layer:
    layer: Layer = {}
    if not tentative_row:
        return layer
    for period in REGULAR_PERIODS:
        layer[period] = {
            name: _text(tentative_row.get(period.legacy_prefix + name)) for name in PERIOD_FIELDS
        }
    se = Period.SPECIAL_EDUCATION
    layer[se] = {
        name: _text(tentative_row.get(se.legacy_prefix + name)) for name in SPECIAL_EDUCATION_FIELDS
    }
    return layer


def reconcile(
    student_id: int,
    form_responses: list[RawRow] | None,
    schedule_rows: list[RawRow] | None,
    tentative_row: RawRow | None,
    *,
    case_manager_course: str = DEFAULT_CASE_MANAGER_COURSE,
) -> TeacherInput:
    """Build the teacher input for one student from its three layers."""
    active = filter_active(schedule_rows)
    schedule = _schedule_layer(active, case_manager_course)
    case_manager = schedule.get(Period.SPECIAL_EDUCATION, {}).get(CASE_MANAGER, "")
    form = (
        _form_layer(student_id, form_responses, active, case_manager_course, case_manager)
        if form_responses
        else {}
    )
    legacy = _legacy_layer(tentative_row)

    result = TeacherInput()
    for period, slot in result.slots.items():
        for name in slot:
            resolver = (
                resolve_identity if period.is_regular and name in IDENTITY_FIELDS else resolve_assessment
            )
            result.set(
                period,
                name,
                resolver(
                    schedule.get(period, {}).get(name, ""),
                    form.get(period, {}).get(name, ""),
                    legacy.get(period, {}).get(name, ""),
                ),
            )
    return result
