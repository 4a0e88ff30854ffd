from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from datetime import date

from ..models import columns as col
from ..models.config_models import ReminderConfig, RosterConfig
from ..models.run_result import ReminderResult, StudentSummary
from ..models.student_record import MergedStudentRecord
from ..utils.dates import add_workdays, format_due_date, format_iso, format_mmddyyyy, is_holiday, is_weekend, to_date
from .mailer import EmailPayload, Mailer, MailerError

"""Ten-day milestone reminders.

On every school day teachers get one e-mail: the list of students whose
tenth school day is today, or a short "no students today" note. Weekends and
holidays send nothing. Failures are reported in the result, never raised.
"""

__all__ = [
    "REASON_WEEKEND",
    "REASON_HOLIDAY",
    "REASON_SCHOOL_DAY",
    "REASON_NO_DATA",
    "should_run_today",
    "select_milestone_students",
    "recipients_for",
    "student_list_body",
    "no_students_body",
    "build_payload",
    "run_daily",
]

logger = logging.getLogger(__name__)

REASON_WEEKEND = "Weekend (reminders only sent on weekdays)"
REASON_HOLIDAY = "Holiday (reminders not sent on holidays)"
REASON_SCHOOL_DAY = "Valid school day"
REASON_NO_DATA = "No student data available"

UNKNOWN = "Unknown"


def should_run_today(today: date, holidays: Iterable[str]) -> tuple[bool, str]:
    if is_weekend(today):
        return False, REASON_WEEKEND
    if is_holiday(today, holidays):
        return False, REASON_HOLIDAY
    return True, REASON_SCHOOL_DAY


def select_milestone_students(
    merged: Mapping[int, MergedStudentRecord],
    today: date,
    holidays: Iterable[str],
    *,
    workdays: int = 10,
) -> list[StudentSummary]:
    """Students whose ``workdays``-th school day after the first day is today."""
    hol = frozenset(holidays)
    today_key = format_iso(today)
    selected: list[StudentSummary] = []
    for sid, record in merged.items():
        row = record.first("TENTATIVE")
        first_day = to_date(
            row.get(col.FIRST_DAY_OF_AEP) or row.get(col.CANON_ENTRY_DATE),
            context=f"first day {sid}",
        )
        if first_day is None:
            logger.debug(f"student {sid}: missing {col.FIRST_DAY_OF_AEP}, skipped")
            continue
        milestone = add_workdays(first_day, workdays, hol)
        if format_iso(milestone) != today_key:
            continue
        selected.append(StudentSummary(
            student_id=row.get(col.STUDENT_ID) or sid,
            last_name=row.get(col.LAST) or UNKNOWN,
            first_name=row.get(col.FIRST) or UNKNOWN,
            grade=row.get(col.GRADE) or UNKNOWN,
            start_date=format_mmddyyyy(first_day),
            milestone_date=format_mmddyyyy(milestone),
        ))
    return selected


def recipients_for(config: RosterConfig, test_recipients: Iterable[str] | None = None) -> tuple[str, ...]:
    """Teacher addresses plus configured staff, deduplicated and sorted.

    ``test_recipients`` replaces the list entirely.
    """
    if test_recipients:
        return tuple(test_recipients)
    return tuple(sorted(set(config.teacher_emails) | set(config.reminder.recipients)))


def student_list_body(students: list[StudentSummary], due: date, form_url: str) -> str:
    student_list = "\n".join(s.line() for s in students)
    return f"""NAHS Teachers,

Below is today's list of students that have been enrolled for 10 days at NAHS:

{student_list}

ACTION ITEM (Due by end of day, {format_due_date(due)}): If you have one of these students on your roster, please go to: {form_url} and provide your input on their academic growth and behavioral progress.

****REMINDER****
When inputting the period on the form, select the period that is listed on the student's schedule, the one you enter their attendance with.

Thank you"""


def no_students_body() -> str:
    return """NAHS Teachers,

We do not have any students on today's 10-Day list!
Please work on any you have pending from before and be on the look out for the next list.

Have a great day."""


def build_payload(
    students: list[StudentSummary],
    today: date,
    holidays: Iterable[str],
    reminder: ReminderConfig,
    recipients: tuple[str, ...],
) -> EmailPayload:
    if students:
        due = add_workdays(today, reminder.due_workdays, holidays)
        return EmailPayload(
            recipients=recipients,
            subject=reminder.subject,
            body=student_list_body(students, due, reminder.form_url),
            email_type="student_list",
        )
    return EmailPayload(
        recipients=recipients,
        subject=reminder.subject,
        body=no_students_body(),
        email_type="no_students",
    )


def run_daily(
    config: RosterConfig,
    today: date,
    mailer: Mailer,
    load_merged: Callable[[], Mapping[int, MergedStudentRecord]],
    *,
    test_recipients: Iterable[str] | None = None,
) -> ReminderResult:
    """Gate, select and send. Returns why nothing was sent instead of raising."""
    logger.info(f"processing reminders for: {format_iso(today)}")
    holidays = frozenset(config.holidays)
    run, reason = should_run_today(today, holidays)
    if not run:
        logger.info(f"reminders not sent: {reason}")
        return ReminderResult(emails_sent=False, students_count=0, reason=reason)

    try:
        merged = load_merged()
    except Exception as e:  # noqa: BLE001
        logger.error(f"reminder: could not load student data: {e}")
        return ReminderResult(emails_sent=False, students_count=0, reason=f"{REASON_NO_DATA}: {e}")
    if not merged:
        logger.warning("no student data available for reminder processing")
        return ReminderResult(emails_sent=False, students_count=0, reason=REASON_NO_DATA)

    students = select_milestone_students(
        merged, today, holidays, workdays=config.reminder.milestone_workdays
    )
    logger.info(f"found {len(students)} students at {config.reminder.milestone_workdays}-day milestone")
    recipients = recipients_for(config, test_recipients)
    payload = build_payload(students, today, holidays, config.reminder, recipients)
    try:
        mailer.send(payload)
    except MailerError as e:
        logger.error(f"reminder: {e}")
        return ReminderResult(
            emails_sent=False, students_count=len(students), reason=str(e), email_type=payload.email_type
        )
    return ReminderResult(
        emails_sent=True,
        students_count=len(students),
        reason=reason,
        email_type=payload.email_type,
        recipients=recipients,
    )
