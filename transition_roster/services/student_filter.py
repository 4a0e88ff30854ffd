from __future__ import annotations

import logging

from ..models.student_record import MergedStudentRecord, SourceMap
from .schedule_filter import filter_active as active_schedules

"""Withdrawal exclusion.

Students listed in any exclusion source (withdrawn, W/D other) are dropped
from the merged map. Membership is by student id only.
"""

__all__ = [
    "filter_active",
]

logger = logging.getLogger(__name__)


def filter_active(
    merged: dict[int, MergedStudentRecord],
    *exclusions: SourceMap | None,
    keep_reenrolled: bool = False,
) -> dict[int, MergedStudentRecord]:
    """Return a new map without the excluded students.

    With ``keep_reenrolled`` an excluded student who still has an active
    schedule row is kept (a withdrawn student who came back).
    """
    excluded: set[int] = set()
    for source in exclusions:
        if source:
            excluded.update(source.keys())

    result: dict[int, MergedStudentRecord] = {}
    removed = 0
    for sid, record in merged.items():
        if sid in excluded:
            if keep_reenrolled and active_schedules(record.schedules):
                logger.info(f"student {sid}: on exclusion list but re-enrolled, kept")
            else:
                removed += 1
                continue
        result[sid] = record
    logger.info(f"student filter: {removed} excluded, {len(result)} active")
    return result
