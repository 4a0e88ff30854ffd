from __future__ import annotations

import logging
import math
import re
from enum import Enum
from typing import Any

"""Class period enum and conversion from raw schedule values.

Schedule exports carry the begin period as an int (3), a float read back from
Excel (3.0) or an ordinal label ("3rd"). Period 9 is the Special Education
slot. Anything else is reported as a parse warning and yields ``None``.
"""

__all__ = [
    "Period",
    "REGULAR_PERIODS",
    "parse_period",
]

logger = logging.getLogger(__name__)

_DIGITS = re.compile(r"\d+")


class Period(Enum):
    FIRST = "1st"
    SECOND = "2nd"
    THIRD = "3rd"
    FOURTH = "4th"
    FIFTH = "5th"
    SIXTH = "6th"
    SEVENTH = "7th"
    EIGHTH = "8th"
    SPECIAL_EDUCATION = "Special Education"

    @property
    def label(self) -> str:
        return self.value

    @property
    def legacy_prefix(self) -> str:
        """Column prefix used by previously exported roster rows."""
        if self is Period.SPECIAL_EDUCATION:
            return "Special Education - "
        return f"{self.value} Period - "

    @property
    def is_regular(self) -> bool:
        return self is not Period.SPECIAL_EDUCATION


REGULAR_PERIODS: tuple[Period, ...] = tuple(p for p in Period if p.is_regular)

_BY_NUMBER: dict[int, Period] = {i + 1: p for i, p in enumerate(REGULAR_PERIODS)}
_BY_NUMBER[9] = Period.SPECIAL_EDUCATION


def parse_period(raw: Any) -> Period | None:
    """Map a raw ``Per Beg`` value to a :class:`Period`.

    Returns ``None`` for blank values silently and for unrecognized values
    with a warning.
    """
    if raw is None:
        return None
    if isinstance(raw, Period):
        return raw
    number: int | None = None
    if isinstance(raw, bool):
        number = None
    elif isinstance(raw, int):
        number = raw
    elif isinstance(raw, float):
        if math.isnan(raw):
            return None
        if raw.is_integer():
            number = int(raw)
    elif isinstance(raw, str):
        text = raw.strip()
        if not text:
            return None
        if text.lower().startswith("special"):
            return Period.SPECIAL_EDUCATION
        m = _DIGITS.search(text)
        if m:
            number = int(m.group(0))
    period = _BY_NUMBER.get(number) if number is not None else None
    if period is None:
        logger.warning(f"unrecognized period value: {raw!r}")
    return period
