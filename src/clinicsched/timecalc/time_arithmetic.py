# src/clinicsched/timecalc/time_arithmetic.py
from __future__ import annotations

import re
from datetime import date

from clinicsched.errors import InvalidTimeFormat

_HHMM = re.compile(r"^(\d{1,2}):(\d{2})$")


def to_minutes(time: str) -> int:
    """
    @brief
    Convert a 24-hour "HH:MM" string into minutes since midnight.

    @params
        time : str
            Clock time such as "08:30" or "8:30".

    @returns
        Integer minutes in [0, 1439].

    @raises
        InvalidTimeFormat
            If the value is not a string, has non-digit parts, or the hour /
            minute is out of range.
    """
    if not isinstance(time, str):
        raise InvalidTimeFormat(
            f"Time must be a string in HH:MM format, got {type(time).__name__}",
            source="time_arithmetic.to_minutes",
        )

    match = _HHMM.match(time.strip())
    if match is None:
        raise InvalidTimeFormat(
            f"Invalid time format: {time!r}",
            source="time_arithmetic.to_minutes",
            suggested_action="Use 24-hour HH:MM, e.g. 09:30",
        )

    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise InvalidTimeFormat(
            f"Time out of range: {time!r}",
            source="time_arithmetic.to_minutes",
            suggested_action="Hours must be 00-23 and minutes 00-59",
        )
    return hours * 60 + minutes


def is_valid_time(time: str) -> bool:
    try:
        to_minutes(time)
    except InvalidTimeFormat:
        return False
    return True


def in_range(time: str, start: str, end: str) -> bool:
    """Inclusive on both bounds: in_range("18:00", "08:00", "18:00") is True."""
    t = to_minutes(time)
    return to_minutes(start) <= t <= to_minutes(end)


def overlaps(start1: int, end1: int, start2: int, end2: int) -> bool:
    """
    @brief
    Half-open interval overlap test for minute offsets.

    @details
    [start1, end1) and [start2, end2) overlap iff start1 < end2 and start2 < end1.
    Back-to-back intervals (end1 == start2) do not overlap.
    """
    return start1 < end2 and start2 < end1


def stored_weekday(d: date) -> int:
    """Weekday in the stored convention: 0 = Sunday … 6 = Saturday."""
    return (d.weekday() + 1) % 7


__all__ = ["to_minutes", "is_valid_time", "in_range", "overlaps", "stored_weekday"]
