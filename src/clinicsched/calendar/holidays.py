# src/clinicsched/calendar/holidays.py
from __future__ import annotations

import logging
from datetime import date

from clinicsched.schemas.models import EngineConfig, Holiday, IssueKind, ValidationResult
from clinicsched.stores.protocols import ClinicScheduleStore

logger = logging.getLogger(__name__)


def _matches(holiday: Holiday, day: date) -> bool:
    if holiday.is_recurring:
        # "MM-DD" or a full date whose month-day recurs every year
        return holiday.date[-5:] == day.strftime("%m-%d")
    return holiday.date == day.isoformat()


class HolidayCalendar:
    """
    @brief
    Clinic-specific holidays layered on top of the national set.

    @details
    Clinic holidays are checked first (one-off by exact date, recurring by
    month-day), then the national holidays from EngineConfig. The clinic
    list only ever adds closures; it never replaces the national set.
    """

    def __init__(self, store: ClinicScheduleStore, cfg: EngineConfig) -> None:
        self.store = store
        self.cfg = cfg

    def is_holiday(self, clinic_id: str, day: date) -> Holiday | None:
        """
        @returns
            The first matching Holiday, or None.

        @raises
            Whatever the store raises on read failure; check() owns the
            fail-open policy.
        """
        custom = self.store.holidays(clinic_id)
        for holiday in custom:
            if not holiday.is_recurring and _matches(holiday, day):
                return holiday
        for holiday in custom:
            if holiday.is_recurring and _matches(holiday, day):
                return holiday
        return self._national(day)

    def check(self, clinic_id: str, day: date) -> ValidationResult:
        result = ValidationResult()
        try:
            holiday = self.is_holiday(clinic_id, day)
        except Exception as e:
            # Fail open: national holidays are still checked below
            logger.warning("Holiday lookup failed for clinic %s: %s", clinic_id, e)
            result.add_warning(
                IssueKind.HOLIDAY_CALENDAR_UNAVAILABLE,
                "Holiday calendar unavailable, clinic holidays were not checked",
                clinic_id=clinic_id,
            )
            holiday = self._national(day)

        if holiday is not None:
            result.add_error(
                IssueKind.HOLIDAY,
                f"Appointments cannot be scheduled on {holiday.name}",
                date=day.isoformat(),
                holiday=holiday.name,
            )
        return result

    def _national(self, day: date) -> Holiday | None:
        for holiday in self.cfg.national_holidays:
            if _matches(holiday, day):
                return holiday
        return None


__all__ = ["HolidayCalendar"]
