# src/clinicsched/calendar/working_hours.py
from __future__ import annotations

import logging
from datetime import date

from clinicsched.schemas.models import EngineConfig, IssueKind, ValidationResult, WorkingHours
from clinicsched.stores.protocols import ClinicScheduleStore
from clinicsched.timecalc.time_arithmetic import in_range, stored_weekday

logger = logging.getLogger(__name__)


class WorkingHoursCalendar:
    """
    @brief
    Per-clinic weekly opening windows.

    @details
    Reads the clinic's configured schedule from the ClinicScheduleStore.
    A clinic with no configuration (empty list) uses the default schedule
    from EngineConfig, so "unconfigured" and "configured with the defaults"
    behave identically. A store read failure also falls back to the default
    schedule, with a warning attached by check().
    """

    def __init__(self, store: ClinicScheduleStore, cfg: EngineConfig) -> None:
        self.store = store
        self.cfg = cfg

    def window_for(self, clinic_id: str, day: date) -> WorkingHours:
        """
        @brief
        Resolve the working window of a clinic on a given date.

        @returns
            The WorkingHours row for the date's weekday. A weekday missing from
            the clinic's schedule is returned as a closed day.
        """
        schedule, _ = self._resolve_schedule(clinic_id)
        return self._pick(schedule, day)

    def check(self, clinic_id: str, day: date, start_time: str, end_time: str) -> ValidationResult:
        """
        @brief
        Validate that [start_time, end_time] lies inside the clinic's window.

        @details
        Closed days fail with NonWorkingDay regardless of the requested times.
        Otherwise both bounds are checked inclusively against the window and
        each violation is reported separately as OutsideWorkingHours.

        @raises
            InvalidTimeFormat
                If the candidate or the stored window holds a malformed time.
        """
        result = ValidationResult()
        schedule, degraded = self._resolve_schedule(clinic_id)
        if degraded:
            result.add_warning(
                IssueKind.WORKING_HOURS_UNAVAILABLE,
                "Clinic working hours unavailable, default schedule applied",
                clinic_id=clinic_id,
            )

        window = self._pick(schedule, day)
        if not window.is_working_day:
            result.add_error(
                IssueKind.NON_WORKING_DAY,
                f"The clinic does not operate on {day.strftime('%A')}",
                clinic_id=clinic_id,
                date=day.isoformat(),
            )
            return result

        for label, value in (("start", start_time), ("end", end_time)):
            if not in_range(value, window.start_time, window.end_time):
                result.add_error(
                    IssueKind.OUTSIDE_WORKING_HOURS,
                    f"Appointment {label} time {value} must be between "
                    f"{window.start_time} and {window.end_time}",
                    clinic_id=clinic_id,
                    window=[window.start_time, window.end_time],
                )
        return result

    def _resolve_schedule(self, clinic_id: str) -> tuple[list[WorkingHours], bool]:
        try:
            configured = self.store.working_hours(clinic_id)
        except Exception as e:
            logger.warning(
                "Working hours lookup failed for clinic %s, using defaults: %s", clinic_id, e
            )
            return list(self.cfg.default_working_hours), True

        if not configured:
            return list(self.cfg.default_working_hours), False
        return list(configured), False

    @staticmethod
    def _pick(schedule: list[WorkingHours], day: date) -> WorkingHours:
        weekday = stored_weekday(day)
        for row in schedule:
            if row.weekday == weekday:
                return row
        return WorkingHours(
            weekday=weekday, start_time="00:00", end_time="00:00", is_working_day=False
        )


__all__ = ["WorkingHoursCalendar"]
