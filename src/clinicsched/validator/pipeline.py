# src/clinicsched/validator/pipeline.py
from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from zoneinfo import ZoneInfo

from clinicsched.calendar.holidays import HolidayCalendar
from clinicsched.calendar.working_hours import WorkingHoursCalendar
from clinicsched.conflicts.detector import ConflictDetector
from clinicsched.errors import InvalidTimeFormat
from clinicsched.policy.duration import DurationPolicy
from clinicsched.schemas.models import (
    AppointmentRequest,
    EngineConfig,
    IssueKind,
    ValidationResult,
)
from clinicsched.stores.protocols import (
    AppointmentStore,
    ClinicScheduleStore,
    PractitionerDirectory,
)
from clinicsched.timecalc.time_arithmetic import to_minutes

logger = logging.getLogger(__name__)

CheckFn = Callable[[AppointmentRequest], ValidationResult]


@dataclass(frozen=True)
class Check:
    """
    @brief
    One named, independent validation step.

    @details
    needs_times marks steps that require well-formed HH:MM values; they are
    skipped when the candidate's times fail to parse (the format error is
    already reported).
    """

    name: str
    run: CheckFn
    needs_times: bool = True


# ---------------------------
# PIPELINE CLASS
# ----------------------------
class ValidationPipeline:
    """
    @brief
    Decides whether a candidate appointment is schedulable.

    @details
    Runs every registered check against the candidate and folds their
    partial results into one ValidationResult. There is no short-circuiting:
    all violations are reported at once. The pipeline is stateless between
    calls; each validate() works on the snapshot its collaborators return.

    Collaborator failures follow a per-check policy:
      - working hours store → default schedule + warning
      - holiday store → warning only (fail-open)
      - practitioner directory → hard error (fail-closed)
      - appointment store → hard error (fail-closed)

    Rule violations never raise; the caller inserts the appointment only
    when is_valid is True and lets the storage layer arbitrate races.
    """

    def __init__(
        self,
        schedule_store: ClinicScheduleStore,
        directory: PractitionerDirectory,
        appointment_store: AppointmentStore,
        cfg: EngineConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """
        @params
            schedule_store : ClinicScheduleStore
                Source of clinic working hours and holidays.
            directory : PractitionerDirectory
                Practitioner membership, activity and day overrides.
            appointment_store : AppointmentStore
                Existing bookings for the conflict scan.
            cfg : EngineConfig | None
                Rule tables; built-in defaults when omitted.
            clock : Callable[[], datetime] | None
                Source of "now". Naive values are read in cfg.timezone.
        """
        self.cfg = cfg or EngineConfig()
        self.tz = ZoneInfo(self.cfg.timezone)
        self.clock = clock or (lambda: datetime.now(self.tz))
        self.directory = directory

        self.working_hours = WorkingHoursCalendar(schedule_store, self.cfg)
        self.holidays = HolidayCalendar(schedule_store, self.cfg)
        self.durations = DurationPolicy(self.cfg)
        self.conflicts = ConflictDetector(appointment_store, self.cfg)

        self.checks: list[Check] = [
            Check("TimeSequence", self._check_time_sequence),
            Check("FutureDate", self._check_future_date),
            Check("Duration", self._check_duration, needs_times=False),
            Check("WorkingHours", self._check_working_hours),
            Check("Holiday", self._check_holiday, needs_times=False),
            Check("PractitionerAvailability", self._check_practitioner, needs_times=False),
            Check("Conflicts", self.conflicts.check),
        ]

    # ---------- Public API ----------
    def add_check(self, name: str, run: CheckFn, needs_times: bool = True) -> None:
        self.checks.append(Check(name, run, needs_times))

    def validate(self, candidate: AppointmentRequest) -> ValidationResult:
        """
        @brief
        Evaluate every check and merge the outcomes.

        @returns
            ValidationResult whose is_valid is True iff no check reported an error.
        """
        # (1) Parse candidate times once; malformed values disable time-based checks
        format_result = self._check_time_format(candidate)
        times_ok = format_result.is_valid
        results: list[ValidationResult] = [format_result]

        # (2) Run all checks independently
        for check in self.checks:
            if check.needs_times and not times_ok:
                logger.debug("Skipping %s: candidate times are malformed", check.name)
                continue
            try:
                results.append(check.run(candidate))
            except InvalidTimeFormat as e:
                # Malformed rule data (e.g. stored working hours)
                partial = ValidationResult()
                partial.add_error(IssueKind.INVALID_TIME_FORMAT, e.args[0], check=check.name)
                results.append(partial)

        # (3) Fold partial results into one verdict
        merged = ValidationResult.combine(results)
        logger.info(
            "Validated appointment for practitioner %s on %s %s-%s: valid=%s errors=%d warnings=%d",
            candidate.practitioner_id,
            candidate.date,
            candidate.start_time,
            candidate.end_time,
            merged.is_valid,
            len(merged.errors),
            len(merged.warnings),
        )
        return merged

    # ---------- Checks ----------
    def _check_time_format(self, candidate: AppointmentRequest) -> ValidationResult:
        result = ValidationResult()
        fields = (("start_time", candidate.start_time), ("end_time", candidate.end_time))
        for label, value in fields:
            try:
                to_minutes(value)
            except InvalidTimeFormat:
                result.add_error(
                    IssueKind.INVALID_TIME_FORMAT,
                    f"{label} must be a 24-hour HH:MM time, got {value!r}",
                    field=label,
                )
        return result

    def _check_time_sequence(self, candidate: AppointmentRequest) -> ValidationResult:
        result = ValidationResult()
        start = to_minutes(candidate.start_time)
        end = to_minutes(candidate.end_time)

        if start >= end:
            result.add_error(
                IssueKind.INVALID_TIME_SEQUENCE,
                "Start time must be earlier than end time",
                start_time=candidate.start_time,
                end_time=candidate.end_time,
            )
        elif end - start != candidate.duration_minutes:
            result.add_error(
                IssueKind.DURATION_MISMATCH,
                f"Duration {candidate.duration_minutes} minutes does not match "
                f"{candidate.start_time}-{candidate.end_time} ({end - start} minutes)",
                duration_minutes=candidate.duration_minutes,
                computed_minutes=end - start,
            )
        return result

    def _check_future_date(self, candidate: AppointmentRequest) -> ValidationResult:
        result = ValidationResult()
        now = self._now()
        minutes = to_minutes(candidate.start_time)
        starts_at = datetime.combine(
            candidate.date, time(minutes // 60, minutes % 60), tzinfo=self.tz
        )

        if starts_at <= now:
            result.add_error(
                IssueKind.PAST_DATE,
                "Appointments cannot be scheduled in the past",
                starts_at=starts_at.isoformat(),
            )
        elif starts_at <= now + timedelta(hours=self.cfg.short_notice_hours):
            result.add_warning(
                IssueKind.SHORT_NOTICE,
                f"Appointment scheduled with short notice "
                f"(less than {self.cfg.short_notice_hours:g} hours ahead)",
                starts_at=starts_at.isoformat(),
            )
        return result

    def _check_duration(self, candidate: AppointmentRequest) -> ValidationResult:
        return self.durations.validate(candidate.procedure_type, candidate.duration_minutes)

    def _check_working_hours(self, candidate: AppointmentRequest) -> ValidationResult:
        return self.working_hours.check(
            candidate.clinic_id, candidate.date, candidate.start_time, candidate.end_time
        )

    def _check_holiday(self, candidate: AppointmentRequest) -> ValidationResult:
        return self.holidays.check(candidate.clinic_id, candidate.date)

    def _check_practitioner(self, candidate: AppointmentRequest) -> ValidationResult:
        """
        @brief
        Practitioner membership, activity and day-override check.

        @details
        Any directory failure is fail-closed: scheduling against unknown
        availability is reported as a hard error.
        """
        result = ValidationResult()
        pid, cid = candidate.practitioner_id, candidate.clinic_id

        try:
            active = self.directory.is_active_in_clinic(pid, cid)
            override = self.directory.day_override(pid, candidate.date) if active else None
        except Exception as e:
            logger.error("Practitioner directory lookup failed for %s: %s", pid, e)
            result.add_error(
                IssueKind.PRACTITIONER_DIRECTORY_UNAVAILABLE,
                "Practitioner availability could not be verified",
                practitioner_id=pid,
                clinic_id=cid,
            )
            return result

        if active is None:
            result.add_error(
                IssueKind.PRACTITIONER_NOT_IN_CLINIC,
                "The practitioner is not associated with this clinic",
                practitioner_id=pid,
                clinic_id=cid,
            )
        elif not active:
            result.add_error(
                IssueKind.PRACTITIONER_INACTIVE,
                "The practitioner is not active",
                practitioner_id=pid,
            )
        elif override is not None and not override.available:
            result.add_error(
                IssueKind.PRACTITIONER_UNAVAILABLE,
                "The practitioner is not available on this date",
                practitioner_id=pid,
                date=candidate.date.isoformat(),
            )
        return result

    # ---------- Utilities ----------
    def _now(self) -> datetime:
        now = self.clock()
        if now.tzinfo is None:
            return now.replace(tzinfo=self.tz)
        return now


# ----------------------------
# THIN FACADE
# ----------------------------
def validate_appointment(
    candidate: AppointmentRequest,
    schedule_store: ClinicScheduleStore,
    directory: PractitionerDirectory,
    appointment_store: AppointmentStore,
    *,
    cfg: EngineConfig | None = None,
    clock: Callable[[], datetime] | None = None,
) -> ValidationResult:
    """Build a ValidationPipeline for one call and return its verdict."""
    pipeline = ValidationPipeline(schedule_store, directory, appointment_store, cfg, clock)
    return pipeline.validate(candidate)


__all__ = ["Check", "ValidationPipeline", "validate_appointment"]
