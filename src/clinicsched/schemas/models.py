# src/clinicsched/schemas/models.py
"""
@brief
Pydantic data models for the clinicsched scheduling engine.

@details
Defines the canonical model types shared by every component:
    - WorkingHours / Holiday / DurationRule: rule-table rows
    - AppointmentRequest: the candidate under validation
    - ExistingAppointment: read-only booking used for conflict scanning
    - Conflict / ValidationIssue / ValidationResult: engine outputs
    - EngineConfig: immutable default tables handed to the engine at construction

Models stay lightweight: only shape constraints live here, business rules
belong to the calendar, policy and conflict components.
"""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, computed_field, field_validator, model_validator


class _StrictBaseModel(BaseModel):
    """
    @brief
    Base model enforcing strict defaults for configuration and data contracts.

    @details
    Forbids unknown fields and stores enum members as their raw values so
    that reports serialize without custom encoders.
    """

    model_config = {
        "extra": "forbid",  # Reject unknown fields
        "populate_by_name": True,  # Allow population by field name
        "use_enum_values": True,  # Export raw enum values
        "validate_default": True,  # Defaults go through the same coercion
    }


# ------------------------------------------------------------
# Enumerations
# ------------------------------------------------------------
class ProcedureType(str, Enum):
    """Dental procedure types accepted on appointment requests."""

    CONSULTATION = "consultation"
    CLEANING = "cleaning"
    FILLING = "filling"
    EXTRACTION = "extraction"
    ROOT_CANAL = "root_canal"
    CROWN = "crown"
    ORTHODONTICS = "orthodontics"
    SURGERY = "surgery"
    EMERGENCY = "emergency"
    FOLLOW_UP = "follow_up"


class AppointmentStatus(str, Enum):
    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


class ConflictKind(str, Enum):
    PRACTITIONER_BUSY = "practitioner_busy"
    PATIENT_BUSY = "patient_busy"


class IssueKind(str, Enum):
    """
    @brief
    Stable identifiers for every error and warning the engine can report.

    @details
    Callers branch on these values (e.g. SchedulingConflict → 409-style
    response); the accompanying message is for humans only.
    """

    INVALID_TIME_FORMAT = "InvalidTimeFormat"
    INVALID_TIME_SEQUENCE = "InvalidTimeSequence"
    DURATION_MISMATCH = "DurationMismatch"
    PAST_DATE = "PastDate"
    SHORT_NOTICE = "ShortNotice"
    DURATION_OUT_OF_RANGE = "DurationOutOfRange"
    DURATION_NOT_RECOMMENDED = "DurationNotRecommended"
    UNKNOWN_PROCEDURE_TYPE = "UnknownProcedureType"
    OUTSIDE_WORKING_HOURS = "OutsideWorkingHours"
    NON_WORKING_DAY = "NonWorkingDay"
    HOLIDAY = "Holiday"
    PRACTITIONER_NOT_IN_CLINIC = "PractitionerNotInClinic"
    PRACTITIONER_INACTIVE = "PractitionerInactive"
    PRACTITIONER_UNAVAILABLE = "PractitionerUnavailable"
    SCHEDULING_CONFLICT = "SchedulingConflict"
    WORKING_HOURS_UNAVAILABLE = "WorkingHoursUnavailable"
    HOLIDAY_CALENDAR_UNAVAILABLE = "HolidayCalendarUnavailable"
    PRACTITIONER_DIRECTORY_UNAVAILABLE = "PractitionerDirectoryUnavailable"
    APPOINTMENT_STORE_UNAVAILABLE = "AppointmentStoreUnavailable"


# ------------------------------------------------------------
# Rule tables
# ------------------------------------------------------------
class WorkingHours(_StrictBaseModel):
    """
    @brief
    Working window of a clinic for one weekday.

    @details
    Weekdays follow the stored convention 0 = Sunday … 6 = Saturday.
    When is_working_day is False the start/end values are ignored.
    """

    weekday: int = Field(..., ge=0, le=6, description="0 = Sunday … 6 = Saturday")
    start_time: str = Field(..., description="Window start, HH:MM")
    end_time: str = Field(..., description="Window end, HH:MM")
    is_working_day: bool = Field(True, description="False marks the clinic closed")


class Holiday(_StrictBaseModel):
    """Recurring ("MM-DD") or one-off ("YYYY-MM-DD") closure date."""

    date: str = Field(..., pattern=r"^(\d{4}-)?\d{2}-\d{2}$", description="MM-DD or YYYY-MM-DD")
    name: str = Field(..., min_length=1)
    is_recurring: bool = Field(True, description="Match by month-day across all years")

    @model_validator(mode="after")
    def _one_off_needs_year(self) -> Holiday:
        if not self.is_recurring and len(self.date) != 10:
            raise ValueError(
                f"one-off holiday '{self.name}' needs a YYYY-MM-DD date, got {self.date!r}"
            )
        return self


class DurationRule(_StrictBaseModel):
    procedure_type: str
    min_minutes: int = Field(..., gt=0)
    max_minutes: int = Field(..., gt=0)
    default_minutes: int = Field(..., gt=0)
    recommended_slots: frozenset[int] = Field(default_factory=frozenset)


class PractitionerDayOverride(_StrictBaseModel):
    available: bool


# ------------------------------------------------------------
# Appointments
# ------------------------------------------------------------
class AppointmentRequest(_StrictBaseModel):
    """
    @brief
    Candidate appointment submitted for validation, not yet persisted.

    @details
    start_time / end_time are kept as raw strings: malformed values are a
    rule violation reported by the engine, not a construction failure.

    @params
        appointment_id : str | None
            Set when re-validating an update; that booking is excluded from
            the conflict scan.
    """

    patient_id: str
    practitioner_id: str
    clinic_id: str
    date: date
    start_time: str = Field(..., description="HH:MM, 24-hour")
    end_time: str = Field(..., description="HH:MM, 24-hour")
    duration_minutes: int = Field(..., gt=0)
    procedure_type: ProcedureType
    appointment_id: str | None = None


class ExistingAppointment(_StrictBaseModel):
    id: str
    practitioner_id: str
    patient_id: str
    date: date
    start_time: str
    end_time: str
    status: AppointmentStatus = AppointmentStatus.SCHEDULED


class Conflict(_StrictBaseModel):
    kind: ConflictKind
    conflicting_appointment_id: str
    start_time: str
    end_time: str


# ------------------------------------------------------------
# Validation outcome
# ------------------------------------------------------------
class ValidationIssue(_StrictBaseModel):
    kind: IssueKind
    message: str
    entities: dict[str, Any] = Field(default_factory=dict)


class ValidationResult(_StrictBaseModel):
    """
    @brief
    Aggregate verdict of one or more checks.

    @details
    is_valid is derived: True iff errors is empty. Warnings never affect it.
    Partial results from independent checks are folded with combine().
    """

    errors: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[ValidationIssue] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_valid(self) -> bool:
        return not self.errors

    def add_error(self, kind: IssueKind, message: str, **entities: Any) -> None:
        self.errors.append(ValidationIssue(kind=kind, message=message, entities=entities))

    def add_warning(self, kind: IssueKind, message: str, **entities: Any) -> None:
        self.warnings.append(ValidationIssue(kind=kind, message=message, entities=entities))

    @property
    def error_kinds(self) -> list[str]:
        return [e.kind for e in self.errors]

    @property
    def warning_kinds(self) -> list[str]:
        return [w.kind for w in self.warnings]

    @property
    def error_messages(self) -> list[str]:
        return [e.message for e in self.errors]

    @property
    def warning_messages(self) -> list[str]:
        return [w.message for w in self.warnings]

    @classmethod
    def combine(cls, results: list[ValidationResult]) -> ValidationResult:
        merged = cls()
        for r in results:
            merged.errors.extend(r.errors)
            merged.warnings.extend(r.warnings)
        return merged


# ------------------------------------------------------------
# Engine configuration (default tables)
# ------------------------------------------------------------
def _default_working_hours() -> list[WorkingHours]:
    weekdays = [
        WorkingHours(weekday=d, start_time="08:00", end_time="18:00", is_working_day=True)
        for d in range(1, 6)
    ]
    return [
        WorkingHours(weekday=0, start_time="00:00", end_time="00:00", is_working_day=False),
        *weekdays,
        WorkingHours(weekday=6, start_time="08:00", end_time="14:00", is_working_day=True),
    ]


def _default_national_holidays() -> list[Holiday]:
    return [
        Holiday(date="01-01", name="New Year's Day"),
        Holiday(date="05-01", name="Labour Day"),
        Holiday(date="07-20", name="Independence Day"),
        Holiday(date="08-10", name="First Cry of Independence"),
        Holiday(date="10-09", name="Independence of Guayaquil"),
        Holiday(date="11-02", name="All Souls' Day"),
        Holiday(date="11-03", name="Independence of Cuenca"),
        Holiday(date="12-25", name="Christmas Day"),
    ]


def _rule(
    procedure_type: ProcedureType, lo: int, hi: int, default: int, slots: list[int]
) -> DurationRule:
    return DurationRule(
        procedure_type=procedure_type.value,
        min_minutes=lo,
        max_minutes=hi,
        default_minutes=default,
        recommended_slots=frozenset(slots),
    )


def _default_duration_rules() -> dict[str, DurationRule]:
    quarter_hours_to_90 = [15, 30, 45, 60, 75, 90]
    quarter_hours_to_120 = [15, 30, 45, 60, 75, 90, 105, 120]
    rules = [
        _rule(ProcedureType.CONSULTATION, 30, 60, 45, [15, 30, 45, 60]),
        _rule(ProcedureType.CLEANING, 45, 90, 60, quarter_hours_to_90),
        _rule(ProcedureType.FILLING, 30, 120, 60, quarter_hours_to_120),
        _rule(ProcedureType.EXTRACTION, 30, 90, 45, quarter_hours_to_90),
        _rule(ProcedureType.ROOT_CANAL, 60, 180, 90, list(range(30, 181, 15))),
        _rule(ProcedureType.ORTHODONTICS, 30, 120, 60, quarter_hours_to_120),
        _rule(ProcedureType.SURGERY, 60, 240, 120, list(range(30, 241, 30))),
        _rule(ProcedureType.EMERGENCY, 15, 120, 30, quarter_hours_to_120),
        _rule(ProcedureType.FOLLOW_UP, 15, 45, 30, [15, 30, 45]),
    ]
    return {r.procedure_type: r for r in rules}


class EngineConfig(_StrictBaseModel):
    """
    @brief
    Immutable rule tables and thresholds for the validation engine.

    @details
    Built-in defaults reproduce the clinic network's standard tables.
    Every component receives this object at construction, so tests can
    swap any table without touching module state.
    """

    model_config = {**_StrictBaseModel.model_config, "frozen": True}

    default_working_hours: list[WorkingHours] = Field(default_factory=_default_working_hours)
    national_holidays: list[Holiday] = Field(default_factory=_default_national_holidays)
    duration_rules: dict[str, DurationRule] = Field(default_factory=_default_duration_rules)
    short_notice_hours: float = Field(
        2.0, ge=0.0, description="Warn when the appointment starts within this many hours"
    )
    inactive_statuses: list[AppointmentStatus] = Field(
        default_factory=lambda: [AppointmentStatus.CANCELLED, AppointmentStatus.NO_SHOW],
        description="Bookings in these states never block a slot",
    )
    timezone: str = Field("UTC", description="IANA timezone of clinic wall-clock times")

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"unknown IANA timezone: {v!r}") from e
        return v


__all__ = [
    "AppointmentRequest",
    "AppointmentStatus",
    "Conflict",
    "ConflictKind",
    "DurationRule",
    "EngineConfig",
    "ExistingAppointment",
    "Holiday",
    "IssueKind",
    "PractitionerDayOverride",
    "ProcedureType",
    "ValidationIssue",
    "ValidationResult",
    "WorkingHours",
]
