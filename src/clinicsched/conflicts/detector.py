# src/clinicsched/conflicts/detector.py
from __future__ import annotations

import logging
from collections.abc import Iterable

from clinicsched.errors import InvalidTimeFormat, OverlapRejectedError
from clinicsched.schemas.models import (
    AppointmentRequest,
    Conflict,
    ConflictKind,
    EngineConfig,
    ExistingAppointment,
    IssueKind,
    ValidationResult,
)
from clinicsched.stores.protocols import AppointmentStore
from clinicsched.timecalc.time_arithmetic import overlaps, to_minutes

logger = logging.getLogger(__name__)


class ConflictDetector:
    """
    @brief
    Overlap search between a candidate and existing bookings.

    @details
    Intervals are half-open [start, end): an appointment ending at 10:00
    does not collide with one starting at 10:00. Only bookings on the
    candidate's date whose status is not in cfg.inactive_statuses take part.
    A single booking can yield two conflicts when it shares both the
    practitioner and the patient with the candidate.

    The detector only answers at read time. Concurrent callers may both see
    a free slot; the storage write remains the final arbiter, and its
    rejection is mapped back through rejection_result().
    """

    def __init__(self, store: AppointmentStore, cfg: EngineConfig) -> None:
        self.store = store
        self.cfg = cfg
        self._inactive = {getattr(s, "value", s) for s in cfg.inactive_statuses}

    # ---------- Pure scan ----------
    def find_conflicts(
        self, candidate: AppointmentRequest, existing: Iterable[ExistingAppointment]
    ) -> list[Conflict]:
        """
        @brief
        Return one Conflict per (booking, shared party) overlap.

        @params
            candidate : AppointmentRequest
                Candidate with well-formed HH:MM times.
            existing : Iterable[ExistingAppointment]
                Bookings to scan; other dates, inactive statuses and the
                candidate's own appointment_id are skipped.

        @raises
            InvalidTimeFormat
                If the candidate's times are malformed.
        """
        c_start = to_minutes(candidate.start_time)
        c_end = to_minutes(candidate.end_time)
        conflicts: list[Conflict] = []

        for appt in existing:
            if appt.date != candidate.date:
                continue
            if getattr(appt.status, "value", appt.status) in self._inactive:
                continue
            if candidate.appointment_id is not None and appt.id == candidate.appointment_id:
                continue

            try:
                a_start, a_end = to_minutes(appt.start_time), to_minutes(appt.end_time)
            except InvalidTimeFormat as e:
                logger.warning("Skipping booking %s with malformed times: %s", appt.id, e)
                continue

            if not overlaps(c_start, c_end, a_start, a_end):
                continue

            if appt.practitioner_id == candidate.practitioner_id:
                conflicts.append(
                    Conflict(
                        kind=ConflictKind.PRACTITIONER_BUSY,
                        conflicting_appointment_id=appt.id,
                        start_time=appt.start_time,
                        end_time=appt.end_time,
                    )
                )
            if appt.patient_id == candidate.patient_id:
                conflicts.append(
                    Conflict(
                        kind=ConflictKind.PATIENT_BUSY,
                        conflicting_appointment_id=appt.id,
                        start_time=appt.start_time,
                        end_time=appt.end_time,
                    )
                )
        return conflicts

    # ---------- Pipeline check ----------
    def check(self, candidate: AppointmentRequest) -> ValidationResult:
        result = ValidationResult()
        try:
            existing = self.store.existing_on_date(candidate.clinic_id, candidate.date)
        except Exception as e:
            logger.error(
                "Appointment lookup failed for clinic %s on %s: %s",
                candidate.clinic_id,
                candidate.date,
                e,
            )
            result.add_error(
                IssueKind.APPOINTMENT_STORE_UNAVAILABLE,
                "Existing appointments could not be read, conflicts cannot be ruled out",
                clinic_id=candidate.clinic_id,
                date=candidate.date.isoformat(),
            )
            return result

        for conflict in self.find_conflicts(candidate, existing):
            _add_conflict(result, conflict)
        return result

    # ---------- Storage rejection ----------
    @staticmethod
    def rejection_result(err: OverlapRejectedError) -> ValidationResult:
        """
        @brief
        Translate a storage-level overlap rejection into a scheduling conflict.

        @details
        The exclusion constraint is scoped to the practitioner, so the result
        carries a single practitioner_busy conflict. It is terminal: the caller
        must submit a new candidate.
        """
        result = ValidationResult()
        result.add_error(
            IssueKind.SCHEDULING_CONFLICT,
            "The practitioner already has an appointment in this time range",
            conflict_kind=ConflictKind.PRACTITIONER_BUSY.value,
            appointment_id=err.conflicting_appointment_id,
        )
        return result


def _add_conflict(result: ValidationResult, conflict: Conflict) -> None:
    who = "practitioner" if conflict.kind == ConflictKind.PRACTITIONER_BUSY else "patient"
    result.add_error(
        IssueKind.SCHEDULING_CONFLICT,
        f"The {who} already has an appointment from {conflict.start_time} "
        f"to {conflict.end_time}",
        conflict_kind=getattr(conflict.kind, "value", conflict.kind),
        appointment_id=conflict.conflicting_appointment_id,
    )


__all__ = ["ConflictDetector"]
