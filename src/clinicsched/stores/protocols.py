# src/clinicsched/stores/protocols.py
"""
@brief
Collaborator interfaces consumed by the validation engine.

@details
Each protocol is a read-only view of a persistence tier. Implementations
may raise any exception on infrastructure failure; the engine applies a
per-collaborator policy (fail-open for holidays, fail-closed for the
practitioner directory and the appointment store, default-schedule
fallback for working hours).
"""

from __future__ import annotations

from datetime import date
from typing import Protocol, runtime_checkable

from clinicsched.schemas.models import (
    ExistingAppointment,
    Holiday,
    PractitionerDayOverride,
    WorkingHours,
)


@runtime_checkable
class ClinicScheduleStore(Protocol):
    def working_hours(self, clinic_id: str) -> list[WorkingHours]:
        """Clinic-specific weekly schedule; empty when the clinic has none configured."""
        ...

    def holidays(self, clinic_id: str) -> list[Holiday]:
        """Clinic-specific holidays (added on top of the national set)."""
        ...


@runtime_checkable
class PractitionerDirectory(Protocol):
    def is_active_in_clinic(self, practitioner_id: str, clinic_id: str) -> bool | None:
        """
        Membership lookup.

        Returns None when the practitioner does not belong to the clinic,
        otherwise whether the practitioner is active.
        """
        ...

    def day_override(self, practitioner_id: str, day: date) -> PractitionerDayOverride | None:
        """Day-specific availability override, None when the regular schedule applies."""
        ...


@runtime_checkable
class AppointmentStore(Protocol):
    def existing_on_date(self, clinic_id: str, day: date) -> list[ExistingAppointment]:
        """All bookings of the clinic on that calendar date, any status."""
        ...


__all__ = ["ClinicScheduleStore", "PractitionerDirectory", "AppointmentStore"]
