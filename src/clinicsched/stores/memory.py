# src/clinicsched/stores/memory.py
from __future__ import annotations

from collections import defaultdict
from datetime import date

from clinicsched.schemas.models import (
    ExistingAppointment,
    Holiday,
    PractitionerDayOverride,
    WorkingHours,
)


class InMemoryClinicScheduleStore:
    """Dictionary-backed ClinicScheduleStore keyed by clinic_id."""

    def __init__(
        self,
        working_hours: dict[str, list[WorkingHours]] | None = None,
        holidays: dict[str, list[Holiday]] | None = None,
    ) -> None:
        self._working_hours = dict(working_hours or {})
        self._holidays = dict(holidays or {})

    def working_hours(self, clinic_id: str) -> list[WorkingHours]:
        return list(self._working_hours.get(clinic_id, []))

    def holidays(self, clinic_id: str) -> list[Holiday]:
        return list(self._holidays.get(clinic_id, []))


class InMemoryPractitionerDirectory:
    """
    Practitioner memberships and day overrides.

    memberships maps practitioner_id → {clinic_id: is_active};
    overrides maps (practitioner_id, date) → PractitionerDayOverride.
    """

    def __init__(
        self,
        memberships: dict[str, dict[str, bool]] | None = None,
        overrides: dict[tuple[str, date], PractitionerDayOverride] | None = None,
    ) -> None:
        self._memberships = {k: dict(v) for k, v in (memberships or {}).items()}
        self._overrides = dict(overrides or {})

    def is_active_in_clinic(self, practitioner_id: str, clinic_id: str) -> bool | None:
        return self._memberships.get(practitioner_id, {}).get(clinic_id)

    def day_override(self, practitioner_id: str, day: date) -> PractitionerDayOverride | None:
        return self._overrides.get((practitioner_id, day))


class InMemoryAppointmentStore:
    """
    Bookings grouped by (clinic_id, date).

    add() is the only mutator; the engine itself never calls it.
    """

    def __init__(self) -> None:
        self._by_day: dict[tuple[str, date], list[ExistingAppointment]] = defaultdict(list)

    def add(self, clinic_id: str, appointment: ExistingAppointment) -> None:
        self._by_day[(clinic_id, appointment.date)].append(appointment)

    def existing_on_date(self, clinic_id: str, day: date) -> list[ExistingAppointment]:
        return list(self._by_day.get((clinic_id, day), []))


__all__ = [
    "InMemoryClinicScheduleStore",
    "InMemoryPractitionerDirectory",
    "InMemoryAppointmentStore",
]
