import sys
from datetime import date, datetime, timezone
from pathlib import Path

import pytest

# (1) Add repository root to sys.path to enable absolute imports
#     The root directory contains scripts/ and src/.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from clinicsched.schemas.models import AppointmentRequest, ExistingAppointment  # noqa: E402
from clinicsched.stores.memory import (  # noqa: E402
    InMemoryAppointmentStore,
    InMemoryClinicScheduleStore,
    InMemoryPractitionerDirectory,
)
from clinicsched.validator.pipeline import ValidationPipeline  # noqa: E402

# Wednesday 2024-01-10 09:00 UTC: every later 2024 date is in the future
FIXED_NOW = datetime(2024, 1, 10, 9, 0, tzinfo=timezone.utc)


@pytest.fixture()
def clock():
    return lambda: FIXED_NOW


@pytest.fixture()
def schedule_store() -> InMemoryClinicScheduleStore:
    return InMemoryClinicScheduleStore()


@pytest.fixture()
def directory() -> InMemoryPractitionerDirectory:
    return InMemoryPractitionerDirectory(
        {
            "dr-1": {"clinic-1": True},
            "dr-2": {"clinic-1": True},
            "dr-retired": {"clinic-1": False},
        }
    )


@pytest.fixture()
def appointment_store() -> InMemoryAppointmentStore:
    return InMemoryAppointmentStore()


@pytest.fixture()
def pipeline(schedule_store, directory, appointment_store, clock) -> ValidationPipeline:
    return ValidationPipeline(schedule_store, directory, appointment_store, clock=clock)


@pytest.fixture()
def make_request():
    """Factory for a valid cleaning appointment on Tuesday 2024-01-16, overridable per field."""

    def _make(**overrides) -> AppointmentRequest:
        fields = {
            "patient_id": "pat-1",
            "practitioner_id": "dr-1",
            "clinic_id": "clinic-1",
            "date": date(2024, 1, 16),
            "start_time": "10:00",
            "end_time": "10:45",
            "duration_minutes": 45,
            "procedure_type": "cleaning",
        }
        fields.update(overrides)
        return AppointmentRequest(**fields)

    return _make


@pytest.fixture()
def make_booking():
    """Factory for an existing booking on 2024-01-16."""

    def _make(appt_id: str, start: str, end: str, **overrides) -> ExistingAppointment:
        fields = {
            "id": appt_id,
            "practitioner_id": "dr-1",
            "patient_id": "pat-9",
            "date": date(2024, 1, 16),
            "start_time": start,
            "end_time": end,
            "status": "scheduled",
        }
        fields.update(overrides)
        return ExistingAppointment(**fields)

    return _make
