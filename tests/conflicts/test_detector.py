from datetime import date

import pytest

from clinicsched.conflicts.detector import ConflictDetector
from clinicsched.errors import OverlapRejectedError
from clinicsched.schemas.models import EngineConfig
from clinicsched.stores.memory import InMemoryAppointmentStore


class _BrokenAppointmentStore:
    def existing_on_date(self, clinic_id, day):
        raise ConnectionError("bookings db down")


@pytest.fixture()
def detector(appointment_store) -> ConflictDetector:
    return ConflictDetector(appointment_store, EngineConfig())


def test_back_to_back_bookings_do_not_conflict(detector, make_request, make_booking):
    existing = [make_booking("A1", "09:00", "10:00"), make_booking("A2", "10:45", "11:30")]
    assert detector.find_conflicts(make_request(), existing) == []


def test_partial_overlap_names_the_booking(detector, make_request, make_booking):
    conflicts = detector.find_conflicts(make_request(), [make_booking("A1", "10:30", "11:00")])

    assert len(conflicts) == 1
    assert conflicts[0].kind == "practitioner_busy"
    assert conflicts[0].conflicting_appointment_id == "A1"


def test_patient_overlap_with_other_practitioner(detector, make_request, make_booking):
    booking = make_booking("A7", "09:30", "10:15", practitioner_id="dr-2", patient_id="pat-1")
    conflicts = detector.find_conflicts(make_request(), [booking])
    assert [c.kind for c in conflicts] == ["patient_busy"]


def test_shared_practitioner_and_patient_yield_two_conflicts(
    detector, make_request, make_booking
):
    booking = make_booking("A3", "10:00", "10:45", patient_id="pat-1")
    kinds = sorted(c.kind for c in detector.find_conflicts(make_request(), [booking]))
    assert kinds == ["patient_busy", "practitioner_busy"]


def test_unrelated_overlap_is_ignored(detector, make_request, make_booking):
    booking = make_booking("A4", "10:00", "11:00", practitioner_id="dr-2", patient_id="pat-2")
    assert detector.find_conflicts(make_request(), [booking]) == []


@pytest.mark.parametrize("status", ["cancelled", "no_show"])
def test_released_statuses_never_block(detector, make_request, make_booking, status):
    booking = make_booking("A5", "10:00", "11:00", status=status)
    assert detector.find_conflicts(make_request(), [booking]) == []


@pytest.mark.parametrize("status", ["scheduled", "confirmed", "in_progress", "completed"])
def test_other_statuses_block(detector, make_request, make_booking, status):
    booking = make_booking("A6", "10:00", "11:00", status=status)
    assert len(detector.find_conflicts(make_request(), [booking])) == 1


def test_update_excludes_its_own_booking(detector, make_request, make_booking):
    own = make_booking("A8", "10:00", "10:45")
    candidate = make_request(start_time="10:15", end_time="11:00", appointment_id="A8")
    assert detector.find_conflicts(candidate, [own]) == []


def test_bookings_on_other_dates_are_skipped(detector, make_request, make_booking):
    booking = make_booking("A9", "10:00", "11:00", date=date(2024, 1, 17))
    assert detector.find_conflicts(make_request(), [booking]) == []


def test_malformed_stored_booking_is_skipped(detector, make_request, make_booking):
    bad = make_booking("A10", "10:xx", "11:00")
    good = make_booking("A11", "10:30", "11:00")
    conflicts = detector.find_conflicts(make_request(), [bad, good])
    assert [c.conflicting_appointment_id for c in conflicts] == ["A11"]


def test_check_reads_store_by_clinic_and_date(make_request, make_booking):
    store = InMemoryAppointmentStore()
    store.add("clinic-1", make_booking("B1", "10:30", "11:30"))
    store.add("clinic-2", make_booking("B2", "10:30", "11:30"))
    detector = ConflictDetector(store, EngineConfig())

    result = detector.check(make_request())

    assert result.error_kinds == ["SchedulingConflict"]
    assert result.errors[0].entities == {
        "conflict_kind": "practitioner_busy",
        "appointment_id": "B1",
    }


def test_check_fails_closed_on_store_error(make_request):
    detector = ConflictDetector(_BrokenAppointmentStore(), EngineConfig())
    result = detector.check(make_request())
    assert result.error_kinds == ["AppointmentStoreUnavailable"]


def test_custom_inactive_statuses_are_honoured(make_request, make_booking):
    cfg = EngineConfig(inactive_statuses=["cancelled", "no_show", "completed"])
    detector = ConflictDetector(InMemoryAppointmentStore(), cfg)
    booking = make_booking("C1", "10:00", "11:00", status="completed")
    assert detector.find_conflicts(make_request(), [booking]) == []


def test_storage_rejection_becomes_practitioner_conflict():
    err = OverlapRejectedError("exclusion constraint violated", conflicting_appointment_id="A42")

    result = ConflictDetector.rejection_result(err)

    assert result.is_valid is False
    assert result.error_kinds == ["SchedulingConflict"]
    assert result.errors[0].entities["conflict_kind"] == "practitioner_busy"
    assert result.errors[0].entities["appointment_id"] == "A42"
