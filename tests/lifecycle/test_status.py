import pytest

from clinicsched.errors import StatusTransitionError
from clinicsched.lifecycle.status import RELEASING_STATUSES, transition
from clinicsched.schemas.models import AppointmentStatus, EngineConfig


def test_forward_progression():
    steps = ["scheduled", "confirmed", "in_progress", "completed"]
    for current, new in zip(steps, steps[1:]):
        change = transition(current, new)
        assert change.status == new
        assert change.releases_slot is False


def test_flat_status_allows_any_change():
    change = transition(AppointmentStatus.COMPLETED, AppointmentStatus.SCHEDULED)
    assert change.previous == "completed"
    assert change.status == "scheduled"


def test_cancel_requires_reason():
    with pytest.raises(StatusTransitionError) as e:
        transition("scheduled", "cancelled")
    assert "reason" in str(e.value)

    with pytest.raises(StatusTransitionError):
        transition("confirmed", "cancelled", cancellation_reason="   ")


def test_cancel_with_reason_releases_slot():
    change = transition("confirmed", "cancelled", cancellation_reason="  patient ill ")

    assert change.cancellation_reason == "patient ill"
    assert change.releases_slot is True


def test_no_show_releases_slot_without_reason():
    change = transition("confirmed", "no_show")
    assert change.releases_slot is True
    assert change.cancellation_reason is None


def test_unknown_status_is_rejected():
    with pytest.raises(StatusTransitionError) as e:
        transition("scheduled", "postponed")
    assert "Unknown appointment status" in str(e.value)


def test_releasing_statuses_match_engine_defaults():
    assert RELEASING_STATUSES == set(EngineConfig().inactive_statuses)
