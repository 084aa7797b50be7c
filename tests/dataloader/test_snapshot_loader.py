# tests/dataloader/test_snapshot_loader.py

from datetime import date
from pathlib import Path

import pytest

from clinicsched.dataloader.snapshot_loader import SnapshotLoader, normalize_row
from clinicsched.errors import DataError

ROOT = Path(__file__).resolve().parents[2]


def test_normalize_row_restores_clock_times_and_dates():
    row = normalize_row({"weekday": 1, "start_time": 570, "end_time": "17:00"})
    assert row == {"weekday": 1, "start_time": "09:30", "end_time": "17:00"}

    assert normalize_row({"date": date(2024, 5, 24), "name": "x"})["date"] == "2024-05-24"
    # booleans are ints in Python; they must not be rewritten
    assert normalize_row({"start_time": True})["start_time"] is True


def test_example_snapshot_populates_both_stores():
    """
    @brief
    The shipped snapshot yields clinic schedules, holidays and practitioners.
    """
    # --- Act ---
    snapshot = SnapshotLoader().load(ROOT / "data" / "examples" / "snapshot.yaml")

    # --- Assert ---
    store, directory = snapshot.schedule_store, snapshot.directory
    assert store.working_hours("clinic-norte") == []
    assert len(store.working_hours("clinic-sur")) == 5
    assert {h.name for h in store.holidays("clinic-norte")} == {
        "Staff training day",
        "Clinic anniversary",
    }

    assert directory.is_active_in_clinic("dr-lopez", "clinic-sur") is True
    assert directory.is_active_in_clinic("dr-mora", "clinic-sur") is False
    assert directory.is_active_in_clinic("dr-vera", "clinic-sur") is None
    assert directory.day_override("dr-vera", date(2024, 1, 19)).available is False


def test_unquoted_override_date_is_accepted(tmp_path: Path):
    path = tmp_path / "snap.yaml"
    path.write_text(
        "practitioners:\n  dr-1:\n    clinics: {c1: true}\n    overrides: {2024-02-01: false}\n",
        encoding="utf-8",
    )

    directory = SnapshotLoader().load(path).directory

    assert directory.day_override("dr-1", date(2024, 2, 1)).available is False


def test_empty_snapshot_file_gives_empty_stores(tmp_path: Path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")

    snapshot = SnapshotLoader().load(path)

    assert snapshot.schedule_store.working_hours("any") == []
    assert snapshot.directory.is_active_in_clinic("dr-1", "c1") is None


def test_empty_factory():
    snapshot = SnapshotLoader.empty()
    assert snapshot.schedule_store.holidays("c1") == []


@pytest.mark.parametrize(
    "content",
    [
        "clinics:\n  c1:\n    working_hours:\n      - {weekday: 9, start_time: '08:00', "
        "end_time: '18:00'}\n",
        "clinics:\n  c1:\n    holidays:\n      - {date: 'Christmas', name: x}\n",
        "clinics:\n  c1:\n    holidays:\n      - {date: '03-15', name: x, is_recurring: false}\n",
        "practitioners:\n  dr-1:\n    overrides: {'tomorrow': false}\n",
        "clinics: [c1, c2]\n",
        "- just\n- a list\n",
    ],
)
def test_invalid_snapshot_content_raises_dataerror(tmp_path: Path, content: str):
    path = tmp_path / "bad.yaml"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(DataError):
        SnapshotLoader().load(path)


def test_missing_snapshot_file(tmp_path: Path):
    with pytest.raises(DataError) as e:
        SnapshotLoader().load(tmp_path / "none.yaml")
    assert "not found" in str(e.value)


@pytest.mark.parametrize("flag", ['"false"', '"no"', '"0"', "false"])
def test_quoted_false_membership_stays_inactive(tmp_path: Path, flag: str):
    """
    @brief
    Membership flags are parsed as booleans, not by Python truthiness.
    """
    # --- Arrange ---
    path = tmp_path / "snap.yaml"
    path.write_text(
        f"practitioners:\n  dr-1:\n    clinics: {{clinic-1: {flag}}}\n", encoding="utf-8"
    )

    # --- Act ---
    directory = SnapshotLoader().load(path).directory

    # --- Assert ---
    assert directory.is_active_in_clinic("dr-1", "clinic-1") is False


def test_non_boolean_membership_flag_raises_dataerror(tmp_path: Path):
    path = tmp_path / "snap.yaml"
    path.write_text(
        "practitioners:\n  dr-1:\n    clinics: {clinic-1: maybe}\n", encoding="utf-8"
    )

    with pytest.raises(DataError):
        SnapshotLoader().load(path)
