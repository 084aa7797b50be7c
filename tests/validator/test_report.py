import json
from pathlib import Path

import pytest

from clinicsched.errors import DataError
from clinicsched.schemas.models import IssueKind, ValidationResult
from clinicsched.validator.report import build_report, save_report


def _rejected() -> ValidationResult:
    result = ValidationResult()
    result.add_error(
        IssueKind.SCHEDULING_CONFLICT,
        "The practitioner already has an appointment from 10:00 to 11:00",
        conflict_kind="practitioner_busy",
        appointment_id="A1",
    )
    result.add_warning(IssueKind.SHORT_NOTICE, "Appointment scheduled with short notice")
    return result


def test_build_report_carries_kinds_and_request(make_request):
    report = build_report(_rejected(), make_request())

    assert report["valid"] is False
    assert report["request"]["date"] == "2024-01-16"
    assert report["request"]["procedure_type"] == "cleaning"
    assert report["errors"][0]["kind"] == "SchedulingConflict"
    assert report["errors"][0]["entities"]["conflict_kind"] == "practitioner_busy"
    assert report["warnings"][0]["kind"] == "ShortNotice"
    assert "timestamp" in report


def test_save_report_writes_json(tmp_path: Path, make_request):
    """
    @brief
    The report is written under the output directory and parses back.
    """
    # --- Arrange ---
    report = build_report(_rejected(), make_request())
    out_dir = tmp_path / "reports" / "nested"

    # --- Act ---
    path = save_report(report, out_dir)

    # --- Assert ---
    assert path == out_dir / "validation_report.json"
    loaded = json.loads(path.read_text(encoding="utf-8"))
    assert loaded["valid"] is False
    assert loaded["errors"][0]["entities"]["appointment_id"] == "A1"
    # No temporary siblings left behind
    assert [p.name for p in out_dir.iterdir()] == ["validation_report.json"]


def test_save_report_rejects_unserializable(tmp_path: Path):
    with pytest.raises(DataError) as e:
        save_report({"valid": True, "bad": object()}, tmp_path)
    assert "JSON-serializable" in str(e.value)
