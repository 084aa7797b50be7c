# src/clinicsched/dataloader/appointments_loader.py
from __future__ import annotations

import csv
import logging
from collections.abc import Iterable
from datetime import date
from pathlib import Path
from typing import Any

from clinicsched.dataloader.types import LoadResult
from clinicsched.errors import DataError
from clinicsched.schemas.models import AppointmentStatus, ExistingAppointment
from clinicsched.stores.memory import InMemoryAppointmentStore
from clinicsched.timecalc.time_arithmetic import is_valid_time, to_minutes

logger = logging.getLogger(__name__)


class AppointmentsLoader:
    """
    CSV → LoadResult[ExistingAppointment].

    Rules:
      - Format: UTF-8 CSV, delimiter=','
      - Required columns: id, clinic_id, practitioner_id, patient_id, date, start_time, end_time
      - Optional column: status (defaults to "scheduled")
      - Row-level validation (collected, loading continues):
          * empty id                 → issue
          * date not YYYY-MM-DD      → issue
          * time not HH:MM           → issue
          * start_time >= end_time   → issue
          * unknown status           → issue
          * duplicate id             → issue (first valid row is kept)
      - When finished:
          * any issue → success=False, appointments=[]
          * otherwise → success=True, appointments sorted by (date, start_time)

    Fatal errors (DataError raised immediately):
      - missing / unreadable file
      - missing header row or required columns
    """

    REQUIRED_COLUMNS = (
        "id",
        "clinic_id",
        "practitioner_id",
        "patient_id",
        "date",
        "start_time",
        "end_time",
    )

    def load(self, path: Path) -> LoadResult:
        rows = self._read_csv(path)
        result = self._rows_to_result(rows)
        self._report_summary(path, result)
        return result

    def load_store(self, path: Path) -> InMemoryAppointmentStore:
        """Load bookings and wrap them in an InMemoryAppointmentStore."""
        result = self.load(path)
        if not result.success:
            raise DataError(
                message=f"Appointments CSV has {len(result.errors)} invalid row(s): {path}",
                source="AppointmentsLoader.load_store",
                suggested_action="Fix the reported rows and reload.",
            )
        store = InMemoryAppointmentStore()
        for appt in result.appointments:
            store.add(result.clinic_by_id[appt.id], appt)
        return store

    # ------------------------------
    # Internal helpers
    # ------------------------------
    def _read_csv(self, path: Path) -> list[dict[str, str]]:
        if not isinstance(path, Path):
            raise DataError(
                message=f"Invalid path type: expected pathlib.Path, got {type(path).__name__}",
                source="AppointmentsLoader._read_csv",
                suggested_action="Pass a pathlib.Path pointing to the appointments CSV",
            )
        if not path.exists():
            raise DataError(
                message=f"Input CSV not found: {path}",
                source="AppointmentsLoader._read_csv",
                suggested_action="Verify file path and ensure the CSV is present.",
            )

        try:
            with path.open("r", encoding="utf-8", newline="") as f:
                reader = csv.DictReader(f, delimiter=",")
                if reader.fieldnames is None:
                    raise DataError(
                        message="CSV has no header row.",
                        source="AppointmentsLoader._read_csv",
                        suggested_action="Ensure the first line contains column names.",
                    )
                header = tuple((name or "").strip() for name in reader.fieldnames)
                self._validate_header(header)
                return [self._strip_row(r) for r in reader]
        except OSError as e:
            raise DataError(
                message=f"Unable to read CSV: {e}",
                source="AppointmentsLoader._read_csv",
                suggested_action="Check file permissions and that the file is not locked.",
            ) from e

    def _validate_header(self, header: Iterable[str]) -> None:
        missing = [c for c in self.REQUIRED_COLUMNS if c not in header]
        if missing:
            raise DataError(
                message=f"Invalid CSV header: missing required column(s): {', '.join(missing)}",
                source="AppointmentsLoader._validate_header",
                suggested_action=f"Add required columns: {','.join(self.REQUIRED_COLUMNS)}",
            )

    def _strip_row(self, row: dict[str, str]) -> dict[str, str]:
        return {
            (k or "").strip(): (v.strip() if isinstance(v, str) else v) for k, v in row.items()
        }

    def _rows_to_result(self, rows: list[dict[str, str]]) -> LoadResult:
        issues: list[dict[str, Any]] = []
        appointments: list[ExistingAppointment] = []
        clinic_by_id: dict[str, str] = {}

        for idx, row in enumerate(rows, start=2):  # header = line 1
            appt_id = row.get("id") or ""
            start_raw = row.get("start_time") or ""
            end_raw = row.get("end_time") or ""
            status_raw = row.get("status") or AppointmentStatus.SCHEDULED.value

            if not appt_id:
                _issue(issues, idx, appt_id, "missing_id", "Missing appointment id")
                continue

            try:
                day = date.fromisoformat(row.get("date") or "")
            except ValueError as e:
                _issue(issues, idx, appt_id, "invalid_date", f"Invalid date format: {e}")
                continue

            if not (is_valid_time(start_raw) and is_valid_time(end_raw)):
                _issue(
                    issues,
                    idx,
                    appt_id,
                    "invalid_time",
                    f"Invalid time format: {start_raw!r}-{end_raw!r}",
                )
                continue

            if to_minutes(start_raw) >= to_minutes(end_raw):
                _issue(issues, idx, appt_id, "non_positive_duration", "start_time >= end_time")
                continue

            if status_raw not in {s.value for s in AppointmentStatus}:
                _issue(issues, idx, appt_id, "unknown_status", f"Unknown status: {status_raw!r}")
                continue

            if appt_id in clinic_by_id:
                _issue(
                    issues,
                    idx,
                    appt_id,
                    "duplicate_id",
                    "Duplicate appointment id (later occurrence skipped)",
                )
                continue

            appointments.append(
                ExistingAppointment(
                    id=appt_id,
                    practitioner_id=row.get("practitioner_id") or "",
                    patient_id=row.get("patient_id") or "",
                    date=day,
                    start_time=start_raw,
                    end_time=end_raw,
                    status=status_raw,
                )
            )
            clinic_by_id[appt_id] = row.get("clinic_id") or ""

        if issues:
            return LoadResult(success=False, errors=issues, total_rows=len(rows))

        appointments.sort(key=lambda a: (a.date, to_minutes(a.start_time)))
        return LoadResult(
            success=True,
            appointments=appointments,
            total_rows=len(rows),
            kept_rows=len(appointments),
            clinic_by_id=clinic_by_id,
        )

    def _report_summary(self, path: Path, result: LoadResult) -> None:
        if result.success:
            logger.info(
                "AppointmentsLoader OK: kept=%d/%d from %s",
                result.kept_rows,
                result.total_rows,
                path,
            )
        else:
            counts: dict[str, int] = {}
            for it in result.errors:
                counts[it["kind"]] = counts.get(it["kind"], 0) + 1
            summary = ", ".join(f"{k}={v}" for k, v in counts.items())
            logger.error(
                "AppointmentsLoader failed: %d issue(s) across %d row(s) in %s [%s]",
                len(result.errors),
                result.total_rows,
                path,
                summary or "no-summary",
            )


def _issue(
    issues: list[dict[str, Any]], line_no: int, appt_id: str, kind: str, message: str
) -> None:
    issues.append(
        {
            "kind": kind,
            "line_no": line_no,
            "appointment_id": appt_id or None,
            "message": message,
        }
    )


__all__ = ["AppointmentsLoader"]
