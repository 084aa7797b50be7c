# src/clinicsched/dataloader/types.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from clinicsched.schemas.models import ExistingAppointment


@dataclass(slots=True)
class LoadResult:
    """
    Structured result of a data loading step.

    Fields:
        success: True if no row-level issues were found, False otherwise.
        appointments: Parsed bookings (empty if success=False).
        errors: Issue dicts with per-row context.
                Each item contains at least: kind, line_no, message, appointment_id (may be None).
        total_rows: Number of data rows observed in the CSV (excludes header).
        kept_rows: Number of successfully parsed bookings.
        clinic_by_id: Owning clinic of each kept booking, keyed by appointment id.
    """

    success: bool
    appointments: list[ExistingAppointment] = field(default_factory=list)
    errors: list[dict[str, Any]] = field(default_factory=list)
    total_rows: int = 0
    kept_rows: int = 0
    clinic_by_id: dict[str, str] = field(default_factory=dict)
