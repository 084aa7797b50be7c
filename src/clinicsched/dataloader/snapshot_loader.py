# src/clinicsched/dataloader/snapshot_loader.py
from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any

import yaml
from pydantic import TypeAdapter, ValidationError

from clinicsched.errors import DataError
from clinicsched.schemas.models import Holiday, PractitionerDayOverride, WorkingHours
from clinicsched.stores.memory import InMemoryClinicScheduleStore, InMemoryPractitionerDirectory

logger = logging.getLogger(__name__)

# clinic_id -> is_active, coerced like any pydantic bool field
_MEMBERSHIPS = TypeAdapter(dict[str, bool])


def normalize_row(row: Mapping[str, Any]) -> dict[str, Any]:
    """
    Undo YAML 1.1 scalar coercions on rule-table rows.

    Unquoted 10:30 is read as the base-60 integer 630 and an unquoted
    2024-12-25 as a date; both are turned back into their string form.
    """
    out = dict(row)
    for key in ("start_time", "end_time"):
        value = out.get(key)
        if isinstance(value, int) and not isinstance(value, bool):
            hours, minutes = divmod(value, 60)
            out[key] = f"{hours:02d}:{minutes:02d}"
    if isinstance(out.get("date"), date):
        out["date"] = out["date"].isoformat()
    return out


@dataclass(slots=True)
class StoreSnapshot:
    schedule_store: InMemoryClinicScheduleStore
    directory: InMemoryPractitionerDirectory


class SnapshotLoader:
    """
    @brief
    Reads a YAML snapshot of clinic schedules and practitioners into in-memory stores.

    @details
    Expected layout:

        clinics:
          <clinic_id>:
            working_hours: [{weekday, start_time, end_time, is_working_day}, ...]
            holidays: [{date, name, is_recurring}, ...]
        practitioners:
          <practitioner_id>:
            clinics: {<clinic_id>: <is_active>}
            overrides: {"YYYY-MM-DD": <available>}

    Both top-level sections are optional. A clinic without working_hours
    uses the engine's default schedule.
    """

    @staticmethod
    def empty() -> StoreSnapshot:
        return StoreSnapshot(
            schedule_store=InMemoryClinicScheduleStore(),
            directory=InMemoryPractitionerDirectory(),
        )

    def load(self, path: Path) -> StoreSnapshot:
        data = self._read_yaml(path)
        clinics = self._section(data, "clinics")
        practitioners = self._section(data, "practitioners")

        try:
            working_hours: dict[str, list[WorkingHours]] = {}
            holidays: dict[str, list[Holiday]] = {}
            for cid, body in clinics.items():
                body = body or {}
                working_hours[cid] = [
                    WorkingHours(**normalize_row(row)) for row in body.get("working_hours") or []
                ]
                holidays[cid] = [
                    Holiday(**normalize_row(row)) for row in body.get("holidays") or []
                ]
            memberships: dict[str, dict[str, bool]] = {}
            overrides: dict[tuple[str, date], PractitionerDayOverride] = {}
            for pid, body in practitioners.items():
                body = body or {}
                clinics_raw = {str(cid): flag for cid, flag in (body.get("clinics") or {}).items()}
                memberships[str(pid)] = _MEMBERSHIPS.validate_python(clinics_raw)
                for day, available in (body.get("overrides") or {}).items():
                    key = day if isinstance(day, date) else date.fromisoformat(str(day))
                    overrides[(str(pid), key)] = PractitionerDayOverride(available=available)
        except (ValidationError, ValueError, TypeError, AttributeError) as e:
            raise DataError(
                message=f"Invalid snapshot content in {path}: {e}",
                source="SnapshotLoader.load",
                suggested_action="Check field names and HH:MM / YYYY-MM-DD formats.",
            ) from e

        logger.info(
            "SnapshotLoader OK: %d clinic(s), %d practitioner(s) from %s",
            len(clinics),
            len(memberships),
            path,
        )
        return StoreSnapshot(
            schedule_store=InMemoryClinicScheduleStore(working_hours, holidays),
            directory=InMemoryPractitionerDirectory(memberships, overrides),
        )

    def _read_yaml(self, path: Path) -> dict[str, Any]:
        if not isinstance(path, Path) or not path.exists():
            raise DataError(
                message=f"Snapshot file not found: {path}",
                source="SnapshotLoader._read_yaml",
                suggested_action="Pass a pathlib.Path pointing to an existing YAML file.",
            )
        try:
            with path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (yaml.YAMLError, OSError) as e:
            raise DataError(
                message=f"Unable to read snapshot: {e}",
                source="SnapshotLoader._read_yaml",
            ) from e

        if data is None:
            return {}
        if not isinstance(data, Mapping):
            raise DataError(
                message="Snapshot root must be a mapping.",
                source="SnapshotLoader._read_yaml",
            )
        return dict(data)

    @staticmethod
    def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
        section = data.get(name) or {}
        if not isinstance(section, Mapping):
            raise DataError(
                message=f"Snapshot section '{name}' must be a mapping.",
                source="SnapshotLoader._section",
            )
        return {str(k): v for k, v in section.items()}


__all__ = ["SnapshotLoader", "StoreSnapshot", "normalize_row"]
