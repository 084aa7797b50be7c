# src/clinicsched/errors.py
from __future__ import annotations

from datetime import datetime, timezone


class SchedulingError(Exception):
    """Base class for all structured clinicsched exceptions."""

    def __init__(
        self, message: str, source: str | None = None, suggested_action: str | None = None
    ):
        super().__init__(message)
        self.timestamp = datetime.now(timezone.utc).isoformat()
        self.error_type = self.__class__.__name__
        self.source = source or "unknown"
        self.suggested_action = suggested_action

    def __str__(self) -> str:
        base = f"[{self.error_type}] {self.args[0]}"
        if self.source:
            base += f" (source={self.source})"
        if self.suggested_action:
            base += f" | action: {self.suggested_action}"
        return base


class ConfigError(SchedulingError):
    """Invalid or missing engine configuration (config.yaml)"""


class DataError(SchedulingError):
    """Malformed or inconsistent input data"""


class InvalidTimeFormat(SchedulingError):
    """Time string is not a valid 24-hour HH:MM value"""


class StatusTransitionError(SchedulingError):
    """Appointment status change rejected by the lifecycle guard"""


class OverlapRejectedError(SchedulingError):
    """Storage layer rejected an insert because it overlaps an existing booking"""

    def __init__(
        self,
        message: str,
        conflicting_appointment_id: str | None = None,
        source: str | None = None,
        suggested_action: str | None = None,
    ):
        super().__init__(message, source=source, suggested_action=suggested_action)
        self.conflicting_appointment_id = conflicting_appointment_id
