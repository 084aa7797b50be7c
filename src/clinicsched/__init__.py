"""Appointment scheduling validation and conflict-detection engine."""

from clinicsched.schemas.models import (
    AppointmentRequest,
    EngineConfig,
    ExistingAppointment,
    ValidationResult,
)
from clinicsched.validator.pipeline import ValidationPipeline, validate_appointment

__version__ = "0.1.0"

__all__ = [
    "AppointmentRequest",
    "EngineConfig",
    "ExistingAppointment",
    "ValidationPipeline",
    "ValidationResult",
    "validate_appointment",
]
