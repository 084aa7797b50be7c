from clinicsched.validator.pipeline import Check, ValidationPipeline, validate_appointment
from clinicsched.validator.report import build_report, save_report

__all__ = ["Check", "ValidationPipeline", "validate_appointment", "build_report", "save_report"]
