# src/clinicsched/validator/report.py
from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from clinicsched.errors import DataError
from clinicsched.schemas.models import AppointmentRequest, ValidationResult

logger = logging.getLogger(__name__)


def build_report(result: ValidationResult, candidate: AppointmentRequest) -> dict[str, Any]:
    """
    @brief
    Assemble a validation verdict into a JSON-serializable dictionary.

    @details
    Carries the candidate, the verdict, and both issue lists with their
    stable kinds, so callers can map conflicts and other errors to their
    own response codes.
    """
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(timespec="seconds"),
        "valid": result.is_valid,
        "request": candidate.model_dump(mode="json"),
        "errors": [e.model_dump(mode="json") for e in result.errors],
        "warnings": [w.model_dump(mode="json") for w in result.warnings],
    }


def save_report(
    report: dict[str, Any],
    out_dir: Path,
    filename: str = "validation_report.json",
) -> Path:
    """
    @brief
    Write the report atomically to out_dir/filename.

    @raises
        DataError
            If the report is not serializable or the write fails.
    """
    try:
        payload = json.dumps(report, ensure_ascii=False, indent=2)
    except (TypeError, ValueError) as e:
        raise DataError(
            f"report not JSON-serializable: {e}",
            source="report.save_report",
            suggested_action="Build the report with build_report().",
        ) from e

    target = Path(out_dir) / filename
    _atomic_write_text(target, payload)
    logger.info("Validation report saved: %s", target)
    return target


def _atomic_write_text(path: Path, text: str, encoding: str = "utf-8") -> None:
    """Write through a temporary sibling file and swap it into place."""
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_path = tempfile.mkstemp(prefix=path.name + ".", dir=str(path.parent))
    try:
        with open(fd, "w", encoding=encoding, newline="") as f:
            f.write(text)
        os.replace(tmp_path, path)
    except OSError as e:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise DataError(
            f"atomic write failed for {path}: {e}",
            source="report._atomic_write_text",
            suggested_action="Check output directory permissions and disk space.",
        ) from e


__all__ = ["build_report", "save_report"]
