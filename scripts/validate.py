# scripts/validate.py
from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from clinicsched.dataloader.appointments_loader import AppointmentsLoader
from clinicsched.dataloader.config_loader import ConfigLoader
from clinicsched.dataloader.snapshot_loader import SnapshotLoader
from clinicsched.errors import DataError, SchedulingError
from clinicsched.schemas.models import AppointmentRequest, EngineConfig
from clinicsched.stores.memory import InMemoryAppointmentStore
from clinicsched.validator.pipeline import ValidationPipeline
from clinicsched.validator.report import build_report, save_report


def _setup_logging() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    @brief
    Parses command-line arguments for a single validation run.

    @details
    Only --request is mandatory. Without --config the built-in tables apply;
    without --snapshot no clinic customizations or practitioners are known
    (so the practitioner check fails closed); without --appointments the
    conflict scan sees an empty day.
    """
    parser = argparse.ArgumentParser(
        prog="clinicsched-validate",
        description="Validate one appointment request against clinic rules and bookings",
    )
    parser.add_argument("--request", type=str, required=True, help="Path to request JSON")
    parser.add_argument("--config", type=str, default=None, help="Path to engine config YAML")
    parser.add_argument(
        "--snapshot", type=str, default=None, help="Path to clinic/practitioner snapshot YAML"
    )
    parser.add_argument(
        "--appointments", type=str, default=None, help="Path to existing appointments CSV"
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Directory for validation_report.json (default: print only)",
    )
    return parser.parse_args(argv)


def _load_request(path: Path) -> AppointmentRequest:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
        return AppointmentRequest(**payload)
    except (OSError, json.JSONDecodeError, TypeError) as e:
        raise DataError(
            message=f"Unable to read request: {e}",
            source="scripts.validate",
            suggested_action="Provide a JSON object with the appointment request fields.",
        ) from e
    except ValidationError as e:
        raise DataError(
            message=f"Invalid request structure: {e}",
            source="scripts.validate",
            suggested_action="Check field names and value types in the request JSON.",
        ) from e


def run_validation(
    request_path: Path,
    config_path: Path | None = None,
    snapshot_path: Path | None = None,
    appointments_path: Path | None = None,
    output_dir: Path | None = None,
) -> dict[str, Any]:
    """
    @brief
    Load inputs, validate the request and return the report dictionary.

    @raises
        SchedulingError
            On configuration or data issues in any input file.
    """
    # (1) Load configuration and collaborator snapshots
    cfg = ConfigLoader().load(config_path) if config_path else EngineConfig()
    logging.info("Engine timezone: %s", cfg.timezone)

    snapshot = SnapshotLoader().load(snapshot_path) if snapshot_path else SnapshotLoader.empty()
    bookings = (
        AppointmentsLoader().load_store(appointments_path)
        if appointments_path
        else InMemoryAppointmentStore()
    )

    # (2) Validate
    request = _load_request(request_path)
    pipeline = ValidationPipeline(snapshot.schedule_store, snapshot.directory, bookings, cfg)
    result = pipeline.validate(request)

    # (3) Report
    report = build_report(result, request)
    if output_dir is not None:
        report["report_path"] = save_report(report, output_dir).as_posix()
    return report


def main(argv: list[str] | None = None) -> int:
    """
    @brief
    CLI entry point.

    @details
    Exit codes:
      0 – request is schedulable
      1 – request rejected, or controlled failure (config/data)
      2 – unexpected crash
    """
    _setup_logging()
    args = _parse_args(argv)

    try:
        report = run_validation(
            Path(args.request),
            Path(args.config) if args.config else None,
            Path(args.snapshot) if args.snapshot else None,
            Path(args.appointments) if args.appointments else None,
            Path(args.output) if args.output else None,
        )
        print(json.dumps(report, indent=2, ensure_ascii=False))
        return 0 if report["valid"] else 1

    except SchedulingError as e:
        logging.error(str(e))
        return 1
    except Exception:
        logging.error("Unexpected error occurred:")
        traceback.print_exc()
        return 2


if __name__ == "__main__":
    sys.exit(main())
