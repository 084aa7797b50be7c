# src/clinicsched/dataloader/config_loader.py
from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from clinicsched.dataloader.snapshot_loader import normalize_row
from clinicsched.errors import ConfigError
from clinicsched.schemas.models import EngineConfig


class ConfigLoader:
    """
    @brief
    Loader responsible for reading and validating the engine configuration.

    @details
    Reads YAML from disk, validates it against the pydantic `EngineConfig`
    schema and raises structured `ConfigError` instances for all failure
    modes. Omitted tables keep their built-in defaults, so a file may
    override only, say, `duration_rules` or `timezone`.
    """

    def load(self, path: Path) -> EngineConfig:
        """
        @brief
        Load and validate configuration from a YAML file.

        @raises
            ConfigError
                Raised if the file is missing, malformed, or fails schema validation.
        """
        # (1) Read and parse YAML configuration file
        data = self._read_yaml(path)

        # (2) Validate mapping against pydantic schema
        return self._validate(data)

    def _read_yaml(self, path: Path) -> dict[str, Any]:
        # (1) Validate path type and existence
        if not isinstance(path, Path):
            raise ConfigError(
                message=f"Invalid path type: expected pathlib.Path, got {type(path).__name__}",
                source="ConfigLoader._read_yaml",
                suggested_action="Pass a pathlib.Path object pointing to config.yaml.",
            )

        if not path.exists():
            raise ConfigError(
                message=f"Configuration file not found: {path}",
                source="ConfigLoader._read_yaml",
                suggested_action="Ensure config.yaml exists and the path is correct.",
            )

        # (2) Enforce correct file extension
        if path.suffix.lower() not in {".yaml", ".yml"}:
            raise ConfigError(
                message=f"Invalid configuration file extension: {path.suffix}",
                source="ConfigLoader._read_yaml",
                suggested_action="Use .yaml or .yml extension for configuration files.",
            )

        # (3) Read and parse YAML content
        try:
            with path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(
                message=f"YAML parsing failed: {e}",
                source="ConfigLoader._read_yaml",
                suggested_action="Fix YAML syntax/indentation.",
            ) from e
        except OSError as e:
            raise ConfigError(
                message=f"Unable to read configuration file: {e}",
                source="ConfigLoader._read_yaml",
                suggested_action="Check file permissions and path accessibility.",
            ) from e

        # (4) An empty file means "all defaults"
        if data is None:
            return {}

        if not isinstance(data, Mapping):
            raise ConfigError(
                message="Configuration root must be a mapping (key: value pairs).",
                source="ConfigLoader._read_yaml",
                suggested_action="Ensure top-level YAML structure uses key: value mappings.",
            )

        return dict(data)

    def _validate(self, data: dict[str, Any]) -> EngineConfig:
        for table in ("default_working_hours", "national_holidays"):
            rows = data.get(table)
            if isinstance(rows, list):
                data[table] = [normalize_row(r) if isinstance(r, Mapping) else r for r in rows]

        # Rule keys double as procedure_type when the entry omits it
        rules = data.get("duration_rules")
        if isinstance(rules, Mapping):
            data["duration_rules"] = {
                key: ({"procedure_type": key, **value} if isinstance(value, Mapping) else value)
                for key, value in rules.items()
            }

        try:
            return EngineConfig(**data)
        except ValidationError as e:
            raise ConfigError(
                message=f"Invalid configuration structure: {e}",
                source="ConfigLoader._validate",
                suggested_action=(
                    "Check field names, types, and bounds in config.yaml. "
                    "Remove unknown keys (extra fields are forbidden)."
                ),
            ) from e


__all__ = ["ConfigLoader"]
