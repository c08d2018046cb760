from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

import yaml

CONFIG_PATH = Path(__file__).resolve().parents[1] / "config" / "migration.yaml"

IDENTIFIER_POLICIES = ("contains", "exact")

PIPELINE_DEFAULTS: Dict[str, Any] = {
    "separator": ",",
    "header": False,
    "verbose": False,
    "identifier_policy": "contains",
    "date_format": "%Y-%m-%d",
    "export_file": "file.csv",
}


class ConfigError(RuntimeError):
    """Raised when the migration configuration file is missing or invalid."""


@dataclass(slots=True)
class AppConfig:
    """Materialised configuration for the migration jobs."""

    database: Dict[str, Any] = field(default_factory=dict)
    pipeline: Dict[str, Any] = field(default_factory=lambda: dict(PIPELINE_DEFAULTS))

    @property
    def separator(self) -> str:
        return self.pipeline["separator"]

    @property
    def identifier_policy(self) -> str:
        return self.pipeline["identifier_policy"]


def load_config(config_path: Path | None = None) -> AppConfig:
    """
    Load the YAML configuration and return the resolved configuration.

    Both sections are optional; missing pipeline keys fall back to
    PIPELINE_DEFAULTS.
    """
    config_path = config_path or CONFIG_PATH
    data = _load_yaml(config_path)

    database = data.get("database") or {}
    if not isinstance(database, dict):
        raise ConfigError("The 'database' section must be a mapping.")

    pipeline = data.get("pipeline") or {}
    if not isinstance(pipeline, dict):
        raise ConfigError("The 'pipeline' section must be a mapping.")

    unknown = set(pipeline) - set(PIPELINE_DEFAULTS)
    if unknown:
        raise ConfigError(f"Unknown pipeline option(s): {', '.join(sorted(unknown))}")

    resolved = {**PIPELINE_DEFAULTS, **pipeline}
    validate_pipeline_options(resolved)

    return AppConfig(database=database, pipeline=resolved)


def validate_pipeline_options(options: Dict[str, Any]) -> None:
    """Check the option values the stages rely on."""
    separator = options.get("separator")
    if not isinstance(separator, str) or len(separator) != 1:
        raise ConfigError(f"Separator must be a single character, got {separator!r}")

    policy = options.get("identifier_policy")
    if policy not in IDENTIFIER_POLICIES:
        raise ConfigError(
            f"identifier_policy must be one of {', '.join(IDENTIFIER_POLICIES)}, got {policy!r}"
        )


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"Configuration file not found at {path}")
    with path.open("r", encoding="utf-8") as handle:
        try:
            data = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Could not parse {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError("The configuration file must define a mapping at the top level.")
    return data
