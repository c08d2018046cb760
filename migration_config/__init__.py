"""Utilities for loading and working with the migration configuration."""

from .loader import (
    ConfigError,
    AppConfig,
    load_config,
    validate_pipeline_options,
)

__all__ = [
    "ConfigError",
    "AppConfig",
    "load_config",
    "validate_pipeline_options",
]
