"""
Command line entry point for the migration stages.

Usage:
    data-migrate export --file out.csv
    data-migrate load --file in.csv --separator ";" --header
    data-migrate transform
    data-migrate disperse --identifier-policy exact
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from database.connection import DatabaseConfig, connect
from migration_config import AppConfig, ConfigError, load_config, validate_pipeline_options
from migration_config.loader import CONFIG_PATH, IDENTIFIER_POLICIES
from pipeline.common.base_pipeline import OutcomeCounters
from pipeline.common.resolver import IdentifierPolicy
from pipeline.errors import MigrationError
from pipeline.stages import run_disperse, run_export, run_load, run_transform

logger = logging.getLogger("pipeline")

STAGES = ("export", "load", "transform", "disperse")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="data-migrate",
        description="Move transaction records between flat files and PostgreSQL",
    )
    parser.add_argument("--config", type=Path, help="YAML configuration file")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-v", "--verbose", action="store_true", default=None, help="Echo every record")
    common.add_argument("--host", help="Database location")
    common.add_argument("--port", type=int, help="Database port")
    common.add_argument("--user", help="User name")
    common.add_argument("--password", help="User password")
    common.add_argument("--dbname", help="Database name")

    subparsers = parser.add_subparsers(dest="stage", required=True)

    export = subparsers.add_parser("export", parents=[common], help="Write the data table to a file")
    export.add_argument("-f", "--file", help="File to store the exported rows (default: file.csv)")
    export.add_argument("-s", "--separator", help="Value separator")

    load = subparsers.add_parser("load", parents=[common], help="Load a file into the data table")
    load.add_argument("-f", "--file", required=True, help="File to load")
    load.add_argument("-s", "--separator", help="Value separator")
    load.add_argument("--header", action="store_true", default=None, help="Skip the first line")

    subparsers.add_parser("transform", parents=[common], help="Normalize data into cargo")

    disperse = subparsers.add_parser("disperse", parents=[common], help="Move cargo into charges")
    disperse.add_argument(
        "--identifier-policy",
        choices=IDENTIFIER_POLICIES,
        help="How company ids are validated before falling back to the company name",
    )

    return parser


def resolve_config(args: argparse.Namespace) -> AppConfig:
    """Merge the configuration file with command line overrides."""
    if args.config is not None:
        config = load_config(args.config)
    elif CONFIG_PATH.exists():
        config = load_config(CONFIG_PATH)
    else:
        config = AppConfig()

    for key in ("host", "port", "user", "password", "dbname"):
        value = getattr(args, key, None)
        if value is not None:
            config.database[key] = value

    overrides = {
        "verbose": getattr(args, "verbose", None),
        "separator": getattr(args, "separator", None),
        "header": getattr(args, "header", None),
        "identifier_policy": getattr(args, "identifier_policy", None),
        "export_file": getattr(args, "file", None) if args.stage == "export" else None,
    }
    for key, value in overrides.items():
        if value is not None:
            config.pipeline[key] = value

    validate_pipeline_options(config.pipeline)
    return config


def run_stage(stage: str, db, config: AppConfig, file: str | None = None) -> OutcomeCounters:
    options = config.pipeline
    verbose = bool(options["verbose"])

    if stage == "export":
        return run_export(db, options["export_file"], separator=config.separator, verbose=verbose)
    if stage == "load":
        return run_load(
            db,
            file,
            separator=config.separator,
            header=bool(options["header"]),
            date_format=options["date_format"],
            verbose=verbose,
        )
    if stage == "transform":
        return run_transform(db, verbose=verbose)
    if stage == "disperse":
        policy = IdentifierPolicy(config.identifier_policy)
        return run_disperse(db, policy=policy, verbose=verbose)
    raise ValueError(f"Unknown stage: {stage}")


def format_summary(stage: str, counters: OutcomeCounters) -> str:
    summary = f"Lines:{counters.stored}\tErrors:{counters.errored}"
    if stage == "disperse":
        summary += f"\tIgnored:{counters.ignored}"
    return summary


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the migration command."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    try:
        config = resolve_config(args)
        db_config = DatabaseConfig.from_mapping(config.database)
    except (ConfigError, ValueError) as exc:
        logger.error("Configuration error: %s", exc)
        return 2

    try:
        with connect(db_config) as db:
            counters = run_stage(args.stage, db, config, file=getattr(args, "file", None))
    except MigrationError as exc:
        logger.error("%s failed: %s", args.stage, exc)
        return 1

    print(format_summary(args.stage, counters))
    return 0


if __name__ == "__main__":
    sys.exit(main())
