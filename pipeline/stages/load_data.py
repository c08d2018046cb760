"""
Load stage: read a delimited file into the `data` staging table.

Each line holds, in order: id, name, company, amount, status, created_at,
paid_at. Amounts and dates are parsed leniently; see pipeline.common.dates.
"""
from __future__ import annotations

from pathlib import Path

from database.inserters import TableInserter
from pipeline.common.base_pipeline import OutcomeCounters, RecordPipeline
from pipeline.common.dates import DATE_FORMAT, parse_amount, parse_date
from pipeline.common.delimited import DelimitedFileSource
from pipeline.errors import RecordFormatError


class LoadPipeline(RecordPipeline):
    """Turn split lines into `data` rows."""

    STAGE_NAME = "load"
    TARGET_TABLE = "data"
    TARGET_COLUMNS = ("id", "name", "company", "amount", "status", "created_at", "paid_at")

    def __init__(self, separator: str = ",", date_format: str = DATE_FORMAT, verbose: bool = False):
        super().__init__(verbose)
        self.separator = separator
        self.date_format = date_format

    def transform(self, fields: list[str]) -> dict:
        expected = len(self.TARGET_COLUMNS)
        if len(fields) < expected:
            raise RecordFormatError(f"expected {expected} fields, got {len(fields)}")

        return {
            "id": fields[0],
            "name": fields[1],
            "company": fields[2],
            "amount": parse_amount(fields[3]),
            "status": fields[4],
            "created_at": parse_date(fields[5], self.date_format),
            "paid_at": parse_date(fields[6], self.date_format),
        }

    def echo(self, fields: list[str]) -> str:
        return self.separator.join(fields)


def run_load(
    db,
    path: Path | str,
    separator: str = ",",
    header: bool = False,
    date_format: str = DATE_FORMAT,
    verbose: bool = False,
) -> OutcomeCounters:
    """
    Load `path` into the `data` table.

    Args:
        db: DatabaseManager for the target database
        path: Delimited file to read
        separator: Single field separator character
        header: Skip the first line of the file
        date_format: strptime format of the two date columns

    Raises:
        SourceOpenError: If the file cannot be opened or read
    """
    pipeline = LoadPipeline(separator=separator, date_format=date_format, verbose=verbose)
    sink = TableInserter(db, LoadPipeline.TARGET_TABLE, LoadPipeline.TARGET_COLUMNS)
    with DelimitedFileSource(path, separator=separator, header=header) as source:
        return pipeline.run(source, sink)
