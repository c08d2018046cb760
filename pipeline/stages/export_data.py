"""
Export stage: dump the `data` table to a delimited file.
"""
from __future__ import annotations

from pathlib import Path

from pipeline.common.base_pipeline import OutcomeCounters, RecordPipeline
from pipeline.common.delimited import DelimitedFileSink
from pipeline.common.normalizers import strip_spaces


class ExportPipeline(RecordPipeline):
    """Write every `data` row as one line of text."""

    STAGE_NAME = "export"
    SOURCE_QUERY = "SELECT id, name, company, amount, status, created_at, paid_at FROM data"
    TARGET_COLUMNS = ("id", "name", "company", "amount", "status", "created_at", "paid_at")

    def __init__(self, separator: str = ",", verbose: bool = False):
        super().__init__(verbose)
        self.separator = separator

    def transform(self, record: dict) -> dict:
        return {
            "id": strip_spaces(record["id"]),
            "name": strip_spaces(record["name"]),
            "company": strip_spaces(record["company"]),
            "amount": record["amount"],
            "status": strip_spaces(record["status"]),
            "created_at": record["created_at"],
            "paid_at": record["paid_at"],
        }

    def echo(self, record: dict) -> str:
        return self.separator.join(str(record.get(column)) for column in self.TARGET_COLUMNS)


def run_export(db, path: Path | str, separator: str = ",", verbose: bool = False) -> OutcomeCounters:
    """
    Export the `data` table to `path`.

    Raises:
        SinkOpenError: If the file cannot be created
        SourceOpenError: If the table cannot be read
    """
    pipeline = ExportPipeline(separator=separator, verbose=verbose)
    with DelimitedFileSink(path, ExportPipeline.TARGET_COLUMNS, separator=separator) as sink:
        return pipeline.run(db.iter_rows(ExportPipeline.SOURCE_QUERY), sink)
