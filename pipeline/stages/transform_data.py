"""
Transform stage: normalize staged `data` rows into the canonical `cargo` table.
"""
from __future__ import annotations

from database.inserters import TableInserter
from pipeline.common.base_pipeline import OutcomeCounters, RecordPipeline
from pipeline.common.dates import at_midnight
from pipeline.common.normalizers import FieldNormalizer


class TransformPipeline(RecordPipeline):
    """Clean text fields, crop identifiers and promote dates to timestamps."""

    STAGE_NAME = "transform"
    SOURCE_QUERY = "SELECT id, name, company, amount, status, created_at, paid_at FROM data"
    TARGET_TABLE = "cargo"
    TARGET_COLUMNS = ("id", "company_name", "company_id", "amount", "status", "created_at", "updated_at")

    def transform(self, record: dict) -> dict:
        return {
            "id": FieldNormalizer.clean_identifier(record["id"]),
            "company_name": FieldNormalizer.strip_spaces(record["name"]),
            "company_id": FieldNormalizer.clean_identifier(record["company"]),
            "amount": record["amount"],
            "status": FieldNormalizer.strip_spaces(record["status"]),
            "created_at": at_midnight(record["created_at"]),
            "updated_at": at_midnight(record["paid_at"]),
        }

    def echo(self, record: dict) -> str:
        return f"{record.get('id')} {record.get('name')}"


def run_transform(db, verbose: bool = False) -> OutcomeCounters:
    """Copy every `data` row into `cargo`."""
    pipeline = TransformPipeline(verbose=verbose)
    sink = TableInserter(db, TransformPipeline.TARGET_TABLE, TransformPipeline.TARGET_COLUMNS)
    return pipeline.run(db.iter_rows(TransformPipeline.SOURCE_QUERY), sink)
