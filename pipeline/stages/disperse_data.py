"""
Disperse stage: move canonical `cargo` rows into `charges`, resolving the
company reference of each transaction.
"""
from __future__ import annotations

from database.inserters import TableInserter
from pipeline.common.base_pipeline import OutcomeCounters, RecordPipeline
from pipeline.common.resolver import IdentifierPolicy, ReferenceResolver


class DispersePipeline(RecordPipeline):
    """
    Store transactions whose company can be identified.

    A transaction keeps its own company id when it passes the resolver's
    validity check; otherwise the company name is looked up. Transactions
    with neither are ignored.
    """

    STAGE_NAME = "disperse"
    SOURCE_QUERY = (
        "SELECT id, company_name, company_id, amount, status, created_at, updated_at FROM cargo"
    )
    TARGET_TABLE = "charges"
    TARGET_COLUMNS = ("id", "company_id", "amount", "status", "created_at", "updated_at")

    def __init__(self, resolver: ReferenceResolver, verbose: bool = False):
        super().__init__(verbose)
        self.resolver = resolver

    def transform(self, record: dict) -> dict | None:
        company_id = self.resolver.resolve(record["company_id"], record["company_name"])
        if company_id is None:
            return None

        return {
            "id": record["id"],
            "company_id": company_id,
            "amount": record["amount"],
            "status": record["status"],
            "created_at": record["created_at"],
            "updated_at": record["updated_at"],
        }

    def echo(self, record: dict) -> str:
        return f"{record.get('company_id')} {record.get('company_name')}"

    def rejection_message(self, record: dict) -> str:
        return f"No company ID found for transaction {record.get('id')}"


def run_disperse(
    db,
    policy: IdentifierPolicy = IdentifierPolicy.CONTAINS,
    verbose: bool = False,
) -> OutcomeCounters:
    """
    Move `cargo` into `charges`.

    The company reference table is read in full before the first
    transaction is processed.

    Raises:
        ReferenceTableError: If the `company` table cannot be read
    """
    resolver = ReferenceResolver.from_database(db, policy)
    pipeline = DispersePipeline(resolver, verbose=verbose)
    sink = TableInserter(db, DispersePipeline.TARGET_TABLE, DispersePipeline.TARGET_COLUMNS)
    return pipeline.run(db.iter_rows(DispersePipeline.SOURCE_QUERY), sink)
