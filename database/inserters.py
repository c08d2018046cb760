"""
Single-row insertion into the migration tables.
"""
from __future__ import annotations

from typing import Sequence

import psycopg2

from pipeline.errors import SinkWriteError


def build_insert_query(table: str, columns: Sequence[str]) -> str:
    """Build a named-parameter INSERT statement for the given columns."""
    column_list = ", ".join(columns)
    placeholders = ", ".join(f"%({column})s" for column in columns)
    return f"INSERT INTO {table} ({column_list}) VALUES ({placeholders})"


class TableInserter:
    """Insert records into one table, one statement and transaction per record."""

    def __init__(self, db, table: str, columns: Sequence[str]):
        """
        Args:
            db: DatabaseManager used to run the inserts
            table: Target table name
            columns: Columns taken from each record, in insert order
        """
        self.db = db
        self.table = table
        self.columns = tuple(columns)
        self.query = build_insert_query(table, self.columns)
        self.rows_inserted = 0

    def write(self, record: dict) -> None:
        """
        Insert a record.

        Raises:
            SinkWriteError: If the database refuses the row
        """
        params = {column: record.get(column) for column in self.columns}
        try:
            self.db.execute(self.query, params)
        except psycopg2.Error as exc:
            detail = str(exc).strip() or type(exc).__name__
            raise SinkWriteError(f"Insert into {self.table} failed for {record.get('id')}: {detail}") from exc
        self.rows_inserted += 1
