"""Shared fixtures and in-memory stand-ins for the database and sinks."""

from __future__ import annotations

from collections import defaultdict
from datetime import date

import psycopg2
import pytest

from pipeline.errors import SinkWriteError

VALID_ID = "5f1c0e9ab2d4c6e8f0a1b3c5"
OTHER_ID = "60aa11bb22cc33dd44ee55ff"


class FakeSink:
    """Collects written records; refuses the ids listed in fail_ids."""

    def __init__(self, fail_ids=()):
        self.records = []
        self.fail_ids = set(fail_ids)

    def write(self, record):
        if record.get("id") in self.fail_ids:
            raise SinkWriteError(f"duplicate key value violates unique constraint ({record['id']})")
        self.records.append(record)


class FakeDatabase:
    """Stands in for DatabaseManager, backed by dicts of rows per table."""

    def __init__(self, tables=None, fail_ids=(), broken_tables=()):
        self.tables = tables or {}
        self.fail_ids = set(fail_ids)
        self.broken_tables = set(broken_tables)
        self.inserted = defaultdict(list)
        self.queries = []

    def _table_of(self, query):
        return query.rsplit("FROM", 1)[1].strip()

    def execute(self, query, params=None, fetch=False):
        self.queries.append(query)
        if query.startswith("INSERT INTO"):
            table = query.split()[2]
            if params.get("id") in self.fail_ids:
                raise psycopg2.IntegrityError("duplicate key value violates unique constraint")
            self.inserted[table].append(dict(params))
            return None

        table = self._table_of(query)
        if table in self.broken_tables:
            raise psycopg2.OperationalError(f'relation "{table}" does not exist')
        rows = list(self.tables.get(table, []))
        return rows if fetch else None

    def iter_rows(self, query, params=None, itersize=2000):
        self.queries.append(query)
        yield from self.tables.get(self._table_of(query), [])


@pytest.fixture
def sink():
    return FakeSink()


@pytest.fixture
def data_rows():
    return [
        {
            "id": "tx 001",
            "name": "Jane Doe",
            "company": "Acme Corp",
            "amount": 100.5,
            "status": "paid ",
            "created_at": date(2021, 5, 3),
            "paid_at": date(2021, 5, 10),
        },
        {
            "id": "tx002-with-a-very-long-identifier-value",
            "name": "John",
            "company": f"  {VALID_ID}-extra",
            "amount": 7.0,
            "status": "pending",
            "created_at": date(2021, 6, 1),
            "paid_at": date(1900, 1, 1),
        },
    ]
