"""
Migration Database Package

This package provides PostgreSQL connectivity for the migration stages.

Usage:
    from database.connection import DatabaseConfig, connect
    from database.inserters import TableInserter

Example:
    with connect(DatabaseConfig(host="localhost", dbname="testdb")) as db:
        inserter = TableInserter(db, "data", ["id", "name"])
        inserter.write({"id": "1", "name": "Jane"})
"""

__version__ = "1.0.0"
__all__ = [
    "DatabaseConfig",
    "DatabaseManager",
    "connect",
    "TableInserter",
]

from database.connection import DatabaseConfig, DatabaseManager, connect
from database.inserters import TableInserter
