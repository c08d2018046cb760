"""
Exceptions raised by the migration stages.

Fatal errors stop the job before or while it runs. Per-record errors are
caught by the pipeline loop and counted as errored.
"""
from __future__ import annotations


class MigrationError(Exception):
    """Base class for every migration failure."""


# Fatal: the job cannot proceed.

class DatabaseConnectionError(MigrationError):
    """Raised when the database cannot be reached."""


class SourceOpenError(MigrationError):
    """Raised when a source file or query cannot be opened."""


class SinkOpenError(MigrationError):
    """Raised when the output file cannot be created."""


class ReferenceTableError(MigrationError):
    """Raised when the company reference table cannot be read."""


# Per-record: the job continues with the next record.

class RecordFormatError(MigrationError):
    """Raised when a source record does not have the expected shape."""


class SinkWriteError(MigrationError):
    """Raised when the sink rejects a single record."""
