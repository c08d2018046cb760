"""
Delimited text files used by the export and load stages.

Fields are split on the separator only; there is no quoting, so a field that
contains the separator cannot be written.
"""
from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Iterator, Sequence

from pipeline.errors import SinkOpenError, SinkWriteError, SourceOpenError

logger = logging.getLogger(__name__)


class DelimitedFileSource:
    """
    Read a delimited file line by line.

    Usage:
        with DelimitedFileSource(path, separator=";", header=True) as source:
            for fields in source:
                ...
    """

    def __init__(self, path: Path | str, separator: str = ",", header: bool = False, encoding: str = "utf-8"):
        self.path = Path(path)
        self.separator = separator
        self.header = header
        self.encoding = encoding
        self._handle = None

    def __enter__(self) -> "DelimitedFileSource":
        try:
            self._handle = self.path.open("r", newline="", encoding=self.encoding)
        except OSError as exc:
            raise SourceOpenError(f"Could not open {self.path}: {exc}") from exc
        logger.info("Reading %s", self.path)
        return self

    def __exit__(self, *exc_info) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    def __iter__(self) -> Iterator[list[str]]:
        if self._handle is None:
            raise SourceOpenError(f"{self.path} is not open")

        reader = csv.reader(self._handle, delimiter=self.separator, quoting=csv.QUOTE_NONE)
        try:
            if self.header:
                next(reader, None)

            for fields in reader:
                # Blank lines carry no record
                if not fields:
                    continue
                yield fields
        except (UnicodeDecodeError, csv.Error, OSError) as exc:
            raise SourceOpenError(f"Reading {self.path} failed at line {reader.line_num}: {exc}") from exc


class DelimitedFileSink:
    """Write one record per line, columns joined by the separator."""

    def __init__(self, path: Path | str, columns: Sequence[str], separator: str = ",", encoding: str = "utf-8"):
        self.path = Path(path)
        self.columns = tuple(columns)
        self.separator = separator
        self.encoding = encoding
        self.lines_written = 0
        self._handle = None

    def __enter__(self) -> "DelimitedFileSink":
        try:
            self._handle = self.path.open("w", newline="", encoding=self.encoding)
        except OSError as exc:
            raise SinkOpenError(f"Could not create {self.path}: {exc}") from exc
        return self

    def __exit__(self, *exc_info) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None
            logger.info("Wrote %d line(s) to %s", self.lines_written, self.path)

    def format_line(self, record: dict) -> str:
        """
        Join the record's columns into one line.

        Raises:
            SinkWriteError: If a value contains the separator or a line break
        """
        values = []
        for column in self.columns:
            value = record.get(column)
            text = "" if value is None else str(value)
            if self.separator in text or "\n" in text or "\r" in text:
                raise SinkWriteError(
                    f"Cannot write record {record.get('id')}: {column} contains the separator or a line break"
                )
            values.append(text)
        return self.separator.join(values) + "\n"

    def write(self, record: dict) -> None:
        if self._handle is None:
            raise SinkWriteError(f"{self.path} is not open")
        line = self.format_line(record)
        try:
            self._handle.write(line)
        except OSError as exc:
            raise SinkWriteError(f"Write to {self.path} failed: {exc}") from exc
        self.lines_written += 1
