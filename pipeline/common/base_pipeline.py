"""
Base record pipeline shared by the four migration stages.

Every stage reads records from a source, transforms them one at a time and
hands each accepted record to a sink. Each record ends up in exactly one of
three outcomes: stored, ignored (rejected by the stage) or errored (malformed
or refused by the sink).
"""
from __future__ import annotations

import enum
import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Any, Iterable, Protocol

from pipeline.errors import RecordFormatError, SinkWriteError

logger = logging.getLogger(__name__)


class Outcome(enum.Enum):
    STORED = "stored"
    IGNORED = "ignored"
    ERRORED = "errored"


@dataclass(frozen=True)
class OutcomeCounters:
    """Tallies of a finished job."""

    stored: int = 0
    ignored: int = 0
    errored: int = 0

    @property
    def total(self) -> int:
        return self.stored + self.ignored + self.errored

    def as_dict(self) -> dict:
        return asdict(self)


class RecordSink(Protocol):
    """Anything that accepts one record at a time."""

    def write(self, record: dict) -> None:
        """Persist a record, raising SinkWriteError if it is refused."""


class RecordPipeline(ABC):
    """
    Base class for a migration stage.

    Subclasses describe the stage with class attributes and implement
    transform():
    - STAGE_NAME: label used in diagnostics
    - TARGET_COLUMNS: columns written to the sink, in order
    """

    STAGE_NAME: str = ""
    TARGET_COLUMNS: tuple[str, ...] = ()

    def __init__(self, verbose: bool = False):
        """
        Args:
            verbose: Echo every record as it is read
        """
        self.verbose = verbose
        self.stats = {outcome.value: 0 for outcome in Outcome}

    @abstractmethod
    def transform(self, record: Any) -> dict | None:
        """
        Turn a source record into the record written to the sink.

        Returns:
            The target record, or None to ignore the source record

        Raises:
            RecordFormatError: If the record cannot be interpreted
        """

    def describe(self, record: Any) -> str:
        """Short label identifying a source record in diagnostics."""
        if isinstance(record, Mapping):
            return str(record.get("id"))
        if record:
            return str(record[0])
        return "<empty>"

    def echo(self, record: Any) -> str:
        """Text printed for a record in verbose mode."""
        return str(record)

    def rejection_message(self, record: Any) -> str:
        return f"Record {self.describe(record)} ignored"

    def process(self, record: Any, sink: RecordSink) -> Outcome:
        """Run a single record through the stage and count its outcome."""
        if self.verbose:
            logger.info("%s", self.echo(record))

        try:
            target = self.transform(record)
        except RecordFormatError as exc:
            logger.warning("[%s] Malformed record %s: %s", self.STAGE_NAME, self.describe(record), exc)
            return self._count(Outcome.ERRORED)

        if target is None:
            logger.warning("%s", self.rejection_message(record))
            return self._count(Outcome.IGNORED)

        try:
            sink.write(target)
        except SinkWriteError as exc:
            logger.error("[%s] Error: %s", self.STAGE_NAME, exc)
            return self._count(Outcome.ERRORED)

        return self._count(Outcome.STORED)

    def run(self, source: Iterable, sink: RecordSink) -> OutcomeCounters:
        """
        Process every record from the source.

        Args:
            source: Iterable of raw records
            sink: Destination for accepted records

        Returns:
            Counters as of the end of the job
        """
        for record in source:
            self.process(record, sink)

        counters = self.get_stats()
        logger.debug("[%s] Finished: %s", self.STAGE_NAME, counters.as_dict())
        return counters

    def get_stats(self) -> OutcomeCounters:
        """Get the counters accumulated by this pipeline instance."""
        return OutcomeCounters(**self.stats)

    def _count(self, outcome: Outcome) -> Outcome:
        self.stats[outcome.value] += 1
        return outcome
