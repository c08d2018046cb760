"""
Company reference resolution for transactions.

A transaction carries a candidate company id and a company name. The id is
trusted when it looks like a company id; otherwise the name is looked up in
the reference table built from the `company` table.
"""
from __future__ import annotations

import enum
import logging
import re
from collections.abc import Iterable, Mapping

import psycopg2

from pipeline.errors import ReferenceTableError

logger = logging.getLogger(__name__)

REFERENCE_QUERY = "SELECT id, name FROM company"

_ID_PATTERN = re.compile(r"\w{24}")


class IdentifierPolicy(enum.Enum):
    """How strictly a candidate company id is checked."""

    # Any run of 24 word characters anywhere in the value
    CONTAINS = "contains"
    # The whole value is exactly 24 word characters
    EXACT = "exact"

    def is_valid(self, candidate: str | None) -> bool:
        if not candidate:
            return False
        if self is IdentifierPolicy.EXACT:
            return _ID_PATTERN.fullmatch(candidate) is not None
        return _ID_PATTERN.search(candidate) is not None


def build_reference_table(rows: Iterable) -> dict[str, str]:
    """
    Build the name -> id mapping from (id, name) rows.

    Rows may be tuples or mappings with `id` and `name` keys. Duplicate
    names keep the id seen last.
    """
    table: dict[str, str] = {}
    for row in rows:
        if isinstance(row, Mapping):
            identifier, name = row["id"], row["name"]
        else:
            identifier, name = row[0], row[1]
        table[name] = identifier
    return table


class ReferenceResolver:
    """Resolve the company id of a transaction."""

    def __init__(
        self,
        table: Mapping[str, str],
        policy: IdentifierPolicy = IdentifierPolicy.CONTAINS,
    ):
        """
        Args:
            table: Company name -> company id mapping
            policy: Validity check applied to candidate ids
        """
        self._table = dict(table)
        self.policy = policy

    def __len__(self) -> int:
        return len(self._table)

    @classmethod
    def from_database(cls, db, policy: IdentifierPolicy = IdentifierPolicy.CONTAINS) -> "ReferenceResolver":
        """
        Read the whole `company` table and build a resolver from it.

        Raises:
            ReferenceTableError: If the table cannot be read
        """
        try:
            rows = db.execute(REFERENCE_QUERY, fetch=True)
        except psycopg2.Error as exc:
            raise ReferenceTableError(f"Could not read company reference table: {exc}") from exc

        table = build_reference_table(rows or [])
        logger.info("Loaded %d company names into the reference table", len(table))
        return cls(table, policy)

    def resolve(self, candidate_id: str | None, candidate_name: str | None) -> str | None:
        """
        Pick the company id to store for a transaction.

        Returns:
            The candidate id if valid, else the id mapped to the name,
            else None when nothing can be resolved
        """
        if self.policy.is_valid(candidate_id):
            return candidate_id
        if candidate_name is None:
            return None
        return self._table.get(candidate_name)
