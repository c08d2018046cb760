"""Tests for ``pipeline.common.resolver``."""

from __future__ import annotations

import pytest

from conftest import FakeDatabase, OTHER_ID, VALID_ID
from pipeline.common.resolver import IdentifierPolicy, ReferenceResolver, build_reference_table
from pipeline.errors import ReferenceTableError


class TestIdentifierPolicy:
    def test_exact_length_word_run(self):
        assert IdentifierPolicy.CONTAINS.is_valid(VALID_ID)
        assert IdentifierPolicy.EXACT.is_valid(VALID_ID)

    def test_contains_accepts_run_inside_longer_value(self):
        candidate = f"id:{VALID_ID}-v2"
        assert IdentifierPolicy.CONTAINS.is_valid(candidate)
        assert not IdentifierPolicy.EXACT.is_valid(candidate)

    @pytest.mark.parametrize("candidate", [
        "???",
        "",
        None,
        VALID_ID[:23],
        "5f1c0e9a-b2d4c6e8f0a1b3c5",
    ])
    def test_rejects(self, candidate):
        assert not IdentifierPolicy.CONTAINS.is_valid(candidate)
        assert not IdentifierPolicy.EXACT.is_valid(candidate)


class TestBuildReferenceTable:
    def test_last_write_wins(self):
        assert build_reference_table([("id1", "A"), ("id2", "A")]) == {"A": "id2"}

    def test_accepts_dict_rows(self):
        rows = [{"id": VALID_ID, "name": "Acme"}, {"id": OTHER_ID, "name": "acme"}]
        assert build_reference_table(rows) == {"Acme": VALID_ID, "acme": OTHER_ID}


class TestReferenceResolver:
    def test_valid_candidate_wins_over_table(self):
        resolver = ReferenceResolver({"Acme": OTHER_ID})
        assert resolver.resolve(VALID_ID, "Acme") == VALID_ID

    def test_falls_back_to_name(self):
        resolver = ReferenceResolver({"Acme": VALID_ID})
        assert resolver.resolve("???", "Acme") == VALID_ID

    def test_unresolved(self):
        resolver = ReferenceResolver({"Acme": VALID_ID})
        assert resolver.resolve("???", "Globex") is None
        assert resolver.resolve("???", None) is None

    def test_name_lookup_is_case_sensitive(self):
        resolver = ReferenceResolver({"Acme": VALID_ID})
        assert resolver.resolve("", "acme") is None

    def test_exact_policy_uses_lookup_for_padded_id(self):
        resolver = ReferenceResolver({"Acme": OTHER_ID}, IdentifierPolicy.EXACT)
        assert resolver.resolve(f"{VALID_ID}x", "Acme") == OTHER_ID

    def test_from_database(self):
        db = FakeDatabase(tables={"company": [{"id": VALID_ID, "name": "Acme"}]})
        resolver = ReferenceResolver.from_database(db)
        assert len(resolver) == 1
        assert resolver.resolve("bad", "Acme") == VALID_ID

    def test_from_database_failure_is_fatal(self):
        db = FakeDatabase(broken_tables={"company"})
        with pytest.raises(ReferenceTableError, match="company"):
            ReferenceResolver.from_database(db)
