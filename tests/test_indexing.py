"""Tests for EAV index maintenance."""

from __future__ import annotations

import pytest

from docshelf.indexing import (
    REGISTRY,
    VALUE,
    IndexRow,
    encode_index_value,
    index_rows,
    is_property_indexable,
    is_value_indexable,
)


class TestIndexability:
    @pytest.mark.parametrize("name", ["id", "revision", "updated", "origin"])
    def test_metadata_not_indexable(self, name):
        assert not is_property_indexable(name)

    def test_regular_property_indexable(self):
        assert is_property_indexable("name")
        assert is_property_indexable("committed")

    @pytest.mark.parametrize("value", ["x", "", True, False, 0, 42, -7, None])
    def test_scalars_indexable(self, value):
        assert is_value_indexable(value)

    @pytest.mark.parametrize("value", [1.5, {"a": 1}, [1, 2], (1,), b"raw"])
    def test_non_scalars_not_indexable(self, value):
        assert not is_value_indexable(value)

    def test_encode_booleans_as_text(self):
        assert encode_index_value(True) == "true"
        assert encode_index_value(False) == "false"
        assert encode_index_value(1) == 1
        assert encode_index_value("x") == "x"
        assert encode_index_value(None) is None

    def test_encode_integers_outside_sqlite_range_as_text(self):
        assert encode_index_value(2**63 - 1) == 2**63 - 1
        assert encode_index_value(-(2**63)) == -(2**63)
        assert encode_index_value(2**63) == "9223372036854775808"
        assert encode_index_value(-(10**20)) == "-100000000000000000000"


class TestIndexRows:
    def test_rows_for_document(self):
        doc = {
            "id": "abc",
            "revision": 1234567,
            "updated": "2024-01-01 00:00:00.000001",
            "origin": "2024-01-01 00:00:00.000000",
            "a": "x",
            "e": {"nested": 1},
        }
        rows = list(index_rows(doc))
        assert rows == [
            IndexRow("abc", VALUE, "a", "x", "2024-01-01 00:00:00.000000"),
            IndexRow("abc", REGISTRY, "", None, "2024-01-01 00:00:00.000000"),
        ]

    def test_registry_row_without_properties(self):
        doc = {"id": "abc", "revision": 1, "updated": "t", "origin": "t"}
        rows = list(index_rows(doc))
        assert len(rows) == 1
        assert rows[0].type == REGISTRY


class TestStoredIndex:
    def test_indexing_completeness(self, people, index_rows):
        doc = people.insert({"a": "x", "b": 1, "c": True, "d": None, "e": {"nested": 1}})
        rows = index_rows("people", doc["id"])
        assert rows == [
            ("registry", "", None),
            ("value", "a", "x"),
            ("value", "b", 1),
            ("value", "c", "true"),
            ("value", "d", None),
        ]

    def test_large_integer_property(self, people, index_rows):
        doc = people.insert({"name": "ada", "big": 10**20})
        assert people.find(doc["id"])["big"] == 10**20
        assert ("value", "big", "100000000000000000000") in index_rows("people", doc["id"])
        people.update(doc["id"], {"name": "ada", "big": -(2**64)})
        assert people.find(doc["id"])["big"] == -(2**64)

    def test_lists_and_floats_not_indexed(self, people, index_rows):
        doc = people.insert({"tags": ["a", "b"], "score": 0.5, "name": "ada"})
        props = [r[1] for r in index_rows("people", doc["id"]) if r[0] == "value"]
        assert props == ["name"]

    def test_update_replaces_index_rows(self, people, index_rows):
        doc = people.insert({"a": "x", "b": 1})
        people.update(doc["id"], {"a": "y"})
        rows = index_rows("people", doc["id"])
        assert rows == [("registry", "", None), ("value", "a", "y")]

    def test_exactly_one_registry_row_per_id(self, history, connector):
        doc = history.insert({"a": "x"})
        for i in range(3):
            history.update(doc["id"], {"a": str(i)})
        n = connector.query(
            "SELECT COUNT(*) FROM history__index WHERE id = ? AND type = 'registry'",
            (doc["id"],),
        ).fetchone()[0]
        assert n == 1

    def test_index_rows_carry_origin(self, people, connector):
        doc = people.insert({"a": "x"})
        people.update(doc["id"], {"a": "y"})
        origins = {
            r[0]
            for r in connector.query(
                "SELECT origin FROM people__index WHERE id = ?", (doc["id"],)
            ).fetchall()
        }
        assert origins == {doc["origin"]}
