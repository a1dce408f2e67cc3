"""Unit tests for the filter-expression tree and merge."""

from __future__ import annotations

from mongo_query_planner.expressions import (
    EMPTY,
    And,
    Document,
    FieldEquals,
    FieldOp,
    Or,
    Raw,
    merge,
)


class TestRendering:
    """Tests for ``to_document``."""

    def test_leaf_nodes(self):
        assert FieldEquals("a", 1).to_document() == {"a": 1}
        assert FieldOp("a", {"$gt": 1}).to_document() == {"a": {"$gt": 1}}
        assert Raw({"$text": {"$search": "x"}}).to_document() == {
            "$text": {"$search": "x"}
        }

    def test_logical_nodes(self):
        a, b = FieldEquals("a", 1), FieldEquals("b", 2)
        assert And((a, b)).to_document() == {"$and": [{"a": 1}, {"b": 2}]}
        assert Or((a,)).to_document() == {"$or": [{"a": 1}]}

    def test_empty_document(self):
        assert not EMPTY
        assert EMPTY.to_document() == {}


class TestMerge:
    """Tests for merging compiled clauses."""

    def test_logical_arrays_concatenate(self):
        merged = merge(
            Document((And((FieldEquals("a", 1),)),)), And((FieldEquals("b", 2),))
        )
        assert merged.to_document() == {"$and": [{"a": 1}, {"b": 2}]}

    def test_operators_on_same_field_are_unioned(self):
        merged = merge(FieldOp("age", {"$gte": 18}), FieldOp("age", {"$lte": 65}))
        assert merged.to_document() == {"age": {"$gte": 18, "$lte": 65}}

    def test_different_keys_are_kept_side_by_side(self):
        merged = merge(And((FieldEquals("a", 1),)), Or((FieldEquals("b", 2),)))
        assert merged.to_document() == {"$and": [{"a": 1}], "$or": [{"b": 2}]}

    def test_key_keeps_first_position(self):
        merged = merge(EMPTY, And((FieldEquals("a", 1),)))
        merged = merge(merged, Or((FieldEquals("b", 2),)))
        merged = merge(merged, And((FieldEquals("c", 3),)))
        assert merged.keys() == ("$and", "$or")
        assert merged.to_document()["$and"] == [{"a": 1}, {"c": 3}]

    def test_merge_leaves_inputs_untouched(self):
        left = Document((And((FieldEquals("a", 1),)),))
        merge(left, And((FieldEquals("b", 2),)))
        assert left.to_document() == {"$and": [{"a": 1}]}

    def test_merging_documents(self):
        left = Document((Or((FieldEquals("a", 1),)),))
        right = Document((Or((FieldEquals("b", 2),)), FieldEquals("c", 3)))
        assert merge(left, right).to_document() == {
            "$or": [{"a": 1}, {"b": 2}],
            "c": 3,
        }
