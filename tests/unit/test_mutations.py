"""Unit tests for update-operator translation."""

from __future__ import annotations

import pytest

from mongo_query_planner.compiler import compile_predicates
from mongo_query_planner.mutations import (
    build_array_insert,
    build_array_remove,
    build_decrement,
    build_increment,
    build_unset,
    build_update,
    is_dense_sequence,
    resolve_multiplicity,
)
from mongo_query_planner.predicates import Predicate

VIEWS_GUARD = {"$or": [{"views": {"$exists": False}}, {"views": {"$ne": None}}]}


class TestDenseSequence:
    @pytest.mark.parametrize("value", [[1], ("a", "b"), {0: "a", 1: "b"}])
    def test_dense(self, value):
        assert is_dense_sequence(value)

    @pytest.mark.parametrize(
        "value", [[], {}, {1: "a"}, {0: "a", 2: "b"}, {"a": 1}, "abc", 5, None]
    )
    def test_not_dense(self, value):
        assert not is_dense_sequence(value)


class TestUpdate:
    def test_plain_values_are_wrapped_in_set(self):
        assert build_update({"a": 1, "b": 2}) == {"$set": {"a": 1, "b": 2}}

    def test_operator_documents_pass_through(self):
        update = {"$inc": {"a": 1}, "$set": {"b": 2}}
        assert build_update(update) == update


class TestIncrement:
    """Tests for the guarded ``$inc`` translation."""

    def test_increment(self):
        increment = build_increment("views")
        assert increment.update == {"$inc": {"views": 1}}

    def test_increment_with_extra_fields(self):
        increment = build_increment("views", 5, {"seen": True})
        assert increment.update == {"$inc": {"views": 5}, "$set": {"seen": True}}

    def test_decrement_negates_amount(self):
        assert build_decrement("stock", 2).update == {"$inc": {"stock": -2}}

    def test_guard_skips_explicit_null(self):
        guard = build_increment("views").guard
        assert compile_predicates([guard]) == VIEWS_GUARD

    def test_guard_is_and_joined_to_existing_predicates(self):
        increment = build_increment("views")
        predicates = increment.apply_guard([Predicate.basic("status", "=", "active")])
        assert compile_predicates(predicates) == {
            "$and": [{"status": "active"}, VIEWS_GUARD]
        }

    def test_apply_guard_returns_new_list(self):
        existing = [Predicate.basic("a", "=", 1)]
        build_increment("views").apply_guard(existing)
        assert len(existing) == 1


class TestArrayOperators:
    """Tests for push, add-to-set and pull translations."""

    def test_push_single_value(self):
        assert build_array_insert("tags", "x") == {"$push": {"tags": "x"}}

    def test_push_unique(self):
        assert build_array_insert("tags", "x", unique=True) == {
            "$addToSet": {"tags": "x"}
        }

    def test_push_many(self):
        assert build_array_insert("tags", ["a", "b"]) == {
            "$push": {"tags": {"$each": ["a", "b"]}}
        }

    def test_push_dense_mapping(self):
        assert build_array_insert("tags", {0: "a", 1: "b"}, True) == {
            "$addToSet": {"tags": {"$each": ["a", "b"]}}
        }

    def test_push_empty_list_is_a_single_value(self):
        assert build_array_insert("tags", []) == {"$push": {"tags": []}}

    def test_push_multi_field(self):
        assert build_array_insert({"tags": "a", "labels": "b"}) == {
            "$push": {"tags": "a", "labels": "b"}
        }

    def test_pull_single_value(self):
        assert build_array_remove("tags", "x") == {"$pull": {"tags": "x"}}

    def test_pull_many(self):
        assert build_array_remove("tags", ("a", "b")) == {
            "$pullAll": {"tags": ["a", "b"]}
        }

    def test_pull_multi_field(self):
        assert build_array_remove({"tags": "a"}) == {"$pull": {"tags": "a"}}


class TestUnset:
    def test_single(self):
        assert build_unset("a") == {"$unset": {"a": 1}}

    def test_many(self):
        assert build_unset(["a", "b.c"]) == {"$unset": {"a": 1, "b.c": 1}}


class TestMultiplicity:
    def test_defaults_to_multiple(self):
        assert resolve_multiplicity() == (True, {})

    def test_flag_is_split_off(self):
        options = {"multiple": False, "upsert": True}
        assert resolve_multiplicity(options) == (False, {"upsert": True})
        assert options == {"multiple": False, "upsert": True}
