"""Unit tests for query cache keys."""

from __future__ import annotations

from datetime import datetime

from bson import ObjectId
from bson.regex import Regex

from mongo_query_planner.canonical import convert_datetime
from mongo_query_planner.fingerprint import fingerprint
from mongo_query_planner.shape import AggregateSpec, QueryShape

OID = "5f1d7f3e9b1e8a0012345678"


def _key(shape=None, filter=None, database="shop", collection="orders"):
    return fingerprint(shape or QueryShape(), filter or {}, database, collection)


class TestFingerprint:
    """Tests for deterministic query fingerprints."""

    def test_key_is_md5_hex(self):
        key = _key()
        assert len(key) == 32
        int(key, 16)

    def test_equal_inputs_give_equal_keys(self):
        shape = QueryShape(columns=("a",), orders={"a": 1}, limit=5)
        assert _key(shape, {"a": 1}) == _key(
            QueryShape(columns=("a",), orders={"a": 1}, limit=5), {"a": 1}
        )

    def test_bson_values_compare_by_value(self):
        assert _key(filter={"_id": ObjectId(OID)}) == _key(
            filter={"_id": ObjectId(OID)}
        )
        moment = datetime(2024, 1, 1)
        assert _key(filter={"t": convert_datetime(moment)}) == _key(
            filter={"t": convert_datetime(moment)}
        )

    def test_filter_changes_key(self):
        assert _key(filter={"a": 1}) != _key(filter={"a": 2})

    def test_regex_options_change_key(self):
        assert _key(filter={"a": Regex("x", "i")}) != _key(filter={"a": Regex("x")})

    def test_target_changes_key(self):
        assert _key(database="shop") != _key(database="archive")
        assert _key(collection="orders") != _key(collection="users")

    def test_shape_fields_change_key(self):
        base = _key()
        assert _key(QueryShape(columns=("a",))) != base
        assert _key(QueryShape(groups=("a",))) != base
        assert _key(QueryShape(offset=1)) != base
        assert _key(QueryShape(limit=1)) != base
        assert _key(QueryShape(aggregate=AggregateSpec("count"))) != base

    def test_order_sequence_is_significant(self):
        first = QueryShape(orders={"a": 1, "b": -1})
        second = QueryShape(orders={"b": -1, "a": 1})
        assert _key(first) != _key(second)

    def test_projections_do_not_change_key(self):
        assert _key(QueryShape(projections={"a": 1})) == _key()

    def test_mapping_and_list_of_pairs_differ(self):
        assert _key(filter={"tags": {"a": 1}}) != _key(filter={"tags": [["a", 1]]})

    def test_mapping_and_tagged_value_differ(self):
        oid = ObjectId(OID)
        assert _key(filter={"_id": oid}) != _key(filter={"_id": {"$oid": OID}})
