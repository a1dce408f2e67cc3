"""
Cache keys for compiled queries.

``fingerprint`` creates a deterministic MD5 hash over the ordered tuple

    (database, collection, filter, columns, groups, orders, offset, limit,
     aggregate)

so an external cache can memoize results. BSON values and mappings are
normalized to tagged JSON-safe forms; mapping key order is kept because it
is significant for sort specifications.

Usage:
    key = fingerprint(shape, {"status": "active"}, "shop", "orders")
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping
from datetime import date, datetime
from enum import Enum
from typing import Any

from bson import ObjectId
from bson.datetime_ms import DatetimeMS
from bson.regex import Regex

from .shape import QueryShape


def _normalize(obj: Any) -> Any:
    """Recursively normalize a value for deterministic hashing."""
    if isinstance(obj, ObjectId):
        return {"$oid": str(obj)}
    if isinstance(obj, DatetimeMS):
        return {"$date": int(obj)}
    if isinstance(obj, datetime):
        return {"$datetime": obj.isoformat()}
    if isinstance(obj, date):
        return {"$dateonly": obj.isoformat()}
    if isinstance(obj, Regex):
        return {"$regex": obj.pattern, "$options": obj.flags}
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, Mapping):
        return {"$map": [[str(k), _normalize(v)] for k, v in obj.items()]}
    if isinstance(obj, (list, tuple)):
        return [_normalize(v) for v in obj]
    if obj is None or isinstance(obj, (str, int, float, bool)):
        return obj
    return {"$repr": repr(obj)}


def fingerprint(
    shape: QueryShape,
    filter: Mapping[str, Any],
    database: str,
    collection: str,
) -> str:
    """
    Return a 32-character hex key identifying the query.

    Equal inputs always produce the same key, regardless of object identity;
    any change to one of the hashed fields changes it.
    """
    aggregate = None
    if shape.aggregate is not None:
        aggregate = [shape.aggregate.function_name, list(shape.aggregate.columns)]

    key = [
        database,
        collection,
        filter,
        list(shape.columns),
        list(shape.groups),
        shape.orders,
        shape.offset,
        shape.limit,
        aggregate,
    ]
    json_str = json.dumps(_normalize(key), separators=(",", ":"))
    return hashlib.md5(json_str.encode("utf-8")).hexdigest()
