"""Value canonicalization: identifiers and temporal values."""

from __future__ import annotations

import string
from datetime import date, datetime, time, timezone
from typing import Any

from bson import ObjectId
from bson.datetime_ms import DatetimeMS

ID_FIELD = "_id"
NESTED_ID_SUFFIX = "._id"

_HEX_DIGITS = frozenset(string.hexdigits)


def is_id_column(column: str | None) -> bool:
    """True for the primary identifier field or a nested ``*._id`` path."""
    if not column:
        return False
    return column == ID_FIELD or column.endswith(NESTED_ID_SUFFIX)


def convert_key(value: Any) -> Any:
    """Turn a 24-digit hex string into an ObjectId; pass anything else through.

    Lists and tuples are converted element-wise, recursively.
    """
    if isinstance(value, str):
        if len(value) == 24 and all(ch in _HEX_DIGITS for ch in value):
            return ObjectId(value)
        return value
    if isinstance(value, (list, tuple)):
        return type(value)(convert_key(v) for v in value)
    return value


def convert_datetime(value: Any) -> Any:
    """Turn a date or datetime into a millisecond-epoch ``DatetimeMS``.

    Naive datetimes are taken as UTC. Non-temporal values pass through.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return DatetimeMS(value)
    if isinstance(value, date):
        return DatetimeMS(datetime.combine(value, time.min, tzinfo=timezone.utc))
    return value
