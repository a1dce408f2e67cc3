"""Comparison operators and store-native pass-through."""

from __future__ import annotations

from typing import Any

from ..expressions import Expression, FieldEquals, FieldOp

# Lowercased operator -> MongoDB operator name (without the sigil).
OPERATOR_RENAMES: dict[str, str] = {
    "regexp": "regex",
    "elemmatch": "elemMatch",
    "geointersects": "geoIntersects",
    "geowithin": "geoWithin",
    "nearsphere": "nearSphere",
    "maxdistance": "maxDistance",
    "centersphere": "centerSphere",
    "uniquedocs": "uniqueDocs",
}

CONVERSION: dict[str, str] = {
    "!=": "$ne",
    "<>": "$ne",
    "<": "$lt",
    "<=": "$lte",
    ">": "$gt",
    ">=": "$gte",
}


def normalize_operator(operator: str | None) -> str | None:
    """Lowercase an operator and apply the rename table."""
    if operator is None:
        return None
    lowered = operator.lower()
    return OPERATOR_RENAMES.get(lowered, lowered)


def compile_standard(column: str, operator: str | None, value: Any) -> Expression:
    """Equality, converted comparisons, or ``{column: {"$" + op: value}}``."""
    if operator is None or operator == "=":
        return FieldEquals(column, value)
    if operator in CONVERSION:
        return FieldOp(column, {CONVERSION[operator]: value})
    return FieldOp(column, {f"${operator}": value})
