"""Range operators -> $gte/$lte, or the negated two-branch $or."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from ..exceptions import MalformedPredicateError
from ..expressions import Expression, FieldOp, Or


def compile_between(column: str, values: Any, *, negated: bool) -> Expression:
    """Compile Between.

    The negated form is ``lo >= column OR column >= hi``: boundaries are
    included on both branches.
    """
    lo, hi = _bounds(values, "not between" if negated else "between")
    if negated:
        return Or((FieldOp(column, {"$lte": lo}), FieldOp(column, {"$gte": hi})))
    return FieldOp(column, {"$gte": lo, "$lte": hi})


def _bounds(values: Any, operator: str) -> tuple[Any, Any]:
    """Unpack a ``[lo, hi]`` operand."""
    if isinstance(values, Sequence) and not isinstance(values, (str, bytes)):
        if len(values) == 2:
            return values[0], values[1]
    raise MalformedPredicateError(
        f"{operator} requires a list of two values, got {values!r}"
    )
