"""Membership operators -> $in, $nin."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from ..expressions import Expression, FieldOp


def compile_set(column: str, values: Sequence[Any], *, negated: bool) -> Expression:
    """Compile In / NotIn, keeping the operand order as given."""
    return FieldOp(column, {"$nin" if negated else "$in": list(values)})
