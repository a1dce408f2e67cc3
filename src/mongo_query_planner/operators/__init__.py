"""Per-variant compilers producing filter-expression nodes."""

from __future__ import annotations

from .range import compile_between
from .set import compile_set
from .standard import compile_standard, normalize_operator
from .string import compile_string, like_to_regex, parse_regex

__all__ = [
    "compile_standard",
    "compile_string",
    "compile_set",
    "compile_between",
    "normalize_operator",
    "like_to_regex",
    "parse_regex",
]
