"""Layering inside the core: operators, then compiler, then planner."""

from pytest_archon import archrule


def test_operators_do_not_import_compiler() -> None:
    """Per-variant operator compilers must not reach back into the compiler."""
    (
        archrule("operators_below_compiler")
        .match("mongo_query_planner.operators*")
        .should_not_import("mongo_query_planner.compiler")
        .should_not_import("mongo_query_planner.planner")
        .check("mongo_query_planner")
    )


def test_planner_does_not_compile_predicates() -> None:
    """The planner consumes an already compiled filter document."""
    (
        archrule("planner_independent_of_compiler")
        .match("mongo_query_planner.planner")
        .should_not_import("mongo_query_planner.compiler")
        .should_not_import("mongo_query_planner.predicates")
        .check("mongo_query_planner")
    )
