"""QueryBuilder: fluent front-end over a Motor collection.

The builder only accumulates state. Reads compile the predicates, plan the
query and await the collection exactly once; writes compile the predicates
and an update document. Driver errors propagate unchanged, unacknowledged
writes report zero effect.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from bson import ObjectId

from .canonical import convert_key
from .compiler import compile_predicates
from .fingerprint import fingerprint
from .mutations import (
    build_array_insert,
    build_array_remove,
    build_decrement,
    build_increment,
    build_unset,
    build_update,
    resolve_multiplicity,
)
from .planner import (
    AGGREGATE_FIELD,
    AggregatePlan,
    DistinctPlan,
    ExecutionPlan,
    FindPlan,
    plan_query,
)
from .predicates import Boolean, Predicate
from .shape import NATURAL_ORDER, AggregateSpec, QueryShape

logger = logging.getLogger(__name__)


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


def _column_list(columns: Any) -> list[str]:
    if columns is None:
        return []
    if isinstance(columns, str):
        return [columns]
    return list(columns)


def _data_get(document: Mapping[str, Any], path: str) -> Any:
    """Read a dot-separated path out of a nested document."""
    current: Any = document
    for part in path.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return None
        current = current[part]
    return current


class QueryBuilder:
    """Fluent query builder bound to one collection.

    Usage:
        builder = connection.collection("orders")
        rows = await (
            builder.where("status", "active")
            .or_where("total", ">", 100)
            .order_by("created_at", "desc")
            .take(10)
            .get()
        )
    """

    def __init__(
        self,
        collection: Any,
        *,
        database: str | None = None,
        connection: Any = None,
    ) -> None:
        self._collection = collection
        self._database = database
        self._connection = connection

        self._predicates: list[Predicate] = []
        self._columns: list[str] | None = None
        self._groups: list[str] = []
        self._aggregate: AggregateSpec | None = None
        self._orders: dict[str, int] = {}
        self._offset: int | None = None
        self._limit: int | None = None
        self._distinct = False
        self._projections: dict[str, Any] = {}
        self._options: dict[str, Any] = {}
        self._paginating = False
        self._timeout: int | None = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def collection(self) -> Any:
        return self._collection

    @property
    def predicates(self) -> list[Predicate]:
        return list(self._predicates)

    def new_query(self) -> QueryBuilder:
        """Return a fresh builder over the same collection."""
        return QueryBuilder(
            self._collection, database=self._database, connection=self._connection
        )

    def select(self, *columns: str | Sequence[str]) -> QueryBuilder:
        selected: list[str] = []
        for column in columns:
            selected.extend(_column_list(column))
        self._columns = selected
        return self

    def project(self, projections: Mapping[str, Any] | Sequence[str]) -> QueryBuilder:
        """Set explicit projections; a plain list includes each field."""
        if isinstance(projections, Mapping):
            self._projections = dict(projections)
        else:
            self._projections = dict.fromkeys(_column_list(projections), 1)
        return self

    def timeout(self, milliseconds: int) -> QueryBuilder:
        """Set the maximum server-side execution time for find queries."""
        self._timeout = milliseconds
        return self

    def options(self, options: Mapping[str, Any]) -> QueryBuilder:
        """Set driver options merged last into the generated ones."""
        self._options = dict(options)
        return self

    def distinct(self, column: str | None = None) -> QueryBuilder:
        self._distinct = True
        if column:
            self._columns = [column]
        return self

    def group_by(self, *columns: str) -> QueryBuilder:
        self._groups.extend(columns)
        return self

    def order_by(self, column: str, direction: str | int = "asc") -> QueryBuilder:
        if isinstance(direction, str):
            direction = 1 if direction.lower() == "asc" else -1
        if column == "natural":
            column = NATURAL_ORDER
        self._orders[column] = direction
        return self

    def order_by_desc(self, column: str) -> QueryBuilder:
        return self.order_by(column, "desc")

    def skip(self, value: int) -> QueryBuilder:
        self._offset = max(0, value)
        return self

    offset = skip

    def take(self, value: int) -> QueryBuilder:
        if value >= 0:
            self._limit = value
        return self

    limit = take

    def for_page(self, page: int, per_page: int = 15) -> QueryBuilder:
        """Limit to one page; page-based queries run as aggregations."""
        self._paginating = True
        return self.skip((page - 1) * per_page).take(per_page)

    # ------------------------------------------------------------------
    # Predicates
    # ------------------------------------------------------------------

    def where(
        self,
        column: str | Mapping[str, Any] | Callable[[QueryBuilder], Any],
        operator: Any = MISSING,
        value: Any = MISSING,
        boolean: Boolean | str = Boolean.AND,
    ) -> QueryBuilder:
        """Add a basic predicate.

        ``where("a", 1)`` means equality. A callable column receives a fresh
        builder and becomes a nested group; a mapping column adds one
        equality per item, grouped.
        """
        if callable(column):
            return self.where_nested(column, boolean)

        if isinstance(column, Mapping):
            items = list(column.items())
            return self.where_nested(
                lambda query: [query.where(k, "=", v) for k, v in items], boolean
            )

        if value is MISSING:
            operator, value = "=", operator

        if isinstance(operator, str) and operator.startswith("$"):
            operator = operator[1:]

        self._predicates.append(Predicate.basic(column, operator, value, boolean))
        return self

    def or_where(
        self,
        column: str | Mapping[str, Any] | Callable[[QueryBuilder], Any],
        operator: Any = MISSING,
        value: Any = MISSING,
    ) -> QueryBuilder:
        return self.where(column, operator, value, Boolean.OR)

    def where_in(
        self,
        column: str,
        values: Sequence[Any],
        boolean: Boolean | str = Boolean.AND,
        negated: bool = False,
    ) -> QueryBuilder:
        self._predicates.append(
            Predicate.in_(column, values, boolean, negated=negated)
        )
        return self

    def or_where_in(self, column: str, values: Sequence[Any]) -> QueryBuilder:
        return self.where_in(column, values, Boolean.OR)

    def where_not_in(
        self, column: str, values: Sequence[Any], boolean: Boolean | str = Boolean.AND
    ) -> QueryBuilder:
        return self.where_in(column, values, boolean, negated=True)

    def or_where_not_in(self, column: str, values: Sequence[Any]) -> QueryBuilder:
        return self.where_in(column, values, Boolean.OR, negated=True)

    def where_null(
        self,
        column: str,
        boolean: Boolean | str = Boolean.AND,
        negated: bool = False,
    ) -> QueryBuilder:
        self._predicates.append(Predicate.null(column, boolean, negated=negated))
        return self

    def or_where_null(self, column: str) -> QueryBuilder:
        return self.where_null(column, Boolean.OR)

    def where_not_null(
        self, column: str, boolean: Boolean | str = Boolean.AND
    ) -> QueryBuilder:
        return self.where_null(column, boolean, negated=True)

    def or_where_not_null(self, column: str) -> QueryBuilder:
        return self.where_null(column, Boolean.OR, negated=True)

    def where_between(
        self,
        column: str,
        values: Sequence[Any],
        boolean: Boolean | str = Boolean.AND,
        negated: bool = False,
    ) -> QueryBuilder:
        self._predicates.append(
            Predicate.between(column, values, boolean, negated=negated)
        )
        return self

    def or_where_between(self, column: str, values: Sequence[Any]) -> QueryBuilder:
        return self.where_between(column, values, Boolean.OR)

    def where_not_between(
        self, column: str, values: Sequence[Any], boolean: Boolean | str = Boolean.AND
    ) -> QueryBuilder:
        return self.where_between(column, values, boolean, negated=True)

    def or_where_not_between(
        self, column: str, values: Sequence[Any]
    ) -> QueryBuilder:
        return self.where_between(column, values, Boolean.OR, negated=True)

    def where_nested(
        self,
        callback: Callable[[QueryBuilder], Any],
        boolean: Boolean | str = Boolean.AND,
    ) -> QueryBuilder:
        """Group the predicates added by ``callback`` on a fresh builder."""
        query = self.new_query()
        callback(query)
        if query._predicates:
            self._predicates.append(Predicate.nested(query._predicates, boolean))
        return self

    def where_raw(
        self, document: Mapping[str, Any], boolean: Boolean | str = Boolean.AND
    ) -> QueryBuilder:
        self._predicates.append(Predicate.raw(dict(document), boolean))
        return self

    def or_where_raw(self, document: Mapping[str, Any]) -> QueryBuilder:
        return self.where_raw(document, Boolean.OR)

    # ------------------------------------------------------------------
    # Compilation
    # ------------------------------------------------------------------

    def to_filter(self) -> dict[str, Any]:
        return compile_predicates(self._predicates)

    def to_shape(self, columns: Any = None) -> QueryShape:
        selected = self._columns if self._columns is not None else _column_list(columns)
        return QueryShape(
            columns=tuple(selected),
            groups=tuple(self._groups),
            aggregate=self._aggregate,
            orders=dict(self._orders),
            offset=self._offset,
            limit=self._limit,
            distinct=self._distinct,
            projections=dict(self._projections),
            options=dict(self._options),
            paginating=self._paginating,
            timeout=self._timeout,
        )

    def to_plan(self, columns: Any = None) -> ExecutionPlan:
        return plan_query(self.to_shape(columns), self.to_filter())

    def _database_name(self) -> str:
        if self._database:
            return self._database
        database = getattr(self._collection, "database", None)
        return str(getattr(database, "name", ""))

    def cache_key(self) -> str:
        """Fingerprint of the current query, for an external result cache."""
        return fingerprint(
            self.to_shape(),
            self.to_filter(),
            self._database_name(),
            str(getattr(self._collection, "name", "")),
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def _execute(self, plan: ExecutionPlan) -> list[Any]:
        logger.debug(
            "Executing %s plan on %s", plan.kind, getattr(self._collection, "name", "?")
        )
        coll = self._collection
        if isinstance(plan, AggregatePlan):
            cursor = coll.aggregate(plan.pipeline, **plan.options)
            return list(await cursor.to_list(length=None))
        if isinstance(plan, DistinctPlan):
            if plan.filter:
                return list(await coll.distinct(plan.key, plan.filter))
            return list(await coll.distinct(plan.key))
        cursor = coll.find(plan.filter, **plan.options)
        return list(await cursor.to_list(length=None))

    async def get(self, columns: Any = None) -> list[Any]:
        """Run the query; returns documents, or scalars for distinct queries."""
        return await self._execute(self.to_plan(columns))

    async def first(self, columns: Any = None) -> Any:
        results = await self.take(1).get(columns)
        return results[0] if results else None

    async def find(self, id: Any, columns: Any = None) -> Any:
        """Fetch one document by ``_id``."""
        return await self.where("_id", "=", convert_key(id)).first(columns)

    async def value(self, column: str) -> Any:
        result = await self.first([column])
        return _data_get(result, column) if result else None

    async def exists(self) -> bool:
        return await self.first() is not None

    async def pluck(self, column: str, key: str | None = None) -> Any:
        """Values of ``column``; keyed by ``key`` when given."""
        results = await self.get([column] if key is None else [column, key])
        if key is None:
            return [_data_get(row, column) for row in results]

        plucked: dict[Any, Any] = {}
        for row in results:
            row_key = _data_get(row, key)
            if key == "_id" and isinstance(row_key, ObjectId):
                row_key = str(row_key)
            plucked[row_key] = _data_get(row, column)
        return plucked

    async def aggregate(self, function: str, columns: Sequence[str] = ()) -> Any:
        """Run an aggregate function; returns the ``aggregate`` field or None."""
        previous_columns = self._columns
        self._aggregate = AggregateSpec(function, tuple(columns))
        try:
            results = await self.get(list(columns))
        finally:
            self._aggregate = None
            self._columns = previous_columns

        if results:
            return results[0].get(AGGREGATE_FIELD)
        return None

    async def count(self, column: str = "*") -> int:
        return int(await self.aggregate("count", [column]) or 0)

    async def sum(self, column: str) -> Any:
        return await self.aggregate("sum", [column])

    async def avg(self, column: str) -> Any:
        return await self.aggregate("avg", [column])

    async def min(self, column: str) -> Any:
        return await self.aggregate("min", [column])

    async def max(self, column: str) -> Any:
        return await self.aggregate("max", [column])

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def insert(
        self, values: Mapping[str, Any] | Sequence[Mapping[str, Any]]
    ) -> bool:
        """Insert one document or a batch; True when acknowledged."""
        if isinstance(values, Mapping):
            documents = [dict(values)]
        else:
            documents = [dict(v) for v in values]
        result = await self._collection.insert_many(documents)
        return bool(result.acknowledged)

    async def insert_get_id(
        self, values: Mapping[str, Any], sequence: str | None = None
    ) -> Any:
        """Insert one document and return its ``_id`` (or ``sequence`` field)."""
        document = dict(values)
        result = await self._collection.insert_one(document)
        if not result.acknowledged:
            logger.debug("insert_one not acknowledged on %s", self._collection.name)
            return None
        if sequence is None or sequence == "_id":
            return result.inserted_id
        return document[sequence]

    async def _perform_update(
        self, update: dict[str, Any], options: Mapping[str, Any] | None = None
    ) -> int:
        multiple, driver_options = resolve_multiplicity(options)
        coll = self._collection
        method = coll.update_many if multiple else coll.update_one
        result = await method(self.to_filter(), update, **driver_options)
        if not result.acknowledged:
            logger.debug("update not acknowledged on %s", self._collection.name)
            return 0
        if result.modified_count:
            return int(result.modified_count)
        return 1 if result.upserted_id is not None else 0

    async def update(self, values: Mapping[str, Any], **options: Any) -> int:
        """Update matching documents; returns the modified (or upserted) count."""
        return await self._perform_update(build_update(values), options)

    async def increment(
        self,
        column: str,
        amount: int | float = 1,
        extra: Mapping[str, Any] | None = None,
        **options: Any,
    ) -> int:
        increment = build_increment(column, amount, extra)
        self._predicates = increment.apply_guard(self._predicates)
        return await self._perform_update(increment.update, options)

    async def decrement(
        self,
        column: str,
        amount: int | float = 1,
        extra: Mapping[str, Any] | None = None,
        **options: Any,
    ) -> int:
        decrement = build_decrement(column, amount, extra)
        self._predicates = decrement.apply_guard(self._predicates)
        return await self._perform_update(decrement.update, options)

    async def push(
        self,
        column: str | Mapping[str, Any],
        value: Any = None,
        unique: bool = False,
    ) -> int:
        return await self._perform_update(build_array_insert(column, value, unique))

    async def pull(self, column: str | Mapping[str, Any], value: Any = None) -> int:
        return await self._perform_update(build_array_remove(column, value))

    async def unset(self, columns: str | Sequence[str]) -> int:
        """Remove one or more fields from matching documents."""
        return await self._perform_update(build_unset(columns))

    async def delete(self, id: Any = None) -> int:
        """Delete matching documents (or the one with ``_id`` ``id``)."""
        if id is not None:
            self.where("_id", "=", id)
        result = await self._collection.delete_many(self.to_filter())
        if not result.acknowledged:
            logger.debug("delete not acknowledged on %s", self._collection.name)
            return 0
        return int(result.deleted_count)

    async def truncate(self) -> bool:
        """Drop the collection."""
        await self._collection.drop()
        return True

    def raw(self, callback: Callable[[Any], Any] | None = None) -> Any:
        """Run ``callback`` against the collection, or return the collection."""
        if callback is not None:
            return callback(self._collection)
        return self._collection
