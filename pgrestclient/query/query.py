"""The immutable query builder.

A :class:`Query` describes one request against a single resource (table or view).
Every method returns a new instance, so a base query can be shared and extended::

    base = Query("films").select(["id", "title"])
    recent = base.gte("year", 2020).order([{"column": "year", "direction": "desc"}])
    classics = base.lt("year", 1960)

Other queries can be embedded as selectors, which translates into the
resource embedding syntax of PostgREST::

    directors = Query("directors").select(["first_name", "last_name"]).single()
    query = Query("films").select(["title", directors])
    str(query)  # "select=title%2Cdirectors%28first_name%2Clast_name%29"

The query string itself is generated by the
:class:`~pgrestclient.query.compiler.QueryCompiler`.
"""

from __future__ import annotations

import dataclasses
import typing
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from operator import index

import orjson

from pgrestclient import conf
from pgrestclient.types import (
    Cardinality,
    ConflictResolution,
    Count,
    FilterOperator,
    LogicalOperator,
    Missing,
    Returning,
)

from .filters import Filter, FilterValue, LogicalGroup, ScalarTypes
from .selectors import Embedded, Selector, parse_selectors
from .sorting import Order

__all__ = ("QueryData", "Query", "NegatedQuery")

#: The value of ``and_()`` / ``or_()``: a list of queries, or a function producing them.
LogicalInput = typing.Union[Iterable["Query"], Callable[["Query"], Iterable["Query"]]]

# Sort filters by the declaration order of the operators.
_OPERATOR_ORDER = {op: i for i, op in enumerate(FilterOperator)}


@dataclass(frozen=True)
class QueryData:
    """All state of a :class:`Query`.

    This only holds tuples and enums, so two queries that are built in the
    same way compare as equal (and can be used as dictionary keys).
    """

    resource: str
    cardinality: Cardinality = Cardinality.MANY
    selectors: tuple[Selector, ...] = ()
    filters: tuple[Filter, ...] = ()
    and_groups: tuple[LogicalGroup, ...] = ()
    or_groups: tuple[LogicalGroup, ...] = ()
    ordering: tuple[Order, ...] = ()
    offset: int = 0
    limit: int | None = None

    # Request headers
    count: Count | None = None
    returning: Returning | None = None
    resolution: ConflictResolution | None = None
    missing: Missing | None = None
    schema: str | None = None

    # Write-only parameters
    on_conflict: str | None = None
    columns: tuple[str, ...] = ()

    # Only valid for embedded queries
    inner: bool = False

    def get_filters(self) -> list[Filter]:
        """Provide the filters, grouped by operator."""
        return sorted(self.filters, key=lambda f: _OPERATOR_ORDER[f.operator])

    def get_logical_groups(self) -> list[LogicalGroup]:
        """Provide the logical groups, "and" groups first."""
        return [*self.and_groups, *self.or_groups]

    def get_embedded(self) -> list[Embedded]:
        """Provide the embedded resources, in the order they were selected."""
        return [selector for selector in self.selectors if isinstance(selector, Embedded)]


class FilterMethods:
    """The horizontal filter methods.

    These are shared by :class:`Query` and :class:`NegatedQuery`,
    which differ in how the filter is stored.
    """

    def _add_filter(self, op: FilterOperator, column: str, value: FilterValue) -> Query:
        raise NotImplementedError()

    def _add_group(self, op: LogicalOperator, queries: LogicalInput) -> Query:
        raise NotImplementedError()

    def eq(self, column: str, value: ScalarTypes) -> Query:
        """Equality filter (``eq``, SQL ``=``)."""
        return self._add_filter(FilterOperator.EQ, column, value)

    def gt(self, column: str, value: ScalarTypes) -> Query:
        """Greater than filter (``gt``, SQL ``>``)."""
        return self._add_filter(FilterOperator.GT, column, value)

    def gte(self, column: str, value: ScalarTypes) -> Query:
        """Greater than or equal filter (``gte``, SQL ``>=``)."""
        return self._add_filter(FilterOperator.GTE, column, value)

    def lt(self, column: str, value: ScalarTypes) -> Query:
        """Less than filter (``lt``, SQL ``<``)."""
        return self._add_filter(FilterOperator.LT, column, value)

    def lte(self, column: str, value: ScalarTypes) -> Query:
        """Less than or equal filter (``lte``, SQL ``<=``)."""
        return self._add_filter(FilterOperator.LTE, column, value)

    def neq(self, column: str, value: ScalarTypes) -> Query:
        """Not equal filter (``neq``, SQL ``<>``)."""
        return self._add_filter(FilterOperator.NEQ, column, value)

    def like(self, column: str, value: str) -> Query:
        """Pattern filter (``like``, SQL ``LIKE``). Use ``*`` as wildcard."""
        return self._add_filter(FilterOperator.LIKE, column, value)

    def ilike(self, column: str, value: str) -> Query:
        """Case insensitive pattern filter (``ilike``, SQL ``ILIKE``)."""
        return self._add_filter(FilterOperator.ILIKE, column, value)

    def in_(self, column: str, values: Iterable[ScalarTypes]) -> Query:
        """List filter (``in``, SQL ``IN``)."""
        if isinstance(values, (str, bytes)):
            raise TypeError(f"in_() expects a list of values for '{column}', not a string.")
        return self._add_filter(FilterOperator.IN, column, tuple(values))

    def is_(self, column: str, value: bool | None) -> Query:
        """Identity filter (``is``, SQL ``IS``), for ``None``, ``True`` and ``False``."""
        return self._add_filter(FilterOperator.IS, column, value)

    def and_(self, queries: LogicalInput) -> Query:
        """Logical ``and`` of the filters of the given queries.

        :param queries: A list of queries, or a function that receives a fresh
            query for the same resource and returns the list.
        """
        return self._add_group(LogicalOperator.AND, queries)

    def or_(self, queries: LogicalInput) -> Query:
        """Logical ``or`` of the filters of the given queries.

        Example::

            query.or_(lambda q: [q.eq("id", 1), q.and_([q.gte("id", 11), q.lte("id", 17)])])
        """
        return self._add_group(LogicalOperator.OR, queries)


class Query(FilterMethods):
    """An immutable description of a PostgREST request.

    :param resource: The table or view name.
    :param cardinality: Whether one object or a list of rows is expected.
    """

    def __init__(self, resource: str, cardinality: Cardinality | str = Cardinality.MANY):
        self._data = QueryData(resource=resource, cardinality=Cardinality(cardinality))

    @classmethod
    def from_data(cls, data: QueryData) -> Query:
        """Create the query from a complete state object."""
        query = cls.__new__(cls)
        query._data = data
        return query

    def _clone(self, **changes) -> Query:
        return self.from_data(dataclasses.replace(self._data, **changes))

    def __eq__(self, other):
        return isinstance(other, Query) and self._data == other._data

    def __hash__(self):
        return hash(self._data)

    def __repr__(self):
        return f"<{self.__class__.__name__}: {self._data!r}>"

    def __str__(self):
        return self.to_string()

    @property
    def data(self) -> QueryData:
        """The state of this query."""
        return self._data

    @property
    def resource(self) -> str:
        return self._data.resource

    @property
    def cardinality(self) -> Cardinality:
        return self._data.cardinality

    # -- Representation

    def single(self) -> Query:
        """Request a single object instead of an array.

        This sets the ``Accept`` header to the singular media type,
        and the response will provide a ``row`` instead of ``rows``.
        For embedded queries, this declares a "to-one" relation.
        """
        return self._clone(cardinality=Cardinality.ONE)

    def inner(self) -> Query:
        """Only return parent rows that have a match in this embedded resource.

        This adds ``!inner`` to the embedding, so filters on the embedded
        resource also filter the parent rows (top-level filtering).
        It's only valid on an embedded query; compiling a root query with
        this flag raises :class:`~pgrestclient.exceptions.InvalidInnerJoin`.
        """
        return self._clone(inner=True)

    # -- Headers

    def count(self, count: Count | str) -> Query:
        """Request the total number of rows (``Prefer: count=...``).

        :param count: ``"exact"``, ``"planned"`` or ``"estimated"``.
        """
        return self._clone(count=Count(count))

    def returning(self, returning: Returning | str) -> Query:
        """Tell what a write request returns (``Prefer: return=...``).

        :param returning: ``"minimal"``, ``"headers-only"`` or ``"representation"``.
        """
        return self._clone(returning=Returning(returning))

    def on_conflict(self, resolution: ConflictResolution | str, column: str | None = None) -> Query:
        """Configure upserts.

        :param resolution: ``Prefer: resolution=`` value,
            ``"ignore-duplicates"`` or ``"merge-duplicates"``.
        :param column: The unique column for the ``on_conflict`` parameter.
        """
        return self._clone(resolution=ConflictResolution(resolution), on_conflict=column)

    def missing(self, missing: Missing | str = Missing.DEFAULT) -> Query:
        """Use column defaults for missing values in bulk inserts (``Prefer: missing=default``)."""
        return self._clone(missing=Missing(missing))

    def schema(self, schema: str) -> Query:
        """Use a different database schema than the default."""
        return self._clone(schema=schema)

    # -- Vertical filtering

    def select(self, selector) -> Query:
        """Select columns or embed other resources (vertical filtering).

        The selector can be:

        * ``"*"`` or a column name: ``"id"``.
        * A JSON path: ``"data->address->>city"``.
        * A column with modifiers: ``("id", {"name": "renamed", "cast": "text"})``.
        * Another query, to embed that resource: ``other_query.select("*")``.
        * A renamed embedding: ``(other_query, {"name": "renamed"})``.
        * A list of the above: ``["id", ("col", {"name": "c"}), other_query]``.

        Invalid shapes are reported when the query is compiled.
        """
        selectors = list(self._data.selectors)
        for item in parse_selectors(selector):
            if item not in selectors:
                selectors.append(item)
        return self._clone(selectors=tuple(selectors))

    def select_json(self, selector) -> Query:
        """Select JSON columns or paths.

        This is the same as :meth:`select`, but only accepts columns and
        ``->`` paths. The text variant ``->>`` is only accepted by :meth:`select`.
        """
        selectors = list(self._data.selectors)
        for item in parse_selectors(selector, json_only=True):
            if item not in selectors:
                selectors.append(item)
        return self._clone(selectors=tuple(selectors))

    # -- Horizontal filtering

    @property
    def not_(self) -> NegatedQuery:
        """Negate the next filter or logical operator.

        Example::

            query.not_.eq("id", 1)
            query.not_.or_([query.eq("id", 1), query.eq("id", 2)])
        """
        return NegatedQuery(self)

    def _add_filter(
        self, op: FilterOperator, column: str, value: FilterValue, negated=False
    ) -> Query:
        new_filter = Filter(op, column, value, negated)
        return self._clone(filters=self._data.filters + (new_filter,))

    def _add_group(self, op: LogicalOperator, queries: LogicalInput, negated=False) -> Query:
        if callable(queries):
            queries = queries(Query(self._data.resource))

        queries = tuple(queries)
        for query in queries:
            if not isinstance(query, Query):
                raise TypeError(f"Expected Query objects for '{op.value}', got {query!r}")

        group = LogicalGroup(op, queries, negated)
        if op == LogicalOperator.AND:
            return self._clone(and_groups=self._data.and_groups + (group,))
        else:
            return self._clone(or_groups=self._data.or_groups + (group,))

    # -- Ordering and pagination

    def order(self, order: Iterable[Order | Mapping | str] | Order | Mapping | str) -> Query:
        """Add ordering keys. The first key is the primary sort key.

        Example::

            query.order([
                {"column": "name", "direction": "desc", "nulls": "first"},
                {"column": "id"},
            ])

        A column path such as ``"director.last_name"`` orders by a column of an
        embedded resource. Setting ``"top": True`` on an embedded query
        has the same effect, but those keys are always placed after the keys
        of the root query. Use the column path to make an embedded column
        the primary sort key.
        """
        if isinstance(order, (Order, Mapping, str)):
            order = [order]
        return self._clone(ordering=self._data.ordering + tuple(map(Order.from_value, order)))

    def offset(self, offset: int) -> Query:
        """Skip a number of rows."""
        return self._clone(offset=index(offset))

    def limit(self, limit: int) -> Query:
        """Limit the number of rows."""
        return self._clone(limit=index(limit))

    def page(self, page: int, page_size: int | None = None) -> Query:
        """Fetch a page of results. This sets both ``offset`` and ``limit``.

        :param page: The zero-based page index.
        :param page_size: The number of rows per page.
        """
        if page_size is None:
            page_size = conf.PGRESTCLIENT_DEFAULT_PAGE_SIZE
        page = index(page)
        page_size = index(page_size)
        return self._clone(offset=page * page_size, limit=page_size)

    # -- Write requests

    def columns(self, columns: Iterable[str]) -> Query:
        """Limit which columns of the request body are inserted/updated."""
        if isinstance(columns, str):
            columns = [columns]
        return self._clone(columns=self._data.columns + tuple(columns))

    # -- Output

    def to_object(self) -> dict:
        """Return all query parameters as JSON-serializable data.

        This can be used to store a query, or to create a cache key.
        Optional settings which are not set are omitted.

        :raises InvalidSelect: When a selector has an unrecognized shape.
        """
        data = self._data
        result = {
            "resource": data.resource,
            "cardinality": data.cardinality.value,
            "select": [selector.as_object() for selector in data.selectors],
        }
        for op in FilterOperator:
            result[op.value] = [f.as_object() for f in data.filters if f.operator == op]

        result["and"] = [group.as_object() for group in data.and_groups]
        result["or"] = [group.as_object() for group in data.or_groups]
        result["order"] = [order.as_object() for order in data.ordering]
        result["offset"] = data.offset
        if data.limit is not None:
            result["limit"] = data.limit

        for name in ("count", "returning", "resolution", "missing"):
            value = getattr(data, name)
            if value is not None:
                result[name] = value.value
        if data.schema is not None:
            result["schema"] = data.schema
        if data.on_conflict is not None:
            result["on_conflict"] = data.on_conflict

        result["columns"] = list(data.columns)
        result["inner"] = data.inner
        return result

    def to_json(self) -> bytes:
        """Return :meth:`to_object` as JSON, e.g. to use as cache key."""
        return orjson.dumps(self.to_object(), default=str, option=orjson.OPT_SORT_KEYS)

    def to_string(self, encoded: bool | None = None) -> str:
        """Build the query string.

        :param encoded: Whether the string is URL encoded.
            Unencoded strings are easier to read while debugging.
            By default, the ``PGRESTCLIENT_ENCODE_QUERY_STRINGS`` setting is used.
        :raises QueryBuildError: When the query can't be compiled.
        """
        from .compiler import QueryCompiler

        if encoded is None:
            encoded = conf.PGRESTCLIENT_ENCODE_QUERY_STRINGS
        return QueryCompiler(self).to_string(encoded=encoded)


class NegatedQuery(FilterMethods):
    """The result of :attr:`Query.not_`.

    It only offers the filter methods. Each call returns a new :class:`Query`
    with that one filter (or logical group) negated. The original query is
    unchanged, so storing ``query.not_`` and calling it twice gives two
    separate queries that each have one negated filter.
    """

    def __init__(self, query: Query):
        self._query = query

    def __repr__(self):
        return f"<{self.__class__.__name__}: {self._query!r}>"

    def _add_filter(self, op: FilterOperator, column: str, value: FilterValue) -> Query:
        return self._query._add_filter(op, column, value, negated=True)

    def _add_group(self, op: LogicalOperator, queries: LogicalInput) -> Query:
        return self._query._add_group(op, queries, negated=True)
